"""
Browser-like request header profiles.

Many image hosts refuse requests that do not look like a browser loading an
<img>. These profiles are a best-effort compatibility shim, not a guaranteed
way past hotlink protection; swap or extend them without touching the fetcher.
"""

from typing import Dict, Optional
from urllib.parse import urlparse

# Referer value meaning "the origin of the requested URL".
ORIGIN_REFERER = "origin"

HEADER_PROFILES: Dict[str, Dict[str, str]] = {
    "desktop": {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/138.0.0.0 Safari/537.36",
        "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
        "Accept-Language": "es-ES,es;q=0.9,en;q=0.8",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-Mode": "no-cors",
        "Sec-Fetch-Dest": "image",
        "Sec-CH-UA": '"Google Chrome";v="138", "Chromium";v="138", "Not?A_Brand";v="24"',
        "Sec-CH-UA-Mobile": "?0",
        "Sec-CH-UA-Platform": '"Windows"',
        "Referer": ORIGIN_REFERER,
    },
    "mobile": {
        "User-Agent": "Mozilla/5.0 (Linux; Android 10; K) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/137.0.0.0 Mobile Safari/537.36",
        "Accept": "image/webp,image/apng,image/*,*/*;q=0.8",
        "Upgrade-Insecure-Requests": "1",
        "Referer": ORIGIN_REFERER,
    },
    "search": {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/138.0.0.0 Safari/537.36",
        "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
        "Referer": "https://www.google.com/",
    },
}

DEFAULT_PROFILE = "desktop"


def origin_of(url: str) -> Optional[str]:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def build_headers(url: str, profile: str = DEFAULT_PROFILE) -> Dict[str, str]:
    """Return the header set for `profile`, with the origin referer resolved for `url`."""
    template = HEADER_PROFILES.get(profile) or HEADER_PROFILES[DEFAULT_PROFILE]
    headers = dict(template)
    if headers.get("Referer") == ORIGIN_REFERER:
        origin = origin_of(url)
        headers["Referer"] = f"{origin}/" if origin else "https://www.google.com/"
    return headers
