"""
Error placeholder image served by the placeholder fallback policy.
"""

import logging
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageDraw, UnidentifiedImageError

logger = logging.getLogger(__name__)

PLACEHOLDER_SIZE = (320, 240)


def render_placeholder(size: Tuple[int, int] = PLACEHOLDER_SIZE) -> bytes:
    """Draw a grey card with a broken-image cross as PNG."""
    width, height = size
    im = Image.new("RGB", size, (229, 231, 235))
    draw = ImageDraw.Draw(im)
    draw.rectangle((0, 0, width - 1, height - 1), outline=(156, 163, 175), width=2)
    inset = min(width, height) // 4
    cx, cy = width // 2, height // 2
    draw.line((cx - inset, cy - inset, cx + inset, cy + inset), fill=(156, 163, 175), width=6)
    draw.line((cx - inset, cy + inset, cx + inset, cy - inset), fill=(156, 163, 175), width=6)
    buf = BytesIO()
    im.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


def _read_placeholder_file(path: Path) -> Tuple[bytes, str]:
    data = path.read_bytes()
    with Image.open(BytesIO(data)) as im:
        media_type = Image.MIME.get(im.format or "", "application/octet-stream")
    return data, media_type


@lru_cache(maxsize=4)
def load_placeholder(path: Optional[str] = None) -> Tuple[bytes, str]:
    """Return (bytes, media type) of the placeholder, rendering one if `path` is unusable."""
    if path:
        try:
            return _read_placeholder_file(Path(path))
        except (OSError, UnidentifiedImageError) as exc:
            logger.warning("[placeholder] cannot use %s: %s; rendering default", path, exc)
    return render_placeholder(), "image/png"
