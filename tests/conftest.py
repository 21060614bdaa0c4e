"""
Shared fixtures: generated test images and a fake upstream image host.
"""

import asyncio
from io import BytesIO
from typing import List, Optional, Tuple

import httpx
import pytest
from PIL import Image

from shrinkray.core.config import TranscodeConfig

@pytest.fixture
def source_url() -> str:
    return "https://images.example.com/covers/cover.png"


def _png(im: Image.Image) -> bytes:
    buf = BytesIO()
    im.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def mpo_jpeg() -> bytes:
    """Two-picture MPO (stereo pair) built from noise."""
    left = Image.effect_noise((400, 300), 64).convert("RGB")
    right = Image.effect_noise((400, 300), 48).convert("RGB")
    buf = BytesIO()
    left.save(buf, format="MPO", save_all=True, append_images=[right], quality=95)
    return buf.getvalue()


@pytest.fixture
def noise_png() -> bytes:
    """Photo-like noise: PNG stores it badly, lossy codecs shrink it a lot."""
    return _png(Image.effect_noise((400, 300), 64).convert("RGB"))


@pytest.fixture
def solid_png() -> bytes:
    return _png(Image.new("RGB", (16, 16), (200, 30, 30)))


@pytest.fixture
def animated_gif() -> bytes:
    frames = [Image.new("RGB", (32, 32), color) for color in ((255, 0, 0), (0, 255, 0), (0, 0, 255))]
    buf = BytesIO()
    frames[0].save(buf, format="GIF", save_all=True, append_images=frames[1:], duration=100, loop=0)
    return buf.getvalue()


def make_upstream(
    body: bytes = b"",
    content_type: Optional[str] = "image/png",
    status: int = 200,
    head_length: Optional[int] = None,
    delay: float = 0.0,
) -> Tuple[httpx.MockTransport, List[httpx.Request]]:
    """Fake origin answering every request with `body`; returns the transport and the request log."""
    seen: List[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if delay:
            await asyncio.sleep(delay)
        headers = {}
        if content_type:
            headers["content-type"] = content_type
        if request.method == "HEAD":
            if head_length is not None:
                headers["content-length"] = str(head_length)
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, headers=headers, content=body)

    return httpx.MockTransport(handler), seen


@pytest.fixture
def upstream():
    return make_upstream


@pytest.fixture
def webp_config() -> TranscodeConfig:
    return TranscodeConfig(codec="webp", codec_policy="single", fetch_timeout=5.0)
