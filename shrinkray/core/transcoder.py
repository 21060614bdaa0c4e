"""
Candidate encoding and winner selection.

Three policies share the same preprocessing:

* single  - one encode at a fixed quality;
* race    - AVIF and WebP encoded concurrently, smaller one wins;
* target  - bounded binary search for the highest quality under a byte budget.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from PIL import Image

from .codec import encode_image, preprocess
from .config import TranscodeConfig
from .errors import EncodeError
from .models import EncodedImage, SearchResult

logger = logging.getLogger(__name__)

RACE_CODECS: Tuple[str, ...] = ("avif", "webp")

# (image, codec, quality, effort) -> EncodedImage
EncodeFn = Callable[[Image.Image, str, int, Optional[int]], EncodedImage]


def effort_for(codec: str, config: TranscodeConfig) -> int:
    return config.avif_speed if codec == "avif" else config.webp_method


def search_quality(
    encode: Callable[[int], EncodedImage],
    target_size: int,
    min_quality: int = 5,
    max_quality: int = 100,
    max_iterations: int = 8,
) -> SearchResult:
    """
    Find the highest quality whose encoded size fits `target_size`.

    Each probe is one full encode. When no probe fits, the `min_quality`
    encode is returned as a best effort instead of failing.
    """
    low, high = min_quality, max_quality
    best: Optional[EncodedImage] = None
    probed: Dict[int, EncodedImage] = {}

    for _ in range(max_iterations):
        quality = (low + high) // 2
        if quality < low:
            break
        candidate = encode(quality)
        probed[quality] = candidate
        if candidate.size <= target_size:
            best = candidate
            low = quality + 1
        else:
            high = quality - 1

    probes = len(probed)
    if best is not None:
        return SearchResult(image=best, met_target=True, probes=probes)

    logger.warning(
        "[transcode] target of %d bytes not reached, returning best effort (quality %d)",
        target_size,
        min_quality,
    )
    fallback = probed.get(min_quality)
    if fallback is None:
        fallback = encode(min_quality)
        probes += 1
    return SearchResult(image=fallback, met_target=False, probes=probes)


def pick_smallest(results: Sequence[Union[EncodedImage, BaseException]]) -> EncodedImage:
    """Smallest successful encode; earlier entries win ties."""
    winners: List[EncodedImage] = [result for result in results if isinstance(result, EncodedImage)]
    if not winners:
        errors = "; ".join(str(result) for result in results)
        raise EncodeError(f"every candidate encode failed: {errors}")
    return min(winners, key=lambda result: result.size)


async def race_codecs(
    image: Image.Image,
    config: TranscodeConfig,
    codecs: Sequence[str] = RACE_CODECS,
    encode: EncodeFn = encode_image,
) -> EncodedImage:
    """Encode every codec concurrently on its own copy of `image` and join them all."""
    tasks = [
        asyncio.to_thread(encode, image.copy(), codec, config.quality_for(codec), effort_for(codec, config))
        for codec in codecs
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    for codec, result in zip(codecs, results):
        if isinstance(result, BaseException):
            logger.warning("[transcode] %s candidate failed: %s", codec, result)
        else:
            logger.debug("[transcode] %s candidate: %d bytes", codec, result.size)
    return pick_smallest(results)


class Transcoder:
    """Run the configured policy over already-decoded image data."""

    def __init__(self, encode: EncodeFn = encode_image):
        self.encode = encode

    def prepare(self, image: Image.Image, config: TranscodeConfig) -> Image.Image:
        return preprocess(
            image,
            max_width=config.max_width,
            trim=config.trim_borders,
            trim_threshold=config.trim_threshold,
            quantize_colors=config.quantize_colors,
        )

    def encode_single(self, image: Image.Image, config: TranscodeConfig) -> EncodedImage:
        codec = config.codec
        return self.encode(image, codec, config.quality_for(codec), effort_for(codec, config))

    def encode_to_target(self, image: Image.Image, config: TranscodeConfig) -> EncodedImage:
        codec = config.codec
        effort = effort_for(codec, config)
        result = search_quality(
            lambda quality: self.encode(image, codec, quality, effort),
            target_size=config.target_size,
            min_quality=config.min_quality,
            max_quality=config.max_quality,
            max_iterations=config.search_iterations,
        )
        logger.debug(
            "[transcode] search settled on %s q=%d after %d probes (met=%s)",
            codec,
            result.image.quality,
            result.probes,
            result.met_target,
        )
        return result.image

    async def transcode(self, image: Image.Image, config: TranscodeConfig) -> EncodedImage:
        prepared = await asyncio.to_thread(self.prepare, image, config)
        if config.codec_policy == "race":
            return await race_codecs(prepared, config, encode=self.encode)
        if config.codec_policy == "target":
            return await asyncio.to_thread(self.encode_to_target, prepared, config)
        return await asyncio.to_thread(self.encode_single, prepared, config)
