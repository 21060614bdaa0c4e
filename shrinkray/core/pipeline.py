"""
Transcode decision pipeline: fetch, guard animations, transcode, compare.

`TranscodePipeline.run` never raises for pipeline failures; they come back as
a `Fallback` outcome so the HTTP layer can apply the configured policy.
"""

import asyncio
import logging
import time
from typing import Optional

from .codec import open_image
from .config import TranscodeConfig
from .errors import InternalError, TranscodeError
from .fetcher import ImageFetcher
from .models import (
    Compressed,
    Fallback,
    FetchResult,
    ImageInfo,
    Passthrough,
    Timings,
    TranscodeOutcome,
)
from .outcome_metrics import record_outcome
from .transcoder import Transcoder

logger = logging.getLogger(__name__)

ANIMATION = "animation"
ORIGINAL_SMALLER = "original_smaller"


def _ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


class TranscodePipeline:
    def __init__(self, fetcher: Optional[ImageFetcher] = None, transcoder: Optional[Transcoder] = None):
        self.fetcher = fetcher or ImageFetcher()
        self.transcoder = transcoder or Transcoder()

    async def run(self, url: str, config: TranscodeConfig) -> TranscodeOutcome:
        started = time.perf_counter()
        fetch_ms = 0.0
        fetched: Optional[FetchResult] = None
        info: Optional[ImageInfo] = None
        try:
            fetched = await self.fetcher.fetch(url, config)
            fetch_ms = _ms(started)

            transcode_started = time.perf_counter()
            image, info = await asyncio.to_thread(open_image, fetched.data)
            if info.animated:
                logger.info("[pipeline] %s is animated (%d frames), passing through", url, info.frames)
                outcome = Passthrough(
                    data=fetched.data,
                    content_type=fetched.content_type,
                    reason=ANIMATION,
                    source=info,
                    timings=Timings(fetch_ms=fetch_ms, total_ms=_ms(started)),
                )
                record_outcome(outcome)
                return outcome

            encoded = await self.transcoder.transcode(image, config)
            timings = Timings(fetch_ms=fetch_ms, transcode_ms=_ms(transcode_started), total_ms=_ms(started))

            if encoded.size < fetched.size:
                outcome = Compressed(
                    data=encoded.data,
                    content_type=encoded.content_type,
                    original_size=fetched.size,
                    compressed_size=encoded.size,
                    codec=encoded.codec,
                    quality=encoded.quality,
                    policy=config.codec_policy,
                    source=info,
                    timings=timings,
                )
            else:
                outcome = Passthrough(
                    data=fetched.data,
                    content_type=fetched.content_type,
                    reason=ORIGINAL_SMALLER,
                    candidate_size=encoded.size,
                    policy=config.codec_policy,
                    source=info,
                    timings=timings,
                )
        except TranscodeError as exc:
            logger.warning(
                "[pipeline] fallback for %s: %s (%s)",
                url,
                exc.kind,
                exc.message,
                extra={"url": url, "reason": exc.kind},
            )
            outcome = self._fallback(exc, fetched, info, fetch_ms, started)
        except Exception as exc:
            logger.exception("[pipeline] unexpected failure for %s", url, extra={"url": url, "reason": InternalError.kind})
            outcome = self._fallback(InternalError(str(exc)), fetched, info, fetch_ms, started)

        record_outcome(outcome)
        return outcome

    @staticmethod
    def _fallback(
        error: TranscodeError,
        fetched: Optional[FetchResult],
        info: Optional[ImageInfo],
        fetch_ms: float,
        started: float,
    ) -> Fallback:
        return Fallback(
            error=error,
            original_size=fetched.size if fetched else None,
            source=info,
            timings=Timings(fetch_ms=fetch_ms, total_ms=_ms(started)),
        )
