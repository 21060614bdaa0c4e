"""
Debug report returned instead of image bytes when debugging is requested.
"""

from typing import Literal, Optional

from pydantic import BaseModel

from ..core.models import Compressed, Fallback, Passthrough, TranscodeOutcome

Decision = Literal["optimized", "passthrough", "fallback"]

_DETAILS = {
    "animation": "Passthrough: Animation detected",
    "original_smaller": "Passthrough: Original better",
}


class TimingReport(BaseModel):
    total_ms: float
    fetch_ms: float
    transcode_ms: float


class SizeReport(BaseModel):
    original: Optional[int] = None
    compressed: Optional[int] = None
    savings: Optional[int] = None


class SourceMetadata(BaseModel):
    format: Optional[str] = None
    width: int
    height: int
    frames: int = 1


class ErrorReport(BaseModel):
    kind: str
    stage: str
    message: str


class DebugReport(BaseModel):
    url: str
    decision: Decision
    detail: str
    policy: Optional[str] = None
    codec: Optional[str] = None
    quality: Optional[int] = None
    content_type: Optional[str] = None
    times: TimingReport
    sizes: SizeReport
    metadata: Optional[SourceMetadata] = None
    error: Optional[ErrorReport] = None

    @classmethod
    def from_outcome(cls, url: str, outcome: TranscodeOutcome) -> "DebugReport":
        timings = outcome.timings
        times = TimingReport(
            total_ms=timings.total_ms,
            fetch_ms=timings.fetch_ms,
            transcode_ms=timings.transcode_ms,
        )
        metadata = None
        if outcome.source is not None:
            metadata = SourceMetadata(
                format=outcome.source.format,
                width=outcome.source.width,
                height=outcome.source.height,
                frames=outcome.source.frames,
            )

        if isinstance(outcome, Compressed):
            return cls(
                url=url,
                decision="optimized",
                detail="Optimized",
                policy=outcome.policy,
                codec=outcome.codec,
                quality=outcome.quality,
                content_type=outcome.content_type,
                times=times,
                sizes=SizeReport(
                    original=outcome.original_size,
                    compressed=outcome.compressed_size,
                    savings=outcome.original_size - outcome.compressed_size,
                ),
                metadata=metadata,
            )
        if isinstance(outcome, Passthrough):
            compressed = outcome.candidate_size
            return cls(
                url=url,
                decision="passthrough",
                detail=_DETAILS.get(outcome.reason, "Passthrough"),
                policy=outcome.policy,
                content_type=outcome.content_type,
                times=times,
                sizes=SizeReport(
                    original=outcome.original_size,
                    compressed=compressed,
                    savings=outcome.original_size - compressed if compressed is not None else None,
                ),
                metadata=metadata,
            )
        if isinstance(outcome, Fallback):
            return cls(
                url=url,
                decision="fallback",
                detail="Error-Fallback",
                times=times,
                sizes=SizeReport(original=outcome.original_size),
                metadata=metadata,
                error=ErrorReport(
                    kind=outcome.error.kind,
                    stage=outcome.error.stage,
                    message=outcome.error.message,
                ),
            )
        raise TypeError(f"unknown outcome {type(outcome).__name__}")
