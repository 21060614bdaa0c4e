"""
Value types passed between pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .errors import TranscodeError

CONTENT_TYPES = {
    "avif": "image/avif",
    "webp": "image/webp",
}


@dataclass(frozen=True)
class FetchResult:
    data: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ImageInfo:
    format: Optional[str]
    width: int
    height: int
    frames: int = 1
    # Multi-picture JPEGs (MPO) have several frames but are still photos.
    animated: bool = False


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    codec: str
    quality: int

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self.codec]


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a size-targeted quality search."""

    image: EncodedImage
    met_target: bool
    probes: int


@dataclass(frozen=True)
class Timings:
    fetch_ms: float = 0.0
    transcode_ms: float = 0.0
    total_ms: float = 0.0


@dataclass(frozen=True)
class Compressed:
    data: bytes
    content_type: str
    original_size: int
    compressed_size: int
    codec: str
    quality: int
    policy: str
    source: Optional[ImageInfo] = None
    timings: Timings = field(default_factory=Timings)


@dataclass(frozen=True)
class Passthrough:
    data: bytes
    content_type: str
    reason: str
    # Size of the best candidate that lost against the original, if any.
    candidate_size: Optional[int] = None
    policy: Optional[str] = None
    source: Optional[ImageInfo] = None
    timings: Timings = field(default_factory=Timings)

    @property
    def original_size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Fallback:
    error: TranscodeError
    original_size: Optional[int] = None
    source: Optional[ImageInfo] = None
    timings: Timings = field(default_factory=Timings)

    @property
    def reason(self) -> str:
        return self.error.kind


TranscodeOutcome = Union[Compressed, Passthrough, Fallback]
