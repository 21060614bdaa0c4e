from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings

CodecName = Literal["avif", "webp"]
CodecPolicy = Literal["single", "race", "target"]
FallbackPolicy = Literal["redirect", "placeholder", "debug"]
SizeCheck = Literal["head", "download"]
TargetMode = Literal["strict", "relaxed"]


class TranscodeConfig(BaseModel):
    """Immutable knobs for one pipeline invocation."""

    model_config = ConfigDict(frozen=True)

    max_input_bytes: int = Field(default=30 * 1024 * 1024, ge=1)
    fetch_timeout: float = Field(default=15.0, gt=0)
    max_width: int = Field(default=1080, ge=1)

    codec_policy: CodecPolicy = "single"
    codec: CodecName = "avif"
    avif_quality: int = Field(default=55, ge=0, le=100)
    webp_quality: int = Field(default=75, ge=0, le=100)
    avif_speed: int = Field(default=6, ge=0, le=10)
    webp_method: int = Field(default=6, ge=0, le=6)

    target_size: Optional[int] = Field(default=None, ge=1)
    min_quality: int = Field(default=5, ge=0, le=100)
    max_quality: int = Field(default=100, ge=0, le=100)
    search_iterations: int = Field(default=8, ge=1, le=16)

    trim_borders: bool = True
    trim_threshold: int = Field(default=10, ge=0, le=255)
    quantize_colors: Optional[int] = Field(default=None, ge=2, le=256)

    fallback_policy: FallbackPolicy = "redirect"
    size_check: SizeCheck = "head"
    header_profile: str = "desktop"

    @model_validator(mode="after")
    def _check_ranges(self) -> "TranscodeConfig":
        if self.min_quality > self.max_quality:
            raise ValueError("min_quality must not exceed max_quality")
        if self.codec_policy == "target" and self.target_size is None:
            raise ValueError("target policy needs target_size")
        return self

    def quality_for(self, codec: CodecName) -> int:
        return self.avif_quality if codec == "avif" else self.webp_quality

    def with_overrides(self, **changes) -> "TranscodeConfig":
        """Copy with changes applied and validated again."""
        data = self.model_dump()
        data.update({key: value for key, value in changes.items() if value is not None})
        return TranscodeConfig(**data)


class Settings(BaseSettings):
    # Load env from .env file
    model_config = {"env_file": ".env", "extra": "ignore"}

    # Fetch
    MAX_INPUT_SIZE_BYTES: int = 30 * 1024 * 1024
    FETCH_TIMEOUT_SECONDS: float = 15.0
    SIZE_CHECK: SizeCheck = "head"
    HEADER_PROFILE: str = "desktop"

    # Transcode
    MAX_IMAGE_WIDTH: int = 1080
    CODEC_POLICY: CodecPolicy = "single"
    CODEC: CodecName = "avif"
    AVIF_QUALITY: int = 55
    WEBP_QUALITY: int = 75
    AVIF_SPEED: int = 6
    WEBP_METHOD: int = 6
    TRIM_BORDERS: bool = True
    TRIM_THRESHOLD: int = 10
    QUANTIZE_COLORS: Optional[int] = None

    # Size-targeted search
    TARGET_SIZE_STRICT: int = 100 * 1024
    TARGET_SIZE_RELAXED: int = 150 * 1024
    MIN_QUALITY: int = 5
    MAX_QUALITY: int = 100
    SEARCH_ITERATIONS: int = 8

    # Fallback
    FALLBACK_POLICY: FallbackPolicy = "redirect"
    PLACEHOLDER_PATH: Optional[str] = None

    # Service
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    def target_size_for(self, mode: TargetMode = "strict") -> int:
        return self.TARGET_SIZE_RELAXED if mode == "relaxed" else self.TARGET_SIZE_STRICT

    def transcode_config(self, mode: TargetMode = "strict") -> TranscodeConfig:
        return TranscodeConfig(
            max_input_bytes=self.MAX_INPUT_SIZE_BYTES,
            fetch_timeout=self.FETCH_TIMEOUT_SECONDS,
            max_width=self.MAX_IMAGE_WIDTH,
            codec_policy=self.CODEC_POLICY,
            codec=self.CODEC,
            avif_quality=self.AVIF_QUALITY,
            webp_quality=self.WEBP_QUALITY,
            avif_speed=self.AVIF_SPEED,
            webp_method=self.WEBP_METHOD,
            target_size=self.target_size_for(mode),
            min_quality=self.MIN_QUALITY,
            max_quality=self.MAX_QUALITY,
            search_iterations=self.SEARCH_ITERATIONS,
            trim_borders=self.TRIM_BORDERS,
            trim_threshold=self.TRIM_THRESHOLD,
            quantize_colors=self.QUANTIZE_COLORS,
            fallback_policy=self.FALLBACK_POLICY,
            size_check=self.SIZE_CHECK,
            header_profile=self.HEADER_PROFILE,
        )


# Instantiate settings
settings = Settings()
