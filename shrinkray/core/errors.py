"""
Error kinds raised by the transcode pipeline.

Request errors (missing or unusable url) are reported to the caller as 400.
Every other kind is turned into the configured fallback response.
"""

from typing import Optional


class TranscodeError(Exception):
    kind = "TranscodeError"
    stage = "internal"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class RequestError(TranscodeError):
    stage = "request"


class MissingParameter(RequestError):
    kind = "MissingParameter"


class InvalidUrl(RequestError):
    kind = "InvalidUrl"


class FetchError(TranscodeError):
    stage = "fetch"


class FetchTimeout(FetchError):
    kind = "Timeout"


class UpstreamError(FetchError):
    """Non-2xx answer from the origin, or a transport failure when status is None."""

    kind = "UpstreamError"

    def __init__(self, status: Optional[int], message: str = ""):
        if not message:
            message = f"upstream answered {status}" if status is not None else "upstream unreachable"
        super().__init__(message)
        self.status = status


class NotAnImage(FetchError):
    kind = "NotAnImage"


class EmptyBody(FetchError):
    kind = "EmptyBody"


class TooLarge(FetchError):
    kind = "TooLarge"


class DecodeError(TranscodeError):
    kind = "DecodeError"
    stage = "decode"


class EncodeError(TranscodeError):
    kind = "EncodeError"
    stage = "transcode"


class InternalError(TranscodeError):
    kind = "InternalError"
    stage = "internal"
