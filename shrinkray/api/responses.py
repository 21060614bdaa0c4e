"""
Turn pipeline outcomes into HTTP responses.
"""

from fastapi import Response
from fastapi.responses import JSONResponse, RedirectResponse

from ..core.config import TranscodeConfig
from ..core.models import Compressed, Fallback, Passthrough, TranscodeOutcome
from ..core.placeholder import load_placeholder
from ..schemas.report import DebugReport

CACHE_CONTROL = "s-maxage=31536000, stale-while-revalidate"
NO_STORE = "no-store"

STATUS_OPTIMIZED = "Optimized"
STATUS_ANIMATION = "Passthrough: Animation detected"
STATUS_ORIGINAL_BETTER = "Passthrough: Original better"
STATUS_FALLBACK = "Error-Fallback"


def send_compressed(outcome: Compressed) -> Response:
    return Response(
        content=outcome.data,
        media_type=outcome.content_type,
        headers={
            "Cache-Control": CACHE_CONTROL,
            "X-Original-Size": str(outcome.original_size),
            "X-Compressed-Size": str(outcome.compressed_size),
            "X-Image-Status": STATUS_OPTIMIZED,
        },
    )


def send_original(outcome: Passthrough) -> Response:
    status = STATUS_ANIMATION if outcome.reason == "animation" else STATUS_ORIGINAL_BETTER
    size = str(len(outcome.data))
    return Response(
        content=outcome.data,
        media_type=outcome.content_type,
        headers={
            "Cache-Control": CACHE_CONTROL,
            "X-Original-Size": size,
            "X-Compressed-Size": size,
            "X-Image-Status": status,
        },
    )


def _fallback_headers(outcome: Fallback) -> dict:
    return {
        "Cache-Control": NO_STORE,
        "X-Image-Status": STATUS_FALLBACK,
        "X-Fallback-Reason": outcome.error.kind,
        "X-Fallback-Stage": outcome.error.stage,
    }


def send_debug(url: str, outcome: TranscodeOutcome) -> JSONResponse:
    report = DebugReport.from_outcome(url, outcome)
    return JSONResponse(content=report.model_dump(), headers={"Cache-Control": NO_STORE})


def send_fallback(url: str, outcome: Fallback, config: TranscodeConfig, placeholder_path=None) -> Response:
    """Apply the configured fallback policy; never serves partial pipeline output."""
    if config.fallback_policy == "debug":
        response = send_debug(url, outcome)
        response.headers.update(_fallback_headers(outcome))
        return response
    if config.fallback_policy == "placeholder":
        data, media_type = load_placeholder(placeholder_path)
        return Response(content=data, media_type=media_type, headers=_fallback_headers(outcome))
    return RedirectResponse(url=url, status_code=302, headers=_fallback_headers(outcome))


def render_outcome(url: str, outcome: TranscodeOutcome, config: TranscodeConfig, placeholder_path=None) -> Response:
    if isinstance(outcome, Compressed):
        return send_compressed(outcome)
    if isinstance(outcome, Passthrough):
        return send_original(outcome)
    return send_fallback(url, outcome, config, placeholder_path)
