"""
Image compression proxy endpoint.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..core.config import Settings, settings
from ..core.errors import InvalidUrl, MissingParameter, RequestError
from ..core.pipeline import TranscodePipeline
from .responses import render_outcome, send_debug

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])

_pipeline = TranscodePipeline()


def get_settings() -> Settings:
    return settings


def get_pipeline() -> TranscodePipeline:
    return _pipeline


def validate_source_url(url: Optional[str]) -> str:
    if url is None or not url.strip():
        raise MissingParameter("Missing url parameter")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrl("url must be an absolute http(s) URL")
    return url


def _client_error(exc: RequestError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.message, "kind": exc.kind})


@router.get("/api/compress")
async def compress_image(
    url: Optional[str] = Query(None, description="Source image URL"),
    mode: str = Query("strict", pattern="^(strict|relaxed)$", description="Target size for the search policy"),
    policy: Optional[str] = Query(None, pattern="^(single|race|target)$", description="Codec policy override"),
    debug: bool = Query(False, description="Return a JSON report instead of the image"),
    app_settings: Settings = Depends(get_settings),
    pipeline: TranscodePipeline = Depends(get_pipeline),
):
    try:
        source_url = validate_source_url(url)
    except RequestError as exc:
        return _client_error(exc)

    try:
        config = app_settings.transcode_config(mode).with_overrides(codec_policy=policy)
    except ValidationError as exc:
        logger.error("[images] invalid transcode config: %s", exc)
        return JSONResponse(status_code=400, content={"error": "Invalid transcode options", "kind": "InvalidOptions"})

    outcome = await pipeline.run(source_url, config)
    if debug:
        return send_debug(source_url, outcome)
    return render_outcome(source_url, outcome, config, app_settings.PLACEHOLDER_PATH)


@router.get("/favicon.ico", include_in_schema=False)
async def favicon() -> Response:
    return Response(status_code=204)
