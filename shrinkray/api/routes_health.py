from typing import Any, Dict

from fastapi import APIRouter, Depends
from PIL import features

from ..core.config import Settings
from ..core.outcome_metrics import get_outcome_metrics
from .images import get_settings

router = APIRouter(tags=["health"])


def codec_support() -> Dict[str, bool]:
    return {
        "avif": bool(features.check("avif")),
        "webp": bool(features.check("webp")),
    }


@router.get("/health")
async def health(app_settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    codecs = codec_support()
    config = app_settings.transcode_config()
    if config.codec_policy == "race":
        needed = ["avif", "webp"]
    else:
        needed = [config.codec]
    return {
        "status": "ok" if all(codecs[name] for name in needed) else "degraded",
        "codecs": codecs,
        "config": config.model_dump(),
        "outcomes": get_outcome_metrics(),
    }
