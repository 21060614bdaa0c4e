"""
Recent log entries kept by the in-memory log buffer.
"""

from typing import Any, Dict

from fastapi import APIRouter, Query

from ..core.log_buffer import PIPELINE_LOGGERS, clear_log_entries, get_log_entries

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
@router.get("/")
async def get_logs(
    since_id: int | None = Query(None, ge=0),
    limit: int = Query(200, ge=1, le=2000),
    scope: str = Query("all", pattern="^(all|pipeline|errors)$"),
) -> Dict[str, Any]:
    items, last_id = get_log_entries(since_id, limit)
    if scope == "pipeline":
        items = [entry for entry in items if str(entry.get("logger") or "").startswith(PIPELINE_LOGGERS)]
    elif scope == "errors":
        items = [entry for entry in items if str(entry.get("level") or "").upper() in {"ERROR", "WARNING"}]
    return {"items": items, "last_id": last_id}


@router.post("/clear")
async def clear_logs() -> Dict[str, Any]:
    clear_log_entries()
    return {"cleared": True}
