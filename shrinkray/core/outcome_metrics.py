"""
Lightweight in-memory outcome counters for observability and tuning.
"""

from threading import Lock
from typing import Dict

from .models import Compressed, Fallback, Passthrough

_metrics_lock = Lock()
_metrics: Dict[str, Dict[str, int]] = {
    "optimized": {},
    "passthrough": {},
    "fallback": {},
}


def _record(category: str, key: str, saved_bytes: int = 0) -> None:
    bucket = _metrics.get(category)
    if bucket is None:
        return
    with _metrics_lock:
        bucket[key] = bucket.get(key, 0) + 1
        bucket["total"] = bucket.get("total", 0) + 1
        if saved_bytes:
            bucket["bytes_saved"] = bucket.get("bytes_saved", 0) + saved_bytes


def record_outcome(outcome) -> None:
    """Count one pipeline outcome under its decision and codec/reason."""
    if isinstance(outcome, Compressed):
        _record("optimized", outcome.codec, outcome.original_size - outcome.compressed_size)
    elif isinstance(outcome, Passthrough):
        _record("passthrough", outcome.reason)
    elif isinstance(outcome, Fallback):
        _record("fallback", outcome.reason)


def get_outcome_metrics() -> Dict[str, Dict[str, int]]:
    """Return a snapshot of current outcome metrics."""
    with _metrics_lock:
        return {category: dict(bucket) for category, bucket in _metrics.items()}


def reset_outcome_metrics() -> None:
    with _metrics_lock:
        for bucket in _metrics.values():
            bucket.clear()
