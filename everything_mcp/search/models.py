"""
Everything search result types.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Protocol

from pydantic import BaseModel

# Windows FILETIME counts 100ns ticks since 1601-01-01 UTC.
_FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)


class SearchResult(BaseModel):
    path: str
    type: str = ""
    size: int = 0
    date: str = ""
    full_path: str = ""


class Searcher(Protocol):
    """What the tools need from a search backend."""

    def search(self, query: str, max_results: int = 100, context: Any = None) -> List[SearchResult]:
        ...


def coerce_size(value: Any) -> int:
    """Everything reports sizes as numbers or numeric strings; folders may omit them."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def filetime_to_iso(value: Any) -> str:
    if value in (None, ""):
        return ""
    try:
        ticks = int(value)
    except (TypeError, ValueError):
        return str(value)
    if ticks <= 0:
        return ""
    try:
        moment = _FILETIME_EPOCH + timedelta(microseconds=ticks // 10)
    except OverflowError:
        return ""
    return moment.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_full_path(path: Optional[str], name: Optional[str]) -> str:
    path = path or ""
    name = name or ""
    if path and name:
        return f"{path}\\{name}"
    return name or path
