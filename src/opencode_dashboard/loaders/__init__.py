from __future__ import annotations

from pathlib import Path

from ..cache import TTLCache
from ..models import Session, Thresholds
from .local import discover_local_sessions

__all__ = ["discover_sessions", "find_session"]


def discover_sessions(
    storage_root: Path,
    thresholds: Thresholds,
    cache: TTLCache | None = None,
    *,
    include_details: bool = True,
    now_ms: int | None = None,
) -> list[Session]:
    """Discover and enrich every session under ``storage_root``, newest first.

    Never raises for missing or malformed storage: unreadable pieces are
    skipped. Pass a long-lived ``cache`` to reuse enrichment across calls.
    """
    if cache is None:
        cache = TTLCache()
    sessions = discover_local_sessions(
        Path(storage_root),
        thresholds,
        cache,
        include_details=include_details,
        now_ms=now_ms,
    )
    sessions.sort(key=_sort_key, reverse=True)
    return sessions


def find_session(sessions: list[Session], session_id: str) -> Session | None:
    for session in sessions:
        if session.id == session_id:
            return session
    return None


def _sort_key(session: Session) -> int:
    return session.updated
