from __future__ import annotations

import dataclasses
import logging
import os
import re
import time
from pathlib import Path

from ..cache import TTLCache
from ..enrichment import (
    enrich_session_agent,
    enrich_session_current_task,
    enrich_session_description,
    enrich_session_title,
)
from ..models import Session, Thresholds
from ..parsers import RawSessionFile
from ..storage import (
    SESSION_PREFIX,
    list_prefixed_files,
    list_subdirectories,
    read_json_object,
    session_root,
)

logger = logging.getLogger(__name__)

_SUBAGENT_PATTERN = re.compile(r"@(\w+)\s+subagent", re.IGNORECASE)
_SUBAGENT_MARKER_PATTERN = re.compile(r"\s*\(@\w+\s+subagent\)", re.IGNORECASE)

_RESEARCH_KEYWORDS = ("research", "explore", "investigate")
_PLANNING_KEYWORDS = ("plan", "design", "phase")
_IMPLEMENTING_KEYWORDS = ("implement", "fix", "add")
_DONE_KEYWORDS = ("complete", "done", "verify")


def discover_local_sessions(
    storage_root: Path,
    thresholds: Thresholds,
    cache: TTLCache,
    include_details: bool = True,
    now_ms: int | None = None,
) -> list[Session]:
    """Build sessions for every project directory under ``<storage_root>/session``."""
    storage_root = Path(storage_root)
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    projects = list_subdirectories(session_root(storage_root))
    if projects is None:
        return []

    sessions: list[Session] = []
    for project_dir in projects:
        session_files = list_prefixed_files(project_dir, SESSION_PREFIX)
        if session_files is None:
            continue
        for session_file in session_files:
            raw = read_json_object(session_file)
            if raw is None:
                continue
            record = RawSessionFile.from_dict(raw, fallback_id=session_file.stem)
            session = build_session(record, thresholds, now_ms)
            sessions.append(
                _enrich(session, storage_root, cache, include_details=include_details)
            )

    logger.debug("Discovered %d sessions under %s", len(sessions), storage_root)
    return sessions


def build_session(record: RawSessionFile, thresholds: Thresholds, now_ms: int) -> Session:
    """Base session record with status, phase and subagent fields derived."""
    age_minutes = max((now_ms - record.updated) // 60000, 0)
    title = record.title or ""
    status = determine_status(age_minutes, thresholds)
    phase = determine_phase(title, age_minutes, thresholds)
    agent, is_subagent, description = parse_subagent(title)

    return Session(
        id=record.id,
        slug=record.slug or "unknown",
        title=record.title,
        description=description,
        directory=record.directory,
        project_name=os.path.basename(record.directory) if record.directory else "unknown",
        updated=record.updated,
        age_minutes=age_minutes,
        status=status,
        phase=phase,
        agent=agent,
        is_subagent=is_subagent,
        parent_id=record.parent_id,
        version=record.version,
        summary=record.summary,
    )


def determine_status(age_minutes: float, thresholds: Thresholds) -> str:
    if age_minutes < thresholds.busy_minutes:
        return "busy"
    if age_minutes < thresholds.stale_minutes:
        return "idle"
    return "stale"


def determine_phase(title: str | None, age_minutes: float, thresholds: Thresholds) -> str:
    """Classify the work phase from title keywords; first matching rule wins."""
    text = (title or "").lower()
    busy = age_minutes < thresholds.busy_minutes

    if _contains_any(text, _RESEARCH_KEYWORDS):
        return "research"
    if _contains_any(text, _PLANNING_KEYWORDS):
        return "planning"
    if busy and _contains_any(text, _IMPLEMENTING_KEYWORDS):
        return "implementing"
    if _contains_any(text, _DONE_KEYWORDS):
        return "done"
    return "implementing" if busy else "done"


def parse_subagent(title: str) -> tuple[str, bool, str]:
    """Return ``(agent, is_subagent, description)`` for a session title.

    Subagent sessions carry a ``(@name subagent)`` marker which is stripped
    from the description.
    """
    match = _SUBAGENT_PATTERN.search(title)
    if not match:
        return "general", False, title
    description = _SUBAGENT_MARKER_PATTERN.sub("", title, count=1).strip()
    return match.group(1), True, description


def _enrich(
    session: Session,
    storage_root: Path,
    cache: TTLCache,
    include_details: bool,
) -> Session:
    # Subagent identity comes from the title marker and is never overridden.
    if not session.is_subagent:
        session = enrich_session_agent(session, storage_root, cache)
    session = enrich_session_title(session, storage_root, cache)
    if not session.is_subagent:
        session = dataclasses.replace(session, description=session.title)
    if include_details:
        session = enrich_session_description(session, storage_root, cache)
        session = enrich_session_current_task(session, storage_root, cache)
    return session


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)
