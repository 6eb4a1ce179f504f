# ABOUTME: Cache-aware enrichment of sessions with content-derived metadata.
# ABOUTME: Cache keys embed the session's update timestamp so edits invalidate them.

from __future__ import annotations

import dataclasses
import re
from pathlib import Path

from .cache import MISSING, TTLCache
from .extractors import (
    detect_agent,
    extract_current_task,
    extract_semantic_title,
    extract_session_description,
)
from .models import Session

GENERIC_TITLE_PREFIX = "New session - "
_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


def is_generic_title(title: str | None) -> bool:
    """True for auto-generated titles such as ``New session - <timestamp>``."""
    if not title:
        return True
    return title.startswith(GENERIC_TITLE_PREFIX) or bool(_ISO_DATE_PREFIX.match(title))


def enrich_session_agent(session: Session, storage_root: Path, cache: TTLCache) -> Session:
    cache_key = f"agent_{session.id}_{session.updated}"
    agent = cache.get(cache_key)
    if agent is MISSING:
        agent = detect_agent(session.id, storage_root)
        cache.set(cache_key, agent)
    return dataclasses.replace(session, agent=agent)


def enrich_session_title(session: Session, storage_root: Path, cache: TTLCache) -> Session:
    if not is_generic_title(session.title):
        return session

    cache_key = f"title_{session.id}_{session.updated}"
    title = cache.get(cache_key)
    if title is MISSING:
        title = extract_semantic_title(session.id, storage_root)
        cache.set(cache_key, title)
    return dataclasses.replace(session, title=title or session.title)


def enrich_session_description(
    session: Session, storage_root: Path, cache: TTLCache
) -> Session:
    cache_key = f"desc_{session.id}_{session.updated}"
    description = cache.get(cache_key)
    if description is MISSING:
        description = extract_session_description(session.id, storage_root)
        cache.set(cache_key, description)
    return dataclasses.replace(
        session, detailed_description=description or session.description
    )


def enrich_session_current_task(
    session: Session, storage_root: Path, cache: TTLCache
) -> Session:
    cache_key = f"task_{session.id}_{session.updated}"
    task = cache.get(cache_key)
    if task is MISSING:
        task = extract_current_task(session.id, storage_root)
        cache.set(cache_key, task)
    return dataclasses.replace(session, current_task=task)
