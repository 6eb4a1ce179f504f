# ABOUTME: Read-only access to the OpenCode storage tree.
# ABOUTME: Lists prefixed JSON files and reads them, returning None on failure.

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SESSION_DIR = "session"
MESSAGE_DIR = "message"
PART_DIR = "part"

SESSION_PREFIX = "ses_"
MESSAGE_PREFIX = "msg_"
PART_PREFIX = "prt_"
JSON_SUFFIX = ".json"


def session_root(storage_root: Path) -> Path:
    return Path(storage_root) / SESSION_DIR


def message_dir(storage_root: Path, session_id: str) -> Path:
    return Path(storage_root) / MESSAGE_DIR / session_id


def part_dir(storage_root: Path, message_id: str) -> Path:
    return Path(storage_root) / PART_DIR / message_id


def list_subdirectories(path: Path) -> list[Path] | None:
    """Directories directly under ``path``, or None if it cannot be listed."""
    try:
        entries = sorted(path.iterdir())
    except OSError as exc:
        logger.debug("Cannot list %s: %s", path, exc)
        return None
    directories: list[Path] = []
    for entry in entries:
        try:
            if entry.is_dir():
                directories.append(entry)
        except OSError:
            continue
    return directories


def list_prefixed_files(path: Path, prefix: str) -> list[Path] | None:
    """``<prefix>*.json`` files under ``path`` sorted by name.

    Returns None when the directory is missing or unreadable so callers can
    tell "no directory" apart from "no matching files".
    """
    try:
        names = [entry.name for entry in path.iterdir()]
    except OSError as exc:
        logger.debug("Cannot list %s: %s", path, exc)
        return None
    return [path / name for name in sorted(names) if _matches(name, prefix)]


def read_json_object(path: Path) -> dict[str, Any] | None:
    """Parse ``path`` as a JSON object; None if unreadable, invalid or not an object."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    # ValueError covers decode errors and over-long integers; deep nesting
    # raises RecursionError.
    except (OSError, ValueError, RecursionError) as exc:
        logger.debug("Skipping unreadable record %s: %s", path, exc)
        return None
    if not isinstance(payload, dict):
        logger.debug("Skipping non-object record %s", path)
        return None
    return payload


def _matches(name: str, prefix: str) -> bool:
    return name.startswith(prefix) and name.endswith(JSON_SUFFIX)
