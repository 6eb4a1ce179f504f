# ABOUTME: Derives display metadata for a session from its message history.
# ABOUTME: Agent tag, semantic title, description and current task extraction.

from __future__ import annotations

from pathlib import Path

from .parsers import (
    RawMessageFile,
    RawPartFile,
    first_sentence_or_clip,
    first_sentence_or_truncate,
    first_sentences,
    sanitize_text,
)
from .storage import (
    MESSAGE_PREFIX,
    PART_PREFIX,
    list_prefixed_files,
    message_dir,
    part_dir,
    read_json_object,
)

DEFAULT_AGENT = "general"
TITLE_MAX_LENGTH = 60
DESCRIPTION_SENTENCES = 3
TASK_MAX_LENGTH = 80


def detect_agent(session_id: str, storage_root: Path) -> str:
    """Agent tag recorded on the first message file of the session.

    Message files are named with monotonically increasing ids, so the
    lexicographically first file is the earliest message.
    """
    files = list_prefixed_files(message_dir(storage_root, session_id), MESSAGE_PREFIX)
    if not files:
        return DEFAULT_AGENT

    raw = read_json_object(files[0])
    if raw is None:
        return DEFAULT_AGENT

    agent = raw.get("agent")
    if not agent or isinstance(agent, (dict, list)):
        return DEFAULT_AGENT
    normalized = sanitize_text(str(agent)).lower().strip()
    return normalized or DEFAULT_AGENT


def extract_semantic_title(session_id: str, storage_root: Path) -> str | None:
    text = _first_user_text(session_id, storage_root)
    if text is None:
        return None
    return first_sentence_or_truncate(text, TITLE_MAX_LENGTH) or None


def extract_session_description(session_id: str, storage_root: Path) -> str | None:
    text = _first_user_text(session_id, storage_root)
    if text is None:
        return None
    return first_sentences(text, DESCRIPTION_SENTENCES) or None


def extract_current_task(session_id: str, storage_root: Path) -> str | None:
    """What the latest assistant message says it is working on."""
    messages = load_messages(session_id, storage_root)
    assistant = next(
        (m for m in reversed(messages) if m.role == "assistant" and m.id),
        None,
    )
    if assistant is None:
        return None

    units = [part.content for part in load_parts(assistant.id, storage_root)]
    units = [unit for unit in units if unit]
    if not units:
        return None
    return first_sentence_or_clip(units[0], TASK_MAX_LENGTH) or None


def load_messages(session_id: str, storage_root: Path) -> list[RawMessageFile]:
    """Parsed message records ordered oldest first; unparsable files are skipped."""
    files = list_prefixed_files(message_dir(storage_root, session_id), MESSAGE_PREFIX)
    if not files:
        return []

    messages: list[RawMessageFile] = []
    for path in files:
        raw = read_json_object(path)
        if raw is None:
            continue
        messages.append(RawMessageFile.from_dict(raw, filename=path.name))
    messages.sort(key=lambda m: (m.created, m.filename))
    return messages


def load_parts(message_id: str, storage_root: Path) -> list[RawPartFile]:
    files = list_prefixed_files(part_dir(storage_root, message_id), PART_PREFIX)
    if not files:
        return []

    parts: list[RawPartFile] = []
    for path in files:
        raw = read_json_object(path)
        if raw is None:
            continue
        parts.append(RawPartFile.from_dict(raw))
    return parts


def _first_user_text(session_id: str, storage_root: Path) -> str | None:
    messages = load_messages(session_id, storage_root)
    first_user = next((m for m in messages if m.role == "user"), None)
    if first_user is None or not first_user.id:
        return None

    for part in load_parts(first_user.id, storage_root):
        if part.type == "text" and part.text:
            return part.text
    return None
