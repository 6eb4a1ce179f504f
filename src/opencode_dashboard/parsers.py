# ABOUTME: Parsing utilities for OpenCode storage records.
# ABOUTME: Turns raw session/message/part JSON into typed records and trims text.

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any

ELLIPSIS = "..."

_WHITESPACE_PATTERN = re.compile(r"\s+")
_LEADING_SENTENCE_PATTERN = re.compile(r"^[^.!?]+[.!?]")
_SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+")
_PARAGRAPH_BREAK_PATTERN = re.compile(r"\n\s*\n")


@dataclass
class SessionSummary:
    """Change statistics recorded on a session."""

    additions: int = 0
    deletions: int = 0
    files: int = 0

    @classmethod
    def from_dict(cls, raw: Any) -> SessionSummary:
        if not isinstance(raw, dict):
            return cls()
        return cls(
            additions=_coerce_int(raw.get("additions")),
            deletions=_coerce_int(raw.get("deletions")),
            files=_coerce_int(raw.get("files")),
        )

    def to_dict(self) -> dict[str, int]:
        return {"additions": self.additions, "deletions": self.deletions, "files": self.files}


@dataclass
class RawSessionFile:
    """A ``ses_*.json`` record as written by the agent."""

    id: str
    slug: str | None = None
    title: str | None = None
    directory: str | None = None
    updated: int = 0
    created: int = 0
    version: str | None = None
    summary: SessionSummary = field(default_factory=SessionSummary)
    parent_id: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any], fallback_id: str) -> RawSessionFile:
        time_info = raw.get("time") if isinstance(raw.get("time"), dict) else {}
        version = raw.get("version")
        return cls(
            id=_coerce_str(raw.get("id")) or sanitize_text(fallback_id),
            slug=_coerce_str(raw.get("slug")),
            title=_clean_text(raw.get("title")),
            directory=_coerce_str(raw.get("directory")),
            updated=_coerce_int(time_info.get("updated")),
            created=_coerce_int(time_info.get("created")),
            version=_clean_text(str(version)) if version is not None else None,
            summary=SessionSummary.from_dict(raw.get("summary")),
            parent_id=_coerce_str(raw.get("parentID")),
        )


@dataclass
class RawMessageFile:
    """A ``msg_*.json`` record. ``filename`` breaks ordering ties."""

    id: str | None
    role: str | None
    created: int
    agent: Any
    filename: str

    @classmethod
    def from_dict(cls, raw: dict[str, Any], filename: str) -> RawMessageFile:
        time_info = raw.get("time") if isinstance(raw.get("time"), dict) else {}
        return cls(
            id=_coerce_str(raw.get("id")),
            role=_clean_text(raw.get("role")),
            created=_coerce_int(time_info.get("created")),
            agent=raw.get("agent"),
            filename=filename,
        )


@dataclass
class RawPartFile:
    """A ``prt_*.json`` record; only text and tool parts carry content we use."""

    type: str | None
    text: str | None = None
    tool_description: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> RawPartFile:
        part_type = _clean_text(raw.get("type"))
        text = _clean_text(raw.get("text"))

        description = None
        state = raw.get("state")
        if isinstance(state, dict) and isinstance(state.get("input"), dict):
            description = _clean_text(state["input"].get("description"))
        return cls(type=part_type, text=text, tool_description=description)

    @property
    def content(self) -> str | None:
        """Displayable content: text for text parts, description for tool parts."""
        if self.type == "text" and self.text:
            return self.text
        if self.type == "tool" and self.tool_description:
            return self.tool_description
        return None


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def first_sentence_or_truncate(text: str | None, max_length: int = 60) -> str:
    """Return the leading sentence if it fits, else a word-boundary truncation.

    Truncated results end in ``...``; the word boundary is only used when it
    falls within the last 30% of the window.
    """
    if not text or not isinstance(text, str):
        return ""
    cleaned = collapse_whitespace(text)
    if not cleaned:
        return ""

    match = _LEADING_SENTENCE_PATTERN.match(cleaned)
    if match:
        sentence = match.group(0).strip()
        if len(sentence) <= max_length:
            return sentence

    if len(cleaned) <= max_length:
        return cleaned

    truncated = cleaned[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.7:
        return truncated[:last_space] + ELLIPSIS
    return truncated + ELLIPSIS


def first_sentences(text: str | None, count: int = 3) -> str:
    """Up to ``count`` sentences from the first paragraph, whitespace-normalized."""
    if not text or not isinstance(text, str):
        return ""
    paragraph = _PARAGRAPH_BREAK_PATTERN.split(text.strip(), maxsplit=1)[0]
    cleaned = collapse_whitespace(paragraph)
    if not cleaned:
        return ""
    sentences = [s.strip() for s in _SENTENCE_PATTERN.findall(cleaned)]
    if not sentences:
        return cleaned
    return " ".join(sentences[:count])


def first_sentence_or_clip(text: str | None, max_length: int = 80) -> str:
    """Leading sentence of ``text``; without one, clip to ``max_length`` chars."""
    if not text or not isinstance(text, str):
        return ""
    cleaned = collapse_whitespace(text)
    match = _LEADING_SENTENCE_PATTERN.match(cleaned)
    if match:
        return match.group(0).strip()
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[:max_length] + ELLIPSIS


def sanitize_text(text: str) -> str:
    """Replace lone surrogates, which JSON allows but UTF-8 cannot encode."""
    return text.encode("utf-8", "replace").decode("utf-8")


def _clean_text(value: Any) -> str | None:
    return sanitize_text(value) if isinstance(value, str) else None


def _coerce_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = sanitize_text(str(value))
    return text or None


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return int(value)
