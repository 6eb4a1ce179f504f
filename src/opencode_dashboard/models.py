# ABOUTME: Normalized session record and classification thresholds.
# ABOUTME: Session.to_dict() produces the camelCase JSON served to the dashboard.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .parsers import SessionSummary

STATUSES = ("busy", "idle", "stale")
PHASES = ("research", "planning", "implementing", "done")


@dataclass(frozen=True)
class Thresholds:
    """Age limits, in minutes, separating busy, idle and stale sessions."""

    busy_minutes: float = 5
    stale_minutes: float = 30


@dataclass
class Session:
    """A coding-agent session as shown on the dashboard.

    Rebuilt from disk on every discovery pass. ``parent_id`` is only a lookup
    key for the parent session's ``id``.
    """

    id: str
    slug: str
    title: str | None
    description: str | None
    directory: str | None
    project_name: str
    updated: int
    age_minutes: int
    status: str
    phase: str
    agent: str = "general"
    is_subagent: bool = False
    parent_id: str | None = None
    version: str | None = None
    summary: SessionSummary = field(default_factory=SessionSummary)
    detailed_description: str | None = None
    current_task: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "detailedDescription": self.detailed_description,
            "currentTask": self.current_task,
            "directory": self.directory,
            "projectName": self.project_name,
            "updated": self.updated,
            "ageMinutes": self.age_minutes,
            "status": self.status,
            "phase": self.phase,
            "agent": self.agent,
            "isSubagent": self.is_subagent,
            "parentID": self.parent_id,
            "version": self.version,
            "summary": self.summary.to_dict(),
        }
