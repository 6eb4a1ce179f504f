# ABOUTME: Pydantic models for API request/response validation.
# ABOUTME: Defines the session payload, dashboard config and open-session schemas.

from pydantic import BaseModel, ConfigDict, Field


class SummaryResponse(BaseModel):
    """Change statistics for a session."""

    additions: int = 0
    deletions: int = 0
    files: int = 0


class SessionResponse(BaseModel):
    """An enriched session as rendered by the dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    slug: str
    title: str | None
    description: str | None
    detailed_description: str | None = Field(None, alias="detailedDescription")
    current_task: str | None = Field(None, alias="currentTask")
    directory: str | None
    project_name: str = Field(alias="projectName")
    updated: int
    age_minutes: int = Field(alias="ageMinutes")
    status: str
    phase: str
    agent: str
    is_subagent: bool = Field(alias="isSubagent")
    parent_id: str | None = Field(None, alias="parentID")
    version: str | None = None
    summary: SummaryResponse


class DashboardConfigResponse(BaseModel):
    """Settings the dashboard page needs at load time."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    refresh_interval_ms: int = Field(alias="refreshIntervalMs")
    opencode_web_url: str = Field(alias="opencodeWebUrl")


class OpenSessionRequest(BaseModel):
    """Request to open a session in the OpenCode web UI."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId", min_length=1)


class OpenSessionResponse(BaseModel):
    """Outcome of an open-session request."""

    success: bool
    url: str | None = None
    error: str | None = None
