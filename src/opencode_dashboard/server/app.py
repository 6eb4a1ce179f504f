from __future__ import annotations

import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse

from ..browser import BrowserOpenError, open_url, session_url
from ..cache import TTLCache
from ..config import Settings
from ..loaders import discover_sessions
from .models import (
    DashboardConfigResponse,
    OpenSessionRequest,
    OpenSessionResponse,
    SessionResponse,
)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"
DASHBOARD_TITLE = "OpenCode Dashboard"

logger = logging.getLogger(__name__)


def create_app(settings: Settings, cache: TTLCache | None = None) -> FastAPI:
    app = FastAPI(title=DASHBOARD_TITLE)
    app.state.settings = settings
    app.state.cache = cache if cache is not None else TTLCache()

    @app.get("/", response_class=FileResponse)
    async def root() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/api/config", response_model=DashboardConfigResponse)
    async def get_config() -> DashboardConfigResponse:
        return DashboardConfigResponse(
            title=DASHBOARD_TITLE,
            refresh_interval_ms=app.state.settings.refresh_interval_ms,
            opencode_web_url=app.state.settings.web_url,
        )

    @app.get("/api/sessions", response_model=list[SessionResponse])
    async def list_sessions() -> list[dict[str, object]]:
        sessions = await run_in_threadpool(
            discover_sessions,
            app.state.settings.storage_path,
            app.state.settings.thresholds,
            app.state.cache,
        )
        return [session.to_dict() for session in sessions]

    @app.post(
        "/api/open-session",
        response_model=OpenSessionResponse,
        response_model_exclude_none=True,
    )
    async def open_session(request: OpenSessionRequest) -> object:
        url = session_url(app.state.settings.web_url, request.session_id)
        try:
            await run_in_threadpool(open_url, url)
        except BrowserOpenError as exc:
            logger.warning("Could not open session %s: %s", request.session_id, exc)
            payload = OpenSessionResponse(success=False, error=str(exc))
            return JSONResponse(status_code=500, content=payload.model_dump(exclude_none=True))
        return OpenSessionResponse(success=True, url=url)

    return app


def run_server(
    settings: Settings,
    cache: TTLCache | None = None,
    open_browser: bool = False,
) -> None:
    app = create_app(settings, cache)
    if open_browser:
        try:
            open_url(f"http://{settings.host}:{settings.port}")
        except BrowserOpenError as exc:
            logger.warning("Could not open browser: %s", exc)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="warning")
