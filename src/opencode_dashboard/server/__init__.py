# ABOUTME: Web server package for the OpenCode dashboard.
# ABOUTME: Provides the FastAPI application and API endpoints.

from opencode_dashboard.server.app import create_app, run_server

__all__ = ["create_app", "run_server"]
