from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import click
import questionary
from click_default_group import DefaultGroup

from .browser import BrowserOpenError, open_url, session_url
from .cache import TTLCache
from .config import Settings, load_settings
from .formatters import format_age, format_sessions, render_sessions, render_sessions_table
from .loaders import discover_sessions, find_session
from .models import Session
from .server.app import run_server

storage_path_option = click.option(
    "--storage-path",
    type=click.Path(path_type=Path),
    default=None,
    help="OpenCode storage directory override",
)


@click.group(cls=DefaultGroup, default="serve", default_if_no_args=True)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Monitor OpenCode sessions via a web dashboard or the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--port", type=int, default=None, help="Port to serve on [default: 3003]")
@click.option("--host", default=None, help="Host to bind to [default: 127.0.0.1]")
@click.option("--open", "open_browser", is_flag=True, help="Open the dashboard in a browser")
@storage_path_option
def serve(port: int | None, host: str | None, open_browser: bool, storage_path: Path | None) -> None:
    """Launch the web dashboard."""
    settings = _settings(storage_path=storage_path, host=host, port=port)
    click.echo(f"OpenCode Dashboard running at http://{settings.host}:{settings.port}")
    click.echo(f"Monitoring OpenCode storage at: {settings.storage_path}")
    run_server(settings, TTLCache(), open_browser=open_browser)


@cli.command(name="list")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["rich", "table", "json", "csv"], case_sensitive=False),
    default="rich",
    show_default=True,
)
@click.option("--status", type=click.Choice(["busy", "idle", "stale"]), default=None)
@click.option("--no-details", is_flag=True, help="Skip description and current task extraction")
@storage_path_option
def list_sessions(
    output_format: str,
    status: str | None,
    no_details: bool,
    storage_path: Path | None,
) -> None:
    """List discovered sessions, most recently updated first."""
    settings = _settings(storage_path=storage_path)
    sessions = discover_sessions(
        settings.storage_path,
        settings.thresholds,
        include_details=not no_details,
    )
    if status:
        sessions = [session for session in sessions if session.status == status]
    payload = [session.to_dict() for session in sessions]

    formatted = format_sessions(payload, output_format)
    if formatted is not None:
        click.echo(formatted)
        return

    if not payload:
        click.echo(f"No OpenCode sessions found in {settings.storage_path}")
        return
    if output_format == "table":
        render_sessions_table(payload)
    else:
        render_sessions(payload)


@cli.command(name="open")
@click.argument("session_id", required=False)
@storage_path_option
def open_session(session_id: str | None, storage_path: Path | None) -> None:
    """Open a session in the OpenCode web UI."""
    settings = _settings(storage_path=storage_path)
    sessions = discover_sessions(settings.storage_path, settings.thresholds, include_details=False)

    if session_id is None:
        session_id = _select_session(sessions)
        if session_id is None:
            click.echo("No session selected.")
            return
    elif find_session(sessions, session_id) is None:
        click.echo(f"Warning: session {session_id} not found in {settings.storage_path}")

    url = session_url(settings.web_url, session_id)
    try:
        open_url(url)
    except BrowserOpenError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Opened {url}")


def _settings(
    storage_path: Path | None = None,
    host: str | None = None,
    port: int | None = None,
) -> Settings:
    settings = load_settings()
    overrides: dict[str, object] = {}
    if storage_path is not None:
        overrides["storage_path"] = storage_path.expanduser()
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    return dataclasses.replace(settings, **overrides)


def _select_session(sessions: list[Session]) -> str | None:
    if not sessions:
        click.echo("No sessions discovered. Use --storage-path or set OPENCODE_STORAGE_PATH.")
        return None

    choices = [
        questionary.Choice(title=_format_session_choice(session), value=session.id)
        for session in sessions[:50]
    ]
    return questionary.select("Select a session to open:", choices=choices).ask()


def _format_session_choice(session: Session) -> str:
    title = (session.title or session.slug).replace("\n", " ")
    title = title[:60] + ("..." if len(title) > 60 else "")
    return f"{session.status:<5}  {format_age(session.age_minutes):>9}  {title}  @{session.agent}"
