from __future__ import annotations

import csv
import io
import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

STATUS_STYLES = {"busy": "blue", "idle": "green", "stale": "bright_black"}

CSV_FIELDS = [
    "id",
    "title",
    "status",
    "phase",
    "agent",
    "isSubagent",
    "projectName",
    "ageMinutes",
    "currentTask",
    "additions",
    "deletions",
    "files",
]


def format_sessions(sessions: list[dict[str, Any]], output_format: str) -> str | None:
    if output_format == "json":
        return json.dumps(sessions, ensure_ascii=True, default=str)
    if output_format == "csv":
        return _sessions_to_csv(sessions)
    return None


def format_age(minutes: int) -> str:
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    return f"{minutes // 60}h ago"


def render_sessions(sessions: list[dict[str, Any]], console: Console | None = None) -> None:
    console = console or Console()
    for session in sessions:
        status = session.get("status", "")
        agent = f"@{session.get('agent', 'general')}"
        if session.get("isSubagent"):
            agent += " (subagent)"
        header = f"{session.get('title') or session.get('slug')} | {status} | {session.get('phase')}"
        lines = [
            session.get("detailedDescription") or session.get("description") or "",
            f"{agent}  {session.get('projectName')}  {format_age(session.get('ageMinutes', 0))}",
        ]
        if session.get("currentTask"):
            lines.append(f"Now: {session['currentTask']}")
        console.print(
            Panel(
                "\n".join(lines),
                title=header,
                border_style=STATUS_STYLES.get(status, "cyan"),
            )
        )


def render_sessions_table(sessions: list[dict[str, Any]], console: Console | None = None) -> None:
    console = console or Console()
    table = Table(title="OpenCode Sessions")
    table.add_column("Session", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Status", style="magenta")
    table.add_column("Phase", style="magenta")
    table.add_column("Agent", style="green")
    table.add_column("Project", style="white")
    table.add_column("Updated", style="white")

    for session in sessions:
        table.add_row(
            str(session.get("id", ""))[:12],
            (session.get("title") or session.get("slug") or "")[:60],
            session.get("status", ""),
            session.get("phase", ""),
            session.get("agent", ""),
            session.get("projectName", ""),
            format_age(session.get("ageMinutes", 0)),
        )
    console.print(table)


def _sessions_to_csv(sessions: list[dict[str, Any]]) -> str:
    if not sessions:
        return ""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDS, extrasaction="ignore")
    writer.writeheader()
    for session in sessions:
        row = dict(session)
        row.update(session.get("summary") or {})
        writer.writerow(row)
    return output.getvalue()
