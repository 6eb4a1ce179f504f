from __future__ import annotations

import webbrowser
from urllib.parse import quote


class BrowserOpenError(RuntimeError):
    """Raised when no browser could be launched for a URL."""


def session_url(web_url: str, session_id: str) -> str:
    return f"{web_url}?session={quote(session_id, safe='')}"


def open_url(url: str) -> None:
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        raise BrowserOpenError(str(exc)) from exc
    if not opened:
        raise BrowserOpenError(f"Failed to open URL: {url}")
