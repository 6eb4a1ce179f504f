from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from opencode_dashboard.browser import BrowserOpenError
from opencode_dashboard.cache import TTLCache
from opencode_dashboard.config import Settings
from opencode_dashboard.server import app as server_app
from opencode_dashboard.server.app import create_app


def _write(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    root = tmp_path / "storage"
    _write(
        root / "session" / "proj" / "ses_abc.json",
        {
            "id": "ses_abc",
            "slug": "calm-river",
            "title": "New session - 2026-01-28T10:16:06.133Z",
            "directory": "/work/proj",
            "time": {"updated": 1_700_000_000_000},
        },
    )
    _write(
        root / "message" / "ses_abc" / "msg_001.json",
        {"id": "msg_001", "role": "user", "agent": "build", "time": {"created": 1}},
    )
    _write(root / "part" / "msg_001" / "prt_001.json", {"type": "text", "text": "Fix auth bug. Detail."})
    return root


@pytest.fixture
def client(storage_root: Path) -> TestClient:
    settings = Settings(storage_path=storage_root, web_url="http://localhost:4096")
    return TestClient(create_app(settings, TTLCache()))


def test_root_returns_html(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]


def test_config_endpoint(client: TestClient) -> None:
    response = client.get("/api/config")

    assert response.status_code == 200
    assert response.json() == {
        "title": "OpenCode Dashboard",
        "refreshIntervalMs": 5000,
        "opencodeWebUrl": "http://localhost:4096",
    }


def test_sessions_endpoint(client: TestClient) -> None:
    response = client.get("/api/sessions")

    assert response.status_code == 200
    payload = response.json()
    assert len(payload) == 1
    session = payload[0]
    assert session["id"] == "ses_abc"
    assert session["title"] == "Fix auth bug."
    assert session["agent"] == "build"
    assert session["projectName"] == "proj"
    assert session["isSubagent"] is False
    assert session["status"] == "stale"
    assert session["summary"] == {"additions": 0, "deletions": 0, "files": 0}


def test_sessions_endpoint_with_missing_storage(tmp_path: Path) -> None:
    client = TestClient(create_app(Settings(storage_path=tmp_path / "missing")))

    response = client.get("/api/sessions")

    assert response.status_code == 200
    assert response.json() == []


def test_sessions_endpoint_with_lone_surrogates(storage_root: Path) -> None:
    _write(
        storage_root / "session" / "proj" / "ses_bad.json",
        {"id": "ses_bad", "title": "Bad \ud800 title", "time": {"updated": 1_700_000_000_001}},
    )
    _write(
        storage_root / "message" / "ses_abc" / "msg_002.json",
        {"id": "msg_002", "role": "assistant", "time": {"created": 2}},
    )
    _write(storage_root / "part" / "msg_002" / "prt_001.json", {"type": "text", "text": "Fixing \udfff token"})
    client = TestClient(create_app(Settings(storage_path=storage_root)))

    response = client.get("/api/sessions")

    assert response.status_code == 200
    sessions = {session["id"]: session for session in response.json()}
    assert sessions["ses_bad"]["title"] == "Bad ? title"
    assert sessions["ses_abc"]["currentTask"] == "Fixing ? token"


def test_open_session(client: TestClient, monkeypatch) -> None:
    opened: list[str] = []
    monkeypatch.setattr(server_app, "open_url", opened.append)

    response = client.post("/api/open-session", json={"sessionId": "ses abc"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "url": "http://localhost:4096?session=ses%20abc",
    }
    assert opened == ["http://localhost:4096?session=ses%20abc"]


def test_open_session_failure(client: TestClient, monkeypatch) -> None:
    def fail(url: str) -> None:
        raise BrowserOpenError("no browser")

    monkeypatch.setattr(server_app, "open_url", fail)

    response = client.post("/api/open-session", json={"sessionId": "ses_abc"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "no browser"}


def test_open_session_requires_id(client: TestClient) -> None:
    response = client.post("/api/open-session", json={})

    assert response.status_code == 422
