# ABOUTME: Pytest configuration and shared fixtures.
# ABOUTME: Builds throwaway OpenCode storage trees of session/message/part files.

import json
import time
from pathlib import Path
from typing import Any

import pytest

from opencode_dashboard.models import Thresholds


class StorageBuilder:
    """Writes OpenCode-style JSON records under a temporary storage root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def add_session(
        self, data: dict[str, Any], project: str = "project-1", filename: str | None = None
    ) -> Path:
        filename = filename or f"ses_{data.get('id', 'unknown')}.json"
        return self._write(self.root / "session" / project / filename, data)

    def add_message(
        self, session_id: str, data: dict[str, Any], filename: str | None = None
    ) -> Path:
        filename = filename or f"msg_{data.get('id', 'unknown')}.json"
        return self._write(self.root / "message" / session_id / filename, data)

    def add_part(self, message_id: str, data: dict[str, Any], filename: str) -> Path:
        return self._write(self.root / "part" / message_id / filename, data)

    def add_raw(self, relative: str, content: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def add_user_prompt(self, session_id: str, message_id: str, text: str, created: int = 1) -> None:
        self.add_message(
            session_id,
            {"id": message_id, "role": "user", "time": {"created": created}},
        )
        self.add_part(message_id, {"type": "text", "text": text}, "prt_001.json")

    def _write(self, path: Path, data: dict[str, Any]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path


@pytest.fixture
def storage(tmp_path: Path) -> StorageBuilder:
    """An empty storage tree rooted in a temporary directory."""
    return StorageBuilder(tmp_path / "storage")


@pytest.fixture
def now_ms() -> int:
    return int(time.time() * 1000)


@pytest.fixture
def thresholds() -> Thresholds:
    return Thresholds(busy_minutes=5, stale_minutes=30)
