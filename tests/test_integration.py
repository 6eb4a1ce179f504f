# ABOUTME: End-to-end tests for discovery with title enrichment and caching.
# ABOUTME: Exercises a realistic storage tree through the public entry point.

from opencode_dashboard import discover_sessions, enrichment
from opencode_dashboard.cache import TTLCache

GENERIC_TITLE = "New session - 2026-01-28T10:16:06.133Z"


def _write_session(storage, session_id: str, title: str, updated: int) -> None:
    storage.add_session(
        {
            "id": session_id,
            "slug": "slug",
            "title": title,
            "directory": "/work/app",
            "time": {"created": updated - 1000, "updated": updated},
        }
    )


class TestSessionEnrichmentIntegration:
    """End-to-end enrichment through discover_sessions."""

    def test_generic_title_replaced_with_first_sentence(self, storage, thresholds, now_ms) -> None:
        _write_session(storage, "ses_1", GENERIC_TITLE, now_ms)
        storage.add_user_prompt("ses_1", "msg_001", "Fix auth bug. Detail.")

        sessions = discover_sessions(storage.root, thresholds)

        assert sessions[0].title == "Fix auth bug."

    def test_semantic_title_preserved(self, storage, thresholds, now_ms) -> None:
        _write_session(storage, "ses_1", "Build authentication system", now_ms)
        storage.add_user_prompt("ses_1", "msg_001", "Something unrelated entirely.")

        sessions = discover_sessions(storage.root, thresholds)

        assert sessions[0].title == "Build authentication system"

    def test_session_without_messages_keeps_generic_title(
        self, storage, thresholds, now_ms
    ) -> None:
        _write_session(storage, "ses_1", GENERIC_TITLE, now_ms)

        sessions = discover_sessions(storage.root, thresholds)

        assert sessions[0].title == GENERIC_TITLE
        assert sessions[0].agent == "general"

    def test_truncates_very_long_first_message(self, storage, thresholds, now_ms) -> None:
        _write_session(storage, "ses_1", GENERIC_TITLE, now_ms)
        storage.add_user_prompt("ses_1", "msg_001", "please " * 40)

        title = discover_sessions(storage.root, thresholds)[0].title

        assert title.endswith("...")
        assert len(title) <= 63

    def test_repeat_discovery_is_served_from_cache(
        self, storage, thresholds, now_ms, monkeypatch
    ) -> None:
        """A second pass over an unchanged tree returns identical sessions."""
        _write_session(storage, "ses_1", GENERIC_TITLE, now_ms)
        _write_session(storage, "ses_2", "Research caching", now_ms - 60_000)
        storage.add_user_prompt("ses_1", "msg_001", "Fix auth bug. Detail.")
        storage.add_message("ses_2", {"id": "msg_010", "agent": "plan"})
        cache = TTLCache()

        first = discover_sessions(storage.root, thresholds, cache, now_ms=now_ms)
        entries = cache.size()

        def fail(session_id, storage_root):
            raise AssertionError(f"extraction re-run for {session_id}")

        for name in (
            "detect_agent",
            "extract_semantic_title",
            "extract_session_description",
            "extract_current_task",
        ):
            monkeypatch.setattr(enrichment, name, fail)
        second = discover_sessions(storage.root, thresholds, cache, now_ms=now_ms)

        assert [s.to_dict() for s in first] == [s.to_dict() for s in second]
        assert cache.size() == entries

    def test_updated_session_is_re_enriched(self, storage, thresholds, now_ms) -> None:
        """Bumping time.updated invalidates cached enrichment."""
        cache = TTLCache()
        _write_session(storage, "ses_1", GENERIC_TITLE, now_ms - 60_000)
        storage.add_user_prompt("ses_1", "msg_001", "First ask.")
        assert discover_sessions(storage.root, thresholds, cache)[0].title == "First ask."

        storage.add_user_prompt("ses_1", "msg_000", "Earlier ask.", created=0)
        assert discover_sessions(storage.root, thresholds, cache)[0].title == "First ask."

        _write_session(storage, "ses_1", GENERIC_TITLE, now_ms)
        assert discover_sessions(storage.root, thresholds, cache)[0].title == "Earlier ask."
