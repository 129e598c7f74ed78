import sys
import os
import unittest
from typing import get_args
from pydantic import TypeAdapter

# Add the source root to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from cliagent import (
    StreamEvent,
    StartEvent,
    TextEvent,
    ToolUseEvent,
    FileStartEvent,
    FileContentEvent,
    FileEndEvent,
    ErrorEvent,
    FileChange,
    ClaudeServiceError,
    ErrorCode,
    collect_file_changes,
    get_cliagent_loggers,
    set_cliagent_log_level,
)


class TestStreamEvents(unittest.TestCase):
    """
    Unit tests for the stream event models.
    """

    def test_validate_from_tagged_dict(self):
        """The type tag selects the event model."""
        adapter = TypeAdapter(StreamEvent)

        event = adapter.validate_python({"type": "file_start", "path": "/a", "action": "modify"})
        self.assertIsInstance(event, FileStartEvent)
        self.assertEqual(event.action, "modify")

        event = adapter.validate_python({"type": "tool_use", "tool": "Bash", "input": {"a": 1}})
        self.assertIsInstance(event, ToolUseEvent)

        with self.assertRaises(ValueError):
            adapter.validate_python({"type": "file_start", "path": "/a", "action": "rename"})

    def test_error_code_is_optional(self):
        """An error without a code serializes without the key."""
        self.assertEqual(ErrorEvent(message="x").to_dict(), {"type": "error", "message": "x"})
        self.assertEqual(
            ErrorEvent(message="x", code="BUSY").to_dict(),
            {"type": "error", "message": "x", "code": "BUSY"},
        )

    def test_start_timestamp_is_iso_utc(self):
        """Timestamps are filled in automatically."""
        timestamp = StartEvent().timestamp
        self.assertRegex(timestamp, r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
        self.assertTrue(timestamp.endswith("+00:00"))

    def test_events_are_frozen(self):
        """Events cannot be changed once emitted."""
        event = TextEvent(content="a")
        with self.assertRaises(ValueError):
            event.content = "b"


class TestClaudeServiceError(unittest.TestCase):
    """
    Unit tests for the error type.
    """

    def test_defaults_to_unknown(self):
        error = ClaudeServiceError("boom")
        self.assertEqual(error.code, "UNKNOWN")
        self.assertEqual(str(error), "boom")

    def test_reserved_codes_are_accepted(self):
        """Callers can raise the codes the package itself never produces."""
        for code in ("NOT_AVAILABLE", "TIMEOUT", "PARSE_ERROR"):
            self.assertIn(code, get_args(ErrorCode))
            error = ClaudeServiceError("x", code)
            self.assertEqual(error.code, code)
            self.assertEqual(ErrorEvent(message=error.message, code=error.code).code, code)


class TestCollectFileChanges(unittest.TestCase):
    """
    Unit tests for folding events into file changes.
    """

    def test_folds_file_events(self):
        """One change per file_start, with streamed content attached."""
        events = [
            StartEvent(),
            FileStartEvent(path="/a.md", action="create"),
            FileContentEvent(path="/a.md", content="# A\n"),
            FileContentEvent(path="/a.md", content="body"),
            FileEndEvent(path="/a.md"),
            TextEvent(content="and now removing"),
            FileStartEvent(path="/old.md", action="delete"),
            FileStartEvent(path="/b.md", action="modify"),
            FileEndEvent(path="/b.md"),
        ]
        self.assertEqual(
            collect_file_changes(events),
            [
                FileChange(path="/a.md", action="create", content="# A\nbody"),
                FileChange(path="/old.md", action="delete"),
                FileChange(path="/b.md", action="modify"),
            ],
        )

    def test_content_after_end_is_ignored(self):
        """Content for a closed file is not attached."""
        events = [
            FileStartEvent(path="/a", action="create"),
            FileEndEvent(path="/a"),
            FileContentEvent(path="/a", content="late"),
        ]
        self.assertIsNone(collect_file_changes(events)[0].content)


class TestLoggingConfig(unittest.TestCase):
    """
    Unit tests for the log level helpers.
    """

    def test_sets_level_on_all_loggers(self):
        """Every known logger and the package logger get the level."""
        import logging

        set_cliagent_log_level(logging.ERROR)
        try:
            for name in get_cliagent_loggers() + ["cliagent"]:
                self.assertEqual(logging.getLogger(name).level, logging.ERROR)
        finally:
            set_cliagent_log_level(logging.NOTSET)

    def test_returns_copy(self):
        """The returned list can be changed freely."""
        names = get_cliagent_loggers()
        names.clear()
        self.assertIn("cliagent.service", get_cliagent_loggers())


if __name__ == "__main__":
    unittest.main()
