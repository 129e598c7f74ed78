"""Incremental parser for the CLI's stream-json output."""

from __future__ import annotations

import json
import logging
from typing import Any
from pydantic import BaseModel, Field, ValidationError

from .events import (
    StreamEvent,
    TextEvent,
    ThinkingEvent,
    ToolUseEvent,
    FileStartEvent,
    FileContentEvent,
    FileEndEvent,
    ErrorEvent,
)
from .constants import (
    FileAction,
    WRITE_TOOLS,
    EDIT_TOOLS,
    DELETE_TOOLS,
    IGNORED_LINE_TYPES,
)

logger = logging.getLogger(__name__)


class OpenFileOperation(BaseModel):
    """A file operation waiting for its tool result."""

    path: str
    action: FileAction
    content: list[str] = Field(default_factory=list)


class StreamParser:
    """Converts raw stdout chunks into stream events.

    Chunks may split lines anywhere. Complete lines are parsed as soon as
    they arrive and the trailing partial line is kept for the next call, so
    the events produced never depend on how the output was chunked.

    A recognized write or edit tool use opens a file operation window. The
    next ``tool_result`` line, or ``flush()``, closes it with a ``file_end``
    event.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._open_file: OpenFileOperation | None = None

    @property
    def open_file(self) -> OpenFileOperation | None:
        """The file operation currently open, if any."""
        return self._open_file

    def parse(self, chunk: str) -> list[StreamEvent]:
        """Parse a chunk of output.

        Args:
            chunk: Raw text as read from the process.

        Returns:
            list[StreamEvent]: Events for every line completed by this chunk.
        """
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")

        events: list[StreamEvent] = []
        for line in lines:
            events.extend(self._parse_line(line))
        return events

    def flush(self) -> list[StreamEvent]:
        """Parse whatever is left in the buffer and close any open file.

        Returns:
            list[StreamEvent]: The trailing events. Empty on a second call.
        """
        events: list[StreamEvent] = []

        remainder, self._buffer = self._buffer, ""
        events.extend(self._parse_line(remainder))

        # Covers a tool use whose result never arrived
        closed = self._close_file()
        if closed is not None:
            events.append(closed)
        return events

    def reset(self) -> None:
        """Clear the buffer and the open file so the parser can be reused."""
        self._buffer = ""
        self._open_file = None

    def _parse_line(self, line: str) -> list[StreamEvent]:
        if not line.strip():
            return []
        try:
            obj = json.loads(line)
        except ValueError:
            logger.warning("Skipping malformed stream line: %.200s", line)
            return []
        if not isinstance(obj, dict):
            logger.warning("Skipping non-object stream line: %.200s", line)
            return []

        try:
            return self._events_for(obj)
        except ValidationError as exc:
            logger.warning("Skipping invalid stream line: %.200s (%s)", line, exc)
            return []

    def _events_for(self, obj: dict[str, Any]) -> list[StreamEvent]:
        line_type = obj.get("type")

        if line_type == "assistant":
            # {"type":"assistant","message":{"content":[{"type":"text","text":"..."}]}}
            message = obj.get("message")
            blocks = message.get("content") if isinstance(message, dict) else None
            for block in blocks if isinstance(blocks, list) else []:
                if isinstance(block, dict) and block.get("type") == "text":
                    text = block.get("text")
                    if isinstance(text, str) and text:
                        return [TextEvent(content=text)]
            return []

        if line_type == "assistant_text":
            text = obj.get("text")
            return [TextEvent(content=text)] if isinstance(text, str) and text else []

        if line_type == "content_block_delta":
            return self._handle_delta(obj.get("delta"))

        if line_type == "thinking":
            text = obj.get("text")
            return [ThinkingEvent(content=text)] if isinstance(text, str) and text else []

        if line_type == "tool_use":
            return self._handle_tool_use(obj)

        if line_type == "tool_result":
            closed = self._close_file()
            return [closed] if closed is not None else []

        if line_type == "error":
            message = obj.get("message")
            code = obj.get("code")
            return [
                ErrorEvent(
                    message=message if isinstance(message, str) and message else "Unknown error",
                    code=code if isinstance(code, str) and code else None,
                )
            ]

        if not isinstance(line_type, str) or line_type not in IGNORED_LINE_TYPES:
            logger.debug("Ignoring stream line of type %r", line_type)
        return []

    def _handle_delta(self, delta: Any) -> list[StreamEvent]:
        if not isinstance(delta, dict):
            return []
        delta_type = delta.get("type")
        text = delta.get("text")
        if delta_type == "text_delta" and isinstance(text, str) and text:
            return [TextEvent(content=text)]
        thinking = delta.get("thinking")
        if delta_type == "thinking_delta" and isinstance(thinking, str) and thinking:
            return [ThinkingEvent(content=thinking)]
        return []

    def _handle_tool_use(self, obj: dict[str, Any]) -> list[StreamEvent]:
        tool = obj.get("tool", obj.get("name"))
        tool_input = obj.get("input")

        if not tool or not isinstance(tool, str):
            return [ToolUseEvent(tool="unknown", input=tool_input)]

        path = self._extract_path(tool_input)
        if path is None or tool not in WRITE_TOOLS | EDIT_TOOLS | DELETE_TOOLS:
            return [ToolUseEvent(tool=tool, input=tool_input)]

        if tool in DELETE_TOOLS:
            return [FileStartEvent(path=path, action="delete")]

        events: list[StreamEvent] = []
        previous = self._close_file()
        if previous is not None:
            events.append(previous)

        action: FileAction = "create" if tool in WRITE_TOOLS else "modify"
        self._open_file = OpenFileOperation(path=path, action=action)
        events.append(FileStartEvent(path=path, action=action))

        content = tool_input.get("content") if tool in WRITE_TOOLS else None
        if isinstance(content, str) and content:
            self._open_file.content.append(content)
            events.append(FileContentEvent(path=path, content=content))
        return events

    @staticmethod
    def _extract_path(tool_input: Any) -> str | None:
        if not isinstance(tool_input, dict):
            return None
        path = tool_input.get("path") or tool_input.get("file_path")
        return path if isinstance(path, str) and path else None

    def _close_file(self) -> FileEndEvent | None:
        if self._open_file is None:
            return None
        event = FileEndEvent(path=self._open_file.path)
        self._open_file = None
        return event
