"""Stream events emitted while a response is being streamed."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Iterable, Literal, Union
from pydantic import BaseModel, ConfigDict, Field

from .constants import ErrorCode, FileAction


def utc_timestamp() -> str:
    """Return the current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert the event to a plain dictionary, dropping unset optionals."""
        return self.model_dump(exclude_none=True)


class StartEvent(_Event):
    """A request was accepted and is about to run."""

    type: Literal["start"] = "start"
    timestamp: str = Field(default_factory=utc_timestamp)


class TextEvent(_Event):
    """A piece of assistant text."""

    type: Literal["text"] = "text"
    content: str


class ThinkingEvent(_Event):
    """A piece of assistant reasoning, kept apart from the visible text."""

    type: Literal["thinking"] = "thinking"
    content: str


class ToolUseEvent(_Event):
    """A tool invocation that is not a recognized file operation."""

    type: Literal["tool_use"] = "tool_use"
    tool: str
    input: Any = None


class FileStartEvent(_Event):
    """A file operation was requested."""

    type: Literal["file_start"] = "file_start"
    path: str
    action: FileAction


class FileContentEvent(_Event):
    """Content written to the currently open file."""

    type: Literal["file_content"] = "file_content"
    path: str
    content: str


class FileEndEvent(_Event):
    """The open file operation is finished."""

    type: Literal["file_end"] = "file_end"
    path: str


class CompleteEvent(_Event):
    """The request finished successfully. Always the last event."""

    type: Literal["complete"] = "complete"
    timestamp: str = Field(default_factory=utc_timestamp)


class ErrorEvent(_Event):
    """The request (or the assistant) reported an error.

    When emitted by the service this is the last event of the request.
    """

    type: Literal["error"] = "error"
    message: str
    code: ErrorCode | str | None = None


StreamEvent = Annotated[
    Union[
        StartEvent,
        TextEvent,
        ThinkingEvent,
        ToolUseEvent,
        FileStartEvent,
        FileContentEvent,
        FileEndEvent,
        CompleteEvent,
        ErrorEvent,
    ],
    Field(discriminator="type"),
]
"""Tagged union of every event a request can produce."""


class FileChange(BaseModel):
    """A file operation requested during a response."""

    path: str
    """Path of the file, as reported by the assistant."""

    action: FileAction
    """The requested operation.

    Options: `create`, `modify`, `delete`
    """

    content: str | None = None
    """Content streamed for the file, if any."""


def collect_file_changes(events: Iterable[Any]) -> list[FileChange]:
    """Fold a sequence of stream events into the file changes they describe.

    One change is produced per ``file_start`` event, in order. Content from
    ``file_content`` events is appended to the matching open change.

    Args:
        events: Stream events from a single request.

    Returns:
        list[FileChange]: The requested file changes.
    """
    changes: list[FileChange] = []
    open_change: FileChange | None = None

    for event in events:
        if isinstance(event, FileStartEvent):
            open_change = FileChange(path=event.path, action=event.action)
            changes.append(open_change)
            if event.action == "delete":
                open_change = None
        elif isinstance(event, FileContentEvent):
            if open_change is not None and open_change.path == event.path:
                open_change.content = (open_change.content or "") + event.content
        elif isinstance(event, FileEndEvent):
            open_change = None

    return changes
