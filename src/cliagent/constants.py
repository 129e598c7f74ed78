"""Constants and Literal vocabularies for the cliagent package."""

from __future__ import annotations

from typing import Literal

ServiceState = Literal["idle", "sending", "streaming", "error"]
GenerationMode = Literal["incremental", "all-at-once", "draft-then-refine"]
FileAction = Literal["create", "modify", "delete"]
SpecStatus = Literal["draft", "complete"]

ErrorCode = Literal[
    "NOT_AVAILABLE",
    "BUSY",
    "TIMEOUT",
    "CANCELLED",
    "CLI_ERROR",
    "PARSE_ERROR",
    "UNKNOWN",
]
"""Error codes.

``BUSY``, ``CANCELLED``, ``CLI_ERROR`` and ``UNKNOWN`` are produced by this
package; timeouts are reported as ``CANCELLED``. ``NOT_AVAILABLE``,
``TIMEOUT`` and ``PARSE_ERROR`` are reserved for callers that raise their
own ``ClaudeServiceError``.
"""

DEFAULT_CLI_PATH = "claude"
DEFAULT_TIMEOUT_MS = 300_000  # 5 minutes
DEFAULT_PROBE_TIMEOUT_MS = 10_000
DEFAULT_READ_SIZE = 4096  # bytes per stdout read
TERMINATE_GRACE_SECONDS = 5.0  # before SIGKILL

DEFAULT_MAX_CONTEXT_SIZE = 16_000  # characters
DEFAULT_MAX_REQUIREMENTS_PER_CATEGORY = 20
DEFAULT_MAX_DECISIONS = 30
DEFAULT_MAX_SPECS = 30

# Flags for non-interactive, line-delimited JSON output.
# --verbose is required by the CLI when --print is combined with stream-json.
BASE_CLI_ARGS = ("--print", "--output-format", "stream-json", "--verbose")

# Tool names that open a file operation window.
WRITE_TOOLS = frozenset({"Write", "write_file"})
EDIT_TOOLS = frozenset({"Edit", "edit_file"})
DELETE_TOOLS = frozenset({"delete_file", "rm"})

# Line types that carry nothing new: their content was already streamed.
IGNORED_LINE_TYPES = frozenset(
    {
        "result",
        "system",
        "message_start",
        "message_delta",
        "message_stop",
        "content_block_start",
        "content_block_stop",
    }
)
