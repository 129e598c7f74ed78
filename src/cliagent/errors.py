"""Errors raised by the cliagent service layer."""

from __future__ import annotations

from .constants import ErrorCode


class ClaudeServiceError(Exception):
    """Error raised by the process manager and the service.

    Args:
        message: Human-readable description of the failure.
        code: Classification of the failure.
            Options: `NOT_AVAILABLE`, `BUSY`, `TIMEOUT`, `CANCELLED`,
            `CLI_ERROR`, `PARSE_ERROR`, `UNKNOWN`. `NOT_AVAILABLE`, `TIMEOUT`
            and `PARSE_ERROR` are never raised by this package and are
            reserved for callers.
    """

    def __init__(self, message: str, code: ErrorCode = "UNKNOWN") -> None:
        super().__init__(message)
        self.message = message
        self.code: ErrorCode = code

    def __repr__(self) -> str:
        return f"ClaudeServiceError(message={self.message!r}, code={self.code!r})"
