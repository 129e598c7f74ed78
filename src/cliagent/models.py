"""Configuration, request options and status models."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from .context import ProjectContext
from .constants import (
    ServiceState,
    DEFAULT_CLI_PATH,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_MAX_CONTEXT_SIZE,
    DEFAULT_MAX_REQUIREMENTS_PER_CATEGORY,
    DEFAULT_MAX_DECISIONS,
    DEFAULT_MAX_SPECS,
)


class ContextBuilderOptions(BaseModel):
    """Size limits applied when rendering a ``ProjectContext``."""

    max_size: int = DEFAULT_MAX_CONTEXT_SIZE
    """Maximum rendered size in characters."""

    max_requirements_per_category: int = DEFAULT_MAX_REQUIREMENTS_PER_CATEGORY
    """Requirements kept per category when summarizing."""

    max_decisions: int = DEFAULT_MAX_DECISIONS
    """Decisions kept when summarizing."""

    max_specs: int = DEFAULT_MAX_SPECS
    """Spec files kept when summarizing."""

    @model_validator(mode="after")
    def _validate_limits(self) -> ContextBuilderOptions:
        """Reject negative limits."""
        for name in (
            "max_size",
            "max_requirements_per_category",
            "max_decisions",
            "max_specs",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        return self


class ServiceOptions(BaseModel):
    """Configuration of a ``ClaudeService``.

    Args:
        working_directory: Directory the CLI runs in.
        cli_path: Path or name of the CLI executable.
        timeout_ms: Per-request timeout in milliseconds. Must be >= 1.
        debug: Log the command line and every raw chunk at INFO level.
        context_builder: Limits used to render project context.
    """

    working_directory: str
    cli_path: str = DEFAULT_CLI_PATH
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    debug: bool = False
    context_builder: ContextBuilderOptions = Field(default_factory=ContextBuilderOptions)

    @model_validator(mode="after")
    def _validate_timeout(self) -> ServiceOptions:
        if self.timeout_ms < 1:
            raise ValueError("timeout_ms must be >= 1")
        return self


class SendMessageOptions(BaseModel):
    """Per-message options."""

    context: ProjectContext | None = None
    """Project context rendered into the system prompt."""

    system_prompt: str | None = None
    """Raw system prompt, used only when no context is given."""

    include_files: list[str] = Field(default_factory=list)
    """Extra directories the CLI may read."""

    session_id: str | None = None
    """Accepted for callers that track sessions. Not sent to the CLI."""

    continue_session: bool | None = None
    """Accepted for callers that track sessions. Not sent to the CLI."""


class ServiceStatus(BaseModel):
    """Current status of a service instance."""

    ready: bool = False
    """Whether the CLI was found by the last availability check."""

    state: ServiceState = "idle"
    """Request state.

    Options: `idle`, `sending`, `streaming`, `error`
    """

    error_message: str | None = None
    """Message of the last failed request, while in the `error` state."""

    cli_version: str | None = None
    """CLI version reported by the last availability check."""


class AvailabilityResult(BaseModel):
    """Outcome of probing the CLI with ``--version``."""

    available: bool
    version: str | None = None
