"""Project state snapshot rendered into the system prompt."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import GenerationMode, SpecStatus


class _Snapshot(BaseModel):
    # UI layers send camelCase keys; Python callers use field names.
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RequirementSummary(_Snapshot):
    """Requirements gathered for one category, oldest first."""

    category: str
    """Name of the requirement category."""

    items: list[str] = Field(default_factory=list)
    """Requirement texts in the order they were added."""


class DecisionSummary(_Snapshot):
    """A design decision taken for the project."""

    topic: str
    """What the decision is about."""

    choice: str
    """The option that was chosen."""


class SpecSummary(_Snapshot):
    """An existing spec file of the project."""

    path: str
    title: str
    status: SpecStatus = "draft"


class ProjectContext(_Snapshot):
    """Immutable snapshot of the project state sent with a message.

    The snapshot is owned by the caller. The library only reads it.
    """

    project_id: str
    """Project identifier."""

    project_name: str
    """Human-readable project name."""

    root_path: str
    """Root directory of the project."""

    target_language: str
    """Programming language the specs target."""

    generation_mode: GenerationMode = "incremental"
    """How spec files are generated.

    Options: `incremental`, `all-at-once`, `draft-then-refine`
    """

    requirements: list[RequirementSummary] = Field(default_factory=list)
    """Requirements grouped by category."""

    decisions: list[DecisionSummary] = Field(default_factory=list)
    """Decisions taken so far, oldest first."""

    existing_specs: list[SpecSummary] = Field(default_factory=list)
    """Spec files that already exist, oldest first."""
