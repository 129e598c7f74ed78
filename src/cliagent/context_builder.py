"""Rendering of project context into a size-bounded system prompt."""

from __future__ import annotations

import logging
from typing import NamedTuple

from .context import ProjectContext, RequirementSummary, DecisionSummary, SpecSummary
from .constants import GenerationMode
from .models import ContextBuilderOptions

logger = logging.getLogger(__name__)

_MODE_INSTRUCTIONS: dict[str, str] = {
    "incremental": (
        "- Generate one file at a time\n"
        "- Wait for user approval before proceeding\n"
        "- Ask clarifying questions as needed"
    ),
    "all-at-once": (
        "- Generate all spec files in sequence\n"
        "- Provide a summary of generated files\n"
        "- User can review and request changes after"
    ),
    "draft-then-refine": (
        "- Generate all files as drafts\n"
        "- Mark files with [DRAFT] status\n"
        "- Iterate based on user feedback"
    ),
}


class _Caps(NamedTuple):
    requirements: int
    decisions: int
    specs: int

    def halved(self) -> _Caps:
        return _Caps(self.requirements // 2, self.decisions // 2, self.specs // 2)


class ContextBuilder:
    """Builds the system prompt for a project.

    ``build`` is a pure function of the context and the options: the same
    inputs always render the same string. When the full rendering is longer
    than ``max_size`` a summarized rendering is returned instead, keeping the
    most recent items of each list and stating how many were omitted.

    Args:
        options: Size limits. Defaults are used when omitted.
    """

    def __init__(self, options: ContextBuilderOptions | None = None) -> None:
        self.options = options or ContextBuilderOptions()

    def build(self, context: ProjectContext) -> str:
        """Render the context, summarizing it if it is too large.

        Args:
            context: The project snapshot to render.

        Returns:
            str: The prompt. Its length is at most ``max_size`` unless the
                irreducible rendering (header, counts, instructions) is longer.
        """
        full = self._build_full(context)
        if len(full) <= self.options.max_size:
            return full

        caps = _Caps(
            self.options.max_requirements_per_category,
            self.options.max_decisions,
            self.options.max_specs,
        )
        while True:
            summarized = self._build_summarized(context, caps)
            if len(summarized) <= self.options.max_size or caps == (0, 0, 0):
                break
            caps = caps.halved()

        if len(summarized) > self.options.max_size:
            logger.warning(
                "Context for %r is %d characters after summarizing (limit %d)",
                context.project_name,
                len(summarized),
                self.options.max_size,
            )
        return summarized

    def estimate_size(self, context: ProjectContext) -> int:
        """Return the length of the prompt ``build`` renders for the context."""
        return len(self.build(context))

    # ========== Full rendering ==========

    def _build_full(self, context: ProjectContext) -> str:
        sections = [
            self._build_header(context),
            self._build_requirements(context.requirements),
            self._build_decisions(context.decisions),
            self._build_specs(context.existing_specs),
            self._build_instructions(context),
        ]
        return "\n\n".join(section for section in sections if section)

    def _build_header(self, context: ProjectContext) -> str:
        return (
            "# Project Context\n"
            "\n"
            f"**Project:** {context.project_name}\n"
            f"**Target Language:** {context.target_language}\n"
            f"**Generation Mode:** {context.generation_mode}\n"
            f"**Root Path:** {context.root_path}"
        )

    def _build_requirements(self, requirements: list[RequirementSummary]) -> str:
        if not requirements:
            return ""
        lines = ["## Requirements Gathered"]
        for requirement in requirements:
            lines.append(f"\n### {requirement.category}")
            lines.extend(f"- {item}" for item in requirement.items)
        return "\n".join(lines)

    def _build_decisions(self, decisions: list[DecisionSummary]) -> str:
        if not decisions:
            return ""
        lines = ["## Decisions Made"]
        lines.extend(_format_decision(decision) for decision in decisions)
        return "\n".join(lines)

    def _build_specs(self, specs: list[SpecSummary]) -> str:
        if not specs:
            return ""
        lines = ["## Existing Spec Files"]
        lines.extend(_format_spec(spec) for spec in specs)
        return "\n".join(lines)

    def _build_instructions(self, context: ProjectContext) -> str:
        return (
            "## Instructions\n"
            "\n"
            f'You are helping design specifications for the "{context.project_name}" project.\n'
            "\n"
            f"Generation Mode: **{context.generation_mode}**\n"
            f"{_mode_instructions(context.generation_mode)}\n"
            "\n"
            "When generating spec files, follow the structure from DESIGN_PHILOSOPHY.md:\n"
            "- CLAUDE.md for agent guidelines\n"
            "- specs/README.md for spec index\n"
            "- specs/[feature].md for feature specifications\n"
            "- PLAN.md for implementation phases\n"
            "\n"
            f"Always generate code examples in {context.target_language}."
        )

    # ========== Summarized rendering ==========

    def _build_summarized(self, context: ProjectContext, caps: _Caps) -> str:
        omitted_requirements = sum(
            max(len(r.items) - caps.requirements, 0) for r in context.requirements
        )
        omitted_decisions = max(len(context.decisions) - caps.decisions, 0)
        omitted_specs = max(len(context.existing_specs) - caps.specs, 0)

        sections = [
            self._build_header(context),
            self._build_requirements_summarized(context.requirements, caps.requirements),
            self._build_decisions_summarized(context.decisions, caps.decisions),
            self._build_specs_summarized(context.existing_specs, caps.specs),
            self._build_instructions(context),
            self._build_truncation_notice(
                context, omitted_requirements, omitted_decisions, omitted_specs
            ),
        ]
        return "\n\n".join(section for section in sections if section)

    def _build_requirements_summarized(
        self, requirements: list[RequirementSummary], cap: int
    ) -> str:
        if not requirements:
            return ""
        lines = ["## Requirements Gathered (Summary)"]
        for requirement in requirements:
            lines.append(f"\n### {requirement.category}")
            # Most recent items are the most relevant
            lines.extend(f"- {item}" for item in _tail(requirement.items, cap))
            omitted = len(requirement.items) - cap
            if omitted > 0:
                lines.append(f"- *({omitted} earlier items omitted)*")
        return "\n".join(lines)

    def _build_decisions_summarized(self, decisions: list[DecisionSummary], cap: int) -> str:
        if not decisions:
            return ""
        lines = ["## Decisions Made (Summary)"]
        lines.extend(_format_decision(decision) for decision in _tail(decisions, cap))
        omitted = len(decisions) - cap
        if omitted > 0:
            lines.append(f"*({omitted} earlier decisions omitted)*")
        return "\n".join(lines)

    def _build_specs_summarized(self, specs: list[SpecSummary], cap: int) -> str:
        if not specs:
            return ""
        lines = ["## Existing Spec Files (Summary)"]
        lines.extend(_format_spec(spec) for spec in _tail(specs, cap))
        omitted = len(specs) - cap
        if omitted > 0:
            lines.append(f"*({omitted} earlier specs omitted)*")
        return "\n".join(lines)

    def _build_truncation_notice(
        self,
        context: ProjectContext,
        omitted_requirements: int,
        omitted_decisions: int,
        omitted_specs: int,
    ) -> str:
        notices: list[str] = []
        if omitted_requirements:
            total = sum(len(r.items) for r in context.requirements)
            notices.append(f"{total} total requirements ({omitted_requirements} omitted)")
        if omitted_decisions:
            notices.append(
                f"{len(context.decisions)} total decisions ({omitted_decisions} omitted)"
            )
        if omitted_specs:
            notices.append(
                f"{len(context.existing_specs)} total specs ({omitted_specs} omitted)"
            )
        if not notices:
            return ""
        return (
            "*Note: Context was summarized due to size limits. "
            f"Full data: {', '.join(notices)}*"
        )


def _tail(items: list, count: int) -> list:
    return items[-count:] if count > 0 else []


def _format_decision(decision: DecisionSummary) -> str:
    return f"- **{decision.topic}:** {decision.choice}"


def _format_spec(spec: SpecSummary) -> str:
    status = " (draft)" if spec.status == "draft" else ""
    return f"- {spec.path}: {spec.title}{status}"


def _mode_instructions(mode: GenerationMode) -> str:
    return _MODE_INSTRUCTIONS[mode]
