"""Continuity checks against the previous story of the same epic."""

from pathlib import Path
from typing import Optional

from storycheck.checks.base import (
    CheckContext,
    CheckResult,
    check,
    failed,
    not_applicable,
    partial,
    passed,
)
from storycheck.checks.structure import citations_under
from storycheck.lib.constants import LEARNINGS_SECTION, PREVIOUS_STORY_LEARNING_STATUSES
from storycheck.story.models import Section, Story


def _learnings_section(story: Story) -> Optional[Section]:
    notes = story.section("Dev Notes")
    if notes is None:
        return None
    wanted = LEARNINGS_SECTION.lower()
    for child in notes.children:
        # Allow suffixes like "Learnings from Previous Story (2.2)"
        if child.title.strip().lower().startswith(wanted):
            return child
    return None


def _skip_reason(ctx: CheckContext) -> Optional[str]:
    prev = ctx.previous_story
    if prev is None:
        return "No previous story in this epic"
    if prev.status not in PREVIOUS_STORY_LEARNING_STATUSES:
        return f"Previous story {prev.key} is {prev.status or 'without status'}"
    return None


@check("CONT-PREVIOUS")
def check_previous_learnings(story: Story, ctx: CheckContext) -> CheckResult:
    reason = _skip_reason(ctx)
    if reason:
        return not_applicable("CONT-PREVIOUS", reason)

    prev = ctx.previous_story
    section = _learnings_section(story)
    if section is None:
        return failed(
            "CONT-PREVIOUS",
            f"Previous story {prev.key} is {prev.status} but Dev Notes has no learnings",
        )
    if not section.full_text().strip():
        return partial("CONT-PREVIOUS", f"Learnings subsection at line {section.line_number} is empty")
    return passed("CONT-PREVIOUS", f"Learnings from story {prev.key} captured")


@check("CONT-PREV-CITED")
def check_previous_cited(story: Story, ctx: CheckContext) -> CheckResult:
    reason = _skip_reason(ctx)
    if reason:
        return not_applicable("CONT-PREV-CITED", reason)

    prev = ctx.previous_story
    section = _learnings_section(story)
    if section is None:
        return failed("CONT-PREV-CITED", f"No learnings subsection citing {prev.path.name}")

    cited = [
        c for c in citations_under(story, story.section("Dev Notes"), section)
        if c.is_local and Path(c.target).name == prev.path.name
    ]
    if not cited:
        return failed(
            "CONT-PREV-CITED",
            f"{prev.path.name} is not cited under {section.title}",
        )
    return passed("CONT-PREV-CITED", f"{prev.path.name} cited at line {cited[0].line_number}")
