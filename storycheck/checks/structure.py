"""Structure checks: required sections and Dev Notes substance."""

from storycheck.checks.base import CheckContext, CheckResult, check, failed, partial, passed
from storycheck.lib.constants import REQUIRED_SECTIONS, TASKS_SECTION_TITLES
from storycheck.story.models import Section, Story
from storycheck.story.parser import SECTION_PATH_SEP


def _find_required(story: Story, name: str):
    if name == TASKS_SECTION_TITLES[0]:
        return story.section(*TASKS_SECTION_TITLES)
    return story.section(name)


def citations_under(story: Story, *sections: Section) -> list:
    """Citations inside the given chain of nested sections, matched on whole path segments."""
    prefix = [s.title for s in sections]
    return [
        c for c in story.citations
        if c.section.split(SECTION_PATH_SEP)[:len(prefix)] == prefix
    ]


def dev_notes_citations(story: Story) -> list:
    notes = story.section("Dev Notes")
    return citations_under(story, notes) if notes else []


@check("STRUCT-SECTIONS")
def check_sections(story: Story, ctx: CheckContext) -> CheckResult:
    missing = [name for name in REQUIRED_SECTIONS if _find_required(story, name) is None]
    if missing:
        return failed(
            "STRUCT-SECTIONS",
            f"Missing sections: {', '.join(missing)}",
            [f"Missing: ## {name}" for name in missing],
        )
    return passed("STRUCT-SECTIONS", f"{len(REQUIRED_SECTIONS)} required sections present")


@check("STRUCT-DEV-NOTES")
def check_dev_notes(story: Story, ctx: CheckContext) -> CheckResult:
    notes = story.section("Dev Notes")
    if notes is None:
        return failed("STRUCT-DEV-NOTES", "No Dev Notes section")

    if not notes.full_text().strip():
        return failed("STRUCT-DEV-NOTES", f"Dev Notes at line {notes.line_number} is empty")

    citations = dev_notes_citations(story)
    if not citations and not notes.children:
        return partial(
            "STRUCT-DEV-NOTES",
            "Dev Notes has no citations or subsections (generic guidance)",
        )

    return passed(
        "STRUCT-DEV-NOTES",
        f"{len(notes.children)} subsections, {len(citations)} citations",
    )
