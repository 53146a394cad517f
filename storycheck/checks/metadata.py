"""Metadata checks: title, status, story statement, agent record, change log."""

import re

from storycheck.checks.base import CheckContext, CheckResult, check, failed, partial, passed
from storycheck.lib.constants import CHANGE_LOG_TITLES, DEV_AGENT_RECORD_SUBSECTIONS, STORY_STATUSES
from storycheck.story.models import Story
from storycheck.story.parser import STORY_TITLE_RE

STATEMENT_PARTS = [
    ("As a", re.compile(r'\bas an?\b')),
    ("I want", re.compile(r'\bi want\b')),
    ("so that", re.compile(r'\bso that\b')),
]


@check("META-TITLE")
def check_title(story: Story, ctx: CheckContext) -> CheckResult:
    if not story.title_line:
        return failed("META-TITLE", "No '# Story <epic>.<n>: <title>' heading")

    if not STORY_TITLE_RE.match(story.title_line):
        return failed(
            "META-TITLE",
            f"Title '{story.title_line}' does not name a story key",
        )

    return passed("META-TITLE", f"Story {story.key}: {story.title}")


@check("META-STATUS")
def check_status(story: Story, ctx: CheckContext) -> CheckResult:
    if not story.status:
        return failed("META-STATUS", "No Status line")

    if story.status not in STORY_STATUSES:
        return partial(
            "META-STATUS",
            f"Unknown status '{story.status}'",
            [f"Expected one of: {', '.join(STORY_STATUSES)}"],
        )

    return passed("META-STATUS", f"Status: {story.status}")


@check("META-STATEMENT")
def check_statement(story: Story, ctx: CheckContext) -> CheckResult:
    if story.section("Story") is None:
        return failed("META-STATEMENT", "No Story section")

    text = re.sub(r'[*_]', '', story.statement).lower()
    text = re.sub(r'\s+', ' ', text)
    missing = [label for label, pattern in STATEMENT_PARTS if not pattern.search(text)]

    if not missing:
        return passed("META-STATEMENT", "As a / I want / so that present")
    if len(missing) == len(STATEMENT_PARTS):
        return failed("META-STATEMENT", "Story section has no user story statement")
    return partial("META-STATEMENT", f"Statement missing: {', '.join(missing)}")


@check("META-AGENT-RECORD")
def check_agent_record(story: Story, ctx: CheckContext) -> CheckResult:
    record = story.section("Dev Agent Record")
    if record is None:
        return failed("META-AGENT-RECORD", "No Dev Agent Record section")

    missing = [name for name in DEV_AGENT_RECORD_SUBSECTIONS if record.find(name) is None]
    if missing:
        return partial(
            "META-AGENT-RECORD",
            f"{len(missing)} of {len(DEV_AGENT_RECORD_SUBSECTIONS)} subsections missing",
            [f"Missing: {name}" for name in missing],
        )
    return passed("META-AGENT-RECORD", "All Dev Agent Record subsections present")


@check("META-CHANGELOG")
def check_change_log(story: Story, ctx: CheckContext) -> CheckResult:
    section = story.section(*CHANGE_LOG_TITLES)
    if section is None:
        return failed("META-CHANGELOG", "No Change Log section")
    return passed("META-CHANGELOG", f"Change Log at line {section.line_number}")
