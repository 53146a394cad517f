"""Tests for the continuity checks."""

from pathlib import Path

from storycheck.checks import CHECKS
from storycheck.story.parser import parse_story, parse_story_text

NO_LEARNINGS = """# Story 2.3: Approve

Status: drafted

## Dev Notes

Use the event store [Source: docs/architecture.md#Event Sourcing].
"""

EMPTY_LEARNINGS = """# Story 2.3: Approve

## Dev Notes

### Learnings from Previous Story (2.2)

### References
"""

CITED_IN_CHANGE_LOG = """# Story 2.3: Approve

## Dev Notes

### Learnings from Previous Story

Reuse the request projection.

## Change Log

- Follows up on [Source: docs/stories/2-2-submit-request.md]
"""


def previous(stories_dir, status="done"):
    prev = parse_story(stories_dir / "2-2-submit-request.md")
    prev.status = status
    return prev


class TestContPrevious:

    def test_pass(self, good_story_path, stories_dir, make_ctx):
        ctx = make_ctx(previous_story=previous(stories_dir))
        assert CHECKS["CONT-PREVIOUS"](parse_story(good_story_path), ctx).result == "PASS"

    def test_no_previous_story(self, good_story_path, make_ctx):
        result = CHECKS["CONT-PREVIOUS"](parse_story(good_story_path), make_ctx())
        assert result.result == "NA"

    def test_previous_not_finished(self, stories_dir, make_ctx):
        ctx = make_ctx(previous_story=previous(stories_dir, status="in-progress"))
        story = parse_story_text(NO_LEARNINGS, Path("2-3-approve.md"))
        result = CHECKS["CONT-PREVIOUS"](story, ctx)
        assert result.result == "NA"
        assert "in-progress" in result.evidence

    def test_review_counts_as_finished(self, stories_dir, make_ctx):
        ctx = make_ctx(previous_story=previous(stories_dir, status="review"))
        story = parse_story_text(NO_LEARNINGS, Path("2-3-approve.md"))
        assert CHECKS["CONT-PREVIOUS"](story, ctx).result == "FAIL"

    def test_empty_learnings_with_suffix(self, stories_dir, make_ctx):
        ctx = make_ctx(previous_story=previous(stories_dir))
        story = parse_story_text(EMPTY_LEARNINGS, Path("2-3-approve.md"))
        assert CHECKS["CONT-PREVIOUS"](story, ctx).result == "PARTIAL"


class TestContPrevCited:

    def test_pass(self, good_story_path, stories_dir, make_ctx):
        ctx = make_ctx(previous_story=previous(stories_dir))
        assert CHECKS["CONT-PREV-CITED"](parse_story(good_story_path), ctx).result == "PASS"

    def test_not_cited(self, stories_dir, make_ctx):
        ctx = make_ctx(previous_story=previous(stories_dir))
        story = parse_story_text(NO_LEARNINGS, Path("2-3-approve.md"))
        result = CHECKS["CONT-PREV-CITED"](story, ctx)
        assert result.result == "FAIL"
        assert "2-2-submit-request.md" in result.evidence

    def test_no_previous_story(self, make_ctx):
        story = parse_story_text(NO_LEARNINGS, Path("2-3-approve.md"))
        assert CHECKS["CONT-PREV-CITED"](story, make_ctx()).result == "NA"

    def test_cited_outside_learnings(self, stories_dir, make_ctx):
        ctx = make_ctx(previous_story=previous(stories_dir))
        story = parse_story_text(CITED_IN_CHANGE_LOG, Path("2-3-approve.md"))
        result = CHECKS["CONT-PREV-CITED"](story, ctx)
        assert result.result == "FAIL"
        assert "Learnings from Previous Story" in result.evidence
