"""Tests for the acceptance criteria coverage checks."""

from pathlib import Path

from storycheck.checks import CHECKS
from storycheck.story.parser import parse_story_text


def story_with(acs: str, tasks: str):
    text = (
        "# Story 1.1: Foo\n\n"
        f"## Acceptance Criteria\n\n{acs}\n"
        f"## Tasks / Subtasks\n\n{tasks}\n"
    )
    return parse_story_text(text, Path("1-1-foo.md"))


def run(item_id, story, ctx):
    return CHECKS[item_id](story, ctx)


class TestAcPresent:

    def test_pass(self, make_ctx):
        story = story_with("1. One\n", "- [ ] Do (AC: #1)\n")
        assert run("AC-PRESENT", story, make_ctx()).result == "PASS"

    def test_missing(self, make_ctx):
        story = story_with("The usual.\n", "- [ ] Do\n")
        assert run("AC-PRESENT", story, make_ctx()).result == "FAIL"


class TestAcNumbering:

    def test_sequential(self, make_ctx):
        story = story_with("1. One\n2. Two\n", "")
        assert run("AC-NUMBERING", story, make_ctx()).result == "PASS"

    def test_gap(self, make_ctx):
        story = story_with("1. One\n3. Three\n", "")
        result = run("AC-NUMBERING", story, make_ctx())
        assert result.result == "FAIL"
        assert result.evidence == "Numbered 1, 3"

    def test_nested_list_inside_ac(self, make_ctx):
        story = story_with("1. List is:\n   1. sorted\n   2. filtered\n2. Two\n", "")
        assert run("AC-NUMBERING", story, make_ctx()).result == "PASS"

    def test_no_acs(self, make_ctx):
        assert run("AC-NUMBERING", story_with("", ""), make_ctx()).result == "NA"


class TestAcMapped:

    def test_all_mapped(self, make_ctx):
        story = story_with("1. One\n2. Two\n", "- [ ] A (AC: #1)\n  - [ ] B (AC: #2)\n")
        assert run("AC-MAPPED", story, make_ctx()).result == "PASS"

    def test_some_unmapped(self, make_ctx):
        story = story_with("1. One\n2. Two\n", "- [ ] A (AC: #1)\n")
        result = run("AC-MAPPED", story, make_ctx())
        assert result.result == "PARTIAL"
        assert "AC #2" in result.details[0]

    def test_none_mapped(self, make_ctx):
        story = story_with("1. One\n", "- [ ] A\n")
        assert run("AC-MAPPED", story, make_ctx()).result == "FAIL"

    def test_range_reference(self, make_ctx):
        story = story_with("1. One\n2. Two\n3. Three\n", "- [ ] A (AC: 1-3)\n")
        assert run("AC-MAPPED", story, make_ctx()).result == "PASS"


class TestAcRefsValid:

    def test_valid(self, make_ctx):
        story = story_with("1. One\n", "- [ ] A (AC: #1)\n")
        assert run("AC-REFS-VALID", story, make_ctx()).result == "PASS"

    def test_unknown_ac(self, make_ctx):
        story = story_with("1. One\n", "- [ ] A (AC: #1, #4)\n")
        result = run("AC-REFS-VALID", story, make_ctx())
        assert result.result == "FAIL"
        assert "AC #4 does not exist" in result.details[0]

    def test_no_references(self, make_ctx):
        story = story_with("1. One\n", "- [ ] A\n")
        assert run("AC-REFS-VALID", story, make_ctx()).result == "NA"


class TestAcTaskLinks:

    def test_all_linked_through_subtasks(self, make_ctx):
        story = story_with("1. One\n", "- [ ] A\n  - [ ] A.1 (AC: #1)\n")
        assert run("AC-TASK-LINKS", story, make_ctx()).result == "PASS"

    def test_some_unlinked(self, make_ctx):
        story = story_with("1. One\n", "- [ ] A (AC: #1)\n- [ ] Cleanup\n")
        result = run("AC-TASK-LINKS", story, make_ctx())
        assert result.result == "PARTIAL"
        assert result.details[0].endswith("Cleanup")

    def test_no_tasks(self, make_ctx):
        story = story_with("1. One\n", "")
        assert run("AC-TASK-LINKS", story, make_ctx()).result == "FAIL"


class TestAcTesting:

    def test_enough_testing_tasks(self, make_ctx):
        story = story_with("1. One\n", "- [ ] A (AC: #1)\n  - [ ] Unit tests for A\n")
        assert run("AC-TESTING", story, make_ctx()).result == "PASS"

    def test_fewer_than_acs(self, make_ctx):
        story = story_with("1. One\n2. Two\n", "- [ ] A (AC: #1, #2)\n  - [ ] Testing: A\n")
        assert run("AC-TESTING", story, make_ctx()).result == "PARTIAL"

    def test_none(self, make_ctx):
        story = story_with("1. One\n", "- [ ] A (AC: #1)\n")
        assert run("AC-TESTING", story, make_ctx()).result == "FAIL"
