"""Tests for storycheck.story.stories module."""

from storycheck.story.parser import parse_story
from storycheck.story.stories import (
    find_previous_story,
    find_story,
    list_stories,
    list_story_files,
    update_story_status,
)


class TestListStoryFiles:

    def test_orders_by_epic_then_number(self, stories_dir):
        for name in ["10-1-later.md", "2-10-ten.md", "2-9-nine.md", "notes.md"]:
            (stories_dir / name).write_text("# x\n")
        names = [p.name for p in list_story_files(stories_dir)]
        assert names == [
            "2-2-submit-request.md",
            "2-9-nine.md",
            "2-10-ten.md",
            "10-1-later.md",
            "notes.md",
        ]

    def test_skips_validation_reports(self, stories_dir):
        (stories_dir / "validation-report-2-2-submit-request-20261019-120000.md").write_text("# r\n")
        names = [p.name for p in list_story_files(stories_dir)]
        assert names == ["2-2-submit-request.md"]

    def test_missing_dir(self, tmp_path):
        assert list_story_files(tmp_path / "nope") == []

    def test_list_stories_parses(self, good_story_path, stories_dir):
        keys = [s.key for s in list_stories(stories_dir)]
        assert keys == ["2.2", "2.3"]


class TestFindStory:

    def test_by_key(self, good_story_path, stories_dir):
        assert find_story(stories_dir, "2.3") == good_story_path

    def test_by_stem(self, good_story_path, stories_dir):
        assert find_story(stories_dir, "2-3-approve-reject") == good_story_path

    def test_by_path(self, good_story_path, stories_dir):
        assert find_story(stories_dir, str(good_story_path)) == good_story_path

    def test_by_title_when_named_off_pattern(self, write_story, stories_dir):
        path = write_story("# Story 3.1: Quotas\n\nStatus: drafted\n", name="quotas.md")
        assert find_story(stories_dir, "3.1") == path

    def test_not_found(self, stories_dir):
        assert find_story(stories_dir, "9.9") is None


class TestFindPreviousStory:

    def test_finds_closest_earlier_story(self, good_story_path, stories_dir):
        previous = find_previous_story(stories_dir, parse_story(good_story_path))
        assert previous is not None
        assert previous.key == "2.2"

    def test_skips_other_epics(self, write_story, stories_dir):
        write_story("# Story 1.5: Old\n", name="1-5-old.md")
        path = write_story("# Story 3.1: New\n", name="3-1-new.md")
        assert find_previous_story(stories_dir, parse_story(path)) is None

    def test_gap_in_numbering(self, write_story, stories_dir):
        path = write_story("# Story 2.5: Later\n", name="2-5-later.md")
        previous = find_previous_story(stories_dir, parse_story(path))
        assert previous.key == "2.2"

    def test_story_without_key(self, write_story, stories_dir):
        path = write_story("# Misc notes\n", name="misc.md")
        assert find_previous_story(stories_dir, parse_story(path)) is None


class TestUpdateStoryStatus:

    def test_replaces_plain_status(self, good_story_path):
        update_story_status(good_story_path, "ready-for-dev")
        assert parse_story(good_story_path).status == "ready-for-dev"
        assert "Status: ready-for-dev\n" in good_story_path.read_text()

    def test_keeps_bold_decoration(self, write_story):
        path = write_story("# Story 1.1: Foo\n\n**Status:** drafted\n\n## Story\n", name="1-1-foo.md")
        update_story_status(path, "review")
        assert "**Status:** review" in path.read_text()

    def test_inserts_after_title(self, write_story):
        path = write_story("# Story 1.1: Foo\n\n## Story\n", name="1-1-foo.md")
        update_story_status(path, "drafted")
        assert path.read_text() == "# Story 1.1: Foo\n\nStatus: drafted\n\n## Story\n"

    def test_inserts_at_top_without_title(self, write_story):
        path = write_story("## Story\n\nAs a user\n", name="1-1-foo.md")
        update_story_status(path, "backlog")
        assert path.read_text().startswith("Status: backlog\n\n## Story")

    def test_ignores_status_inside_sections(self, write_story):
        path = write_story(
            "# Story 1.1: Foo\n\n## Dev Notes\n\nStatus: see tracker\n",
            name="1-1-foo.md",
        )
        update_story_status(path, "drafted")
        text = path.read_text()
        assert "Status: see tracker" in text
        assert text.index("Status: drafted") < text.index("## Dev Notes")
