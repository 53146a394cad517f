"""
Story documents for storycheck.

Parses story markdown files, finds them on disk, and tracks their
status through the development lifecycle.
"""

from storycheck.story.models import (
    AcceptanceCriterion,
    Citation,
    Section,
    Story,
    Task,
)
from storycheck.story.parser import StoryParseError, parse_story, parse_story_text
from storycheck.story.stories import (
    find_previous_story,
    find_story,
    list_stories,
    list_story_files,
    update_story_status,
)

__all__ = [
    "AcceptanceCriterion",
    "Citation",
    "Section",
    "Story",
    "Task",
    "StoryParseError",
    "parse_story",
    "parse_story_text",
    "find_previous_story",
    "find_story",
    "list_stories",
    "list_story_files",
    "update_story_status",
]
