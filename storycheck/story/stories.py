"""
Story file discovery and status updates.

Stories live as markdown files in the configured stories directory:
  docs/stories/<epic>-<story>-<slug>.md
"""

import logging
from pathlib import Path
from typing import Optional

from storycheck.lib.constants import STORY_FILE_PATTERN, STORY_KEY_PATTERN
from storycheck.story.models import Story
from storycheck.story.parser import STATUS_RE, TITLE_RE, StoryParseError, parse_story

logger = logging.getLogger(__name__)


def _story_sort_key(path: Path) -> tuple:
    match = STORY_FILE_PATTERN.match(path.name)
    if match:
        return (0, int(match.group(1)), int(match.group(2)), path.name)
    return (1, 0, 0, path.name)


def list_story_files(stories_dir: Path) -> list[Path]:
    """List story markdown files, ordered by epic then story number.

    Files that don't follow the <epic>-<story>-<slug>.md naming are
    listed after numbered ones, by name.
    """
    if not stories_dir.exists():
        return []
    files = [
        f for f in stories_dir.glob("*.md")
        if f.is_file() and not f.name.startswith("validation-report")
    ]
    return sorted(files, key=_story_sort_key)


def list_stories(stories_dir: Path) -> list[Story]:
    """Parse all stories in a directory, skipping unreadable files."""
    stories = []
    for f in list_story_files(stories_dir):
        try:
            stories.append(parse_story(f))
        except StoryParseError as e:
            logger.warning(f"Failed to load story file {f}: {e}")
    return stories


def find_story(stories_dir: Path, ref: str) -> Optional[Path]:
    """Resolve a story reference to a file.

    ref may be a path to a markdown file, a story key ("2.3"),
    or a file stem ("2-3-approve-reject").
    """
    as_path = Path(ref)
    if as_path.suffix == ".md" and as_path.exists():
        return as_path

    key_match = STORY_KEY_PATTERN.match(ref)
    for f in list_story_files(stories_dir):
        if f.stem == ref or f.name == ref:
            return f
        if key_match:
            file_match = STORY_FILE_PATTERN.match(f.name)
            if file_match and (
                int(file_match.group(1)) == int(key_match.group(1))
                and int(file_match.group(2)) == int(key_match.group(2))
            ):
                return f

    # Fall back to the title line for files named off-pattern
    if key_match:
        for story in list_stories(stories_dir):
            if story.key == f"{int(key_match.group(1))}.{int(key_match.group(2))}":
                return story.path

    return None


def find_previous_story(stories_dir: Path, story: Story) -> Optional[Story]:
    """Find the closest earlier story in the same epic.

    Returns None for the first story of an epic or when the story has no key.
    """
    if story.epic is None or story.number is None:
        return None

    best: Optional[Story] = None
    for candidate in list_stories(stories_dir):
        if candidate.path.resolve() == story.path.resolve():
            continue
        if candidate.epic != story.epic or candidate.number is None:
            continue
        if candidate.number >= story.number:
            continue
        if best is None or candidate.number > best.number:
            best = candidate
    return best


def update_story_status(path: Path, status: str) -> None:
    """Rewrite the Status line of a story file.

    Inserts 'Status: <status>' under the title when the file has none.
    """
    lines = path.read_text(encoding="utf-8").splitlines()

    for i, line in enumerate(lines):
        if line.startswith("## "):
            break  # Status lives above the first section
        match = STATUS_RE.match(line)
        if match:
            # Keep the author's decoration around the value
            prefix = line[:match.start(1)]
            suffix = line[match.end(1):]
            lines[i] = f"{prefix}{status}{suffix}"
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
            logger.debug(f"Updated status of {path.name} to {status}")
            return

    insert_at = None
    for i, line in enumerate(lines):
        if TITLE_RE.match(line) and not line.startswith("##"):
            insert_at = i + 1
            break

    if insert_at is None:
        lines[0:0] = [f"Status: {status}", ""]
    else:
        new_lines = ["", f"Status: {status}"]
        if insert_at < len(lines) and lines[insert_at].strip():
            new_lines.append("")
        lines[insert_at:insert_at] = new_lines
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.debug(f"Inserted status {status} into {path.name}")
