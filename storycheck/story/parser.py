"""
Story markdown parser.

Extracts title, status, sections, acceptance criteria, tasks and
citations from a story file. Line numbers are 1-based and refer to
the original file, so findings can point at the offending line.
"""

import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

from storycheck.lib.constants import STORY_FILE_PATTERN, TASKS_SECTION_TITLES
from storycheck.story.models import (
    AcceptanceCriterion,
    Citation,
    Section,
    Story,
    Task,
)

TITLE_RE = re.compile(r'^#\s+(.+?)\s*#*\s*$')
STORY_TITLE_RE = re.compile(r'^Story\s+(\d+)\.(\d+)\s*[:\-–—]\s*(.+?)\s*$', re.IGNORECASE)
HEADING_RE = re.compile(r'^(#{2,6})\s+(.+?)\s*#*\s*$')
STATUS_RE = re.compile(r'^\s*\**Status\**:\**\s*(.*?)\s*\**\s*$', re.IGNORECASE)
FENCE_RE = re.compile(r'^\s*(```|~~~)')
INLINE_COMMENT_RE = re.compile(r'<!--.*?-->')

AC_ITEM_RE = re.compile(r'^(\d+)[.)]\s+(.*)$')
AC_LABEL_RE = re.compile(r'^(?:[-*+]\s+)?\**AC\s*#?(\d+)\**\s*[:.)-]?\**\s*(.*)$')
TASK_RE = re.compile(r'^(\s*)[-*+]\s+\[([ xX])\]\s+(.*)$')
AC_REF_RE = re.compile(r'\bACs?\s*:?\s*(#?\d+(?:\s*(?:,|&|and|-|–)\s*#?\d+)*)')
AC_RANGE_RE = re.compile(r'#?(\d+)\s*[-–]\s*#?(\d+)')

SOURCE_RE = re.compile(r'\[Source:\s*([^\]]+?)\s*\]', re.IGNORECASE)
LINK_RE = re.compile(r'(?<!!)\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+"[^"]*")?\s*\)')
EXTERNAL_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')

SECTION_PATH_SEP = " > "


class StoryParseError(Exception):
    """Story file could not be read."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


def normalize_status(value: str) -> Optional[str]:
    """Normalize 'Ready for Dev' / 'ready_for_dev' to 'ready-for-dev'."""
    value = value.strip().strip('*').strip().lower()
    if not value:
        return None
    return re.sub(r'[\s_]+', '-', value)


def story_key_from_filename(name: str) -> Optional[str]:
    """Return '2.3' for '2-3-some-slug.md', None if the name doesn't follow the pattern."""
    match = STORY_FILE_PATTERN.match(name)
    if not match:
        return None
    return f"{int(match.group(1))}.{int(match.group(2))}"


def parse_ac_refs(text: str) -> list[int]:
    """Extract AC numbers referenced in a task line.

    Handles '(AC: #1)', '(AC: #1, #3)', '(AC: 1-3)', 'AC #2' and 'ACs 1 & 2'.
    """
    refs: list[int] = []
    for match in AC_REF_RE.finditer(text):
        group = match.group(1)
        for start, end in AC_RANGE_RE.findall(group):
            lo, hi = int(start), int(end)
            if lo <= hi:
                refs.extend(range(lo, hi + 1))
        singles = AC_RANGE_RE.sub(" ", group)
        refs.extend(int(n) for n in re.findall(r'\d+', singles))
    # Preserve first-seen order, drop duplicates
    seen = set()
    ordered = []
    for r in refs:
        if r not in seen:
            seen.add(r)
            ordered.append(r)
    return ordered


def _strip_ignored(lines: list[str]) -> list[str]:
    """Blank out HTML comments and fenced code blocks, keeping line positions."""
    result = []
    in_comment = False
    in_fence = False

    for line in lines:
        if in_fence:
            if FENCE_RE.match(line):
                in_fence = False
            result.append("")
            continue

        if not in_comment and FENCE_RE.match(line):
            in_fence = True
            result.append("")
            continue

        line = INLINE_COMMENT_RE.sub("", line)
        if in_comment:
            if '-->' in line:
                in_comment = False
                line = line.split('-->', 1)[1]
            else:
                result.append("")
                continue
        if '<!--' in line:
            in_comment = True
            line = line.split('<!--', 1)[0]

        result.append(line)

    return result


def _split_citation_target(raw: str) -> tuple[str, Optional[str]]:
    target, _, anchor = raw.strip().partition('#')
    anchor = unquote(anchor).strip() if anchor else None
    return unquote(target.strip()), anchor or None


def _citations_in_line(line: str, lineno: int, section_path: str) -> list[Citation]:
    citations = []

    for match in SOURCE_RE.finditer(line):
        for part in match.group(1).split(';'):
            part = part.strip()
            if not part:
                continue
            target, anchor = _split_citation_target(part)
            kind = "external" if EXTERNAL_RE.match(target) else "source"
            citations.append(Citation(
                target=target,
                anchor=anchor,
                text=match.group(0),
                line_number=lineno,
                section=section_path,
                kind=kind,
            ))

    for match in LINK_RE.finditer(line):
        href = match.group(2)
        if href.startswith('#'):
            continue  # In-page anchor
        kind = "external" if EXTERNAL_RE.match(href) else "link"
        target, anchor = (href, None) if kind == "external" else _split_citation_target(href)
        citations.append(Citation(
            target=target,
            anchor=anchor,
            text=match.group(0),
            line_number=lineno,
            section=section_path,
            kind=kind,
        ))

    return citations


def _is_section(title: str, *names: str) -> bool:
    compact = re.sub(r'\s+', '', title).lower()
    return any(compact == re.sub(r'\s+', '', n).lower() for n in names)


def parse_story_text(text: str, path: Path) -> Story:
    """Parse story markdown text. Never raises on malformed content."""
    original_lines = text.splitlines()
    lines = _strip_ignored(original_lines)

    story = Story(path=path, title_line="", raw=text)

    # Section tree built with a stack of open sections
    stack: list[Section] = []
    content_lines: dict[int, list[str]] = {}
    preamble: list[str] = []

    current_ac: Optional[AcceptanceCriterion] = None
    task_stack: list[tuple[int, Task]] = []

    for lineno, line in enumerate(lines, 1):
        if not story.title_line and not stack:
            title_match = TITLE_RE.match(line)
            if title_match and not line.startswith('##'):
                story.title_line = title_match.group(1)
                continue

        heading = HEADING_RE.match(line)
        if heading:
            level = len(heading.group(1))
            section = Section(title=heading.group(2), level=level, line_number=lineno)
            while stack and stack[-1].level >= level:
                stack.pop()
            if stack:
                stack[-1].children.append(section)
            else:
                story.sections.append(section)
            stack.append(section)
            content_lines[id(section)] = []
            current_ac = None
            task_stack = []
            continue

        if not stack:
            preamble.append(line)
            continue

        content_lines[id(stack[-1])].append(line)
        top = stack[0]
        section_path = SECTION_PATH_SEP.join(s.title for s in stack)

        story.citations.extend(_citations_in_line(line, lineno, section_path))

        if _is_section(top.title, "Acceptance Criteria"):
            ac_match = AC_ITEM_RE.match(line) or AC_LABEL_RE.match(line)
            if ac_match:
                current_ac = AcceptanceCriterion(
                    number=int(ac_match.group(1)),
                    text=ac_match.group(2).strip(),
                    line_number=lineno,
                )
                story.acceptance_criteria.append(current_ac)
            elif current_ac and line.strip():
                joined = f"{current_ac.text} {line.strip()}".strip()
                current_ac.text = joined

        elif _is_section(top.title, *TASKS_SECTION_TITLES):
            task_match = TASK_RE.match(line)
            if task_match:
                indent = len(task_match.group(1).expandtabs(4))
                while task_stack and task_stack[-1][0] >= indent:
                    task_stack.pop()
                task = Task(
                    text=task_match.group(3).strip(),
                    done=task_match.group(2).lower() == 'x',
                    depth=len(task_stack),
                    line_number=lineno,
                    ac_refs=parse_ac_refs(task_match.group(3)),
                )
                if task_stack:
                    task_stack[-1][1].subtasks.append(task)
                else:
                    story.tasks.append(task)
                task_stack.append((indent, task))

    def fill(section: Section):
        section.content = "\n".join(content_lines.get(id(section), [])).strip()
        for child in section.children:
            fill(child)

    for s in story.sections:
        fill(s)

    title_match = STORY_TITLE_RE.match(story.title_line) if story.title_line else None
    if title_match:
        story.epic = int(title_match.group(1))
        story.number = int(title_match.group(2))
        story.key = f"{story.epic}.{story.number}"
        story.title = title_match.group(3)
    else:
        story.title = story.title_line
        key = story_key_from_filename(path.name)
        if key:
            epic, number = key.split(".")
            story.key, story.epic, story.number = key, int(epic), int(number)

    # Only the preamble carries the story status
    story.status = _find_status(preamble)

    story_section = story.section("Story")
    if story_section:
        story.statement = story_section.full_text()

    return story


def _find_status(lines: list[str]) -> Optional[str]:
    for line in lines:
        match = STATUS_RE.match(line)
        if match:
            return normalize_status(match.group(1))
    return None


def parse_story(path: Path) -> Story:
    """Parse a story file.

    Raises:
        StoryParseError: If the file is missing or unreadable
    """
    path = Path(path)
    if not path.exists():
        raise StoryParseError(path, "Story file not found")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StoryParseError(path, f"Cannot read story: {e}") from None
    return parse_story_text(text, path)
