"""
Citation checks.

Citations are resolved against the project root first, then against the
story's own directory. Anchors are only verified for markdown targets,
where they must match a heading either as a GitHub-style slug
("event-sourcing") or as the heading text ("Event Sourcing").
"""

import logging
import re
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
from storycheck.lib.constants import REFERENCES_SECTION, STORY_FILE_PATTERN
from storycheck.story.models import Citation, Story
from storycheck.story.parser import FENCE_RE

logger = logging.getLogger(__name__)

ANY_HEADING_RE = re.compile(r'^#{1,6}\s+(.+?)\s*#*\s*$')
MARKDOWN_SUFFIXES = (".md", ".markdown")


def slugify(text: str) -> str:
    """GitHub-style heading anchor: lowercase, punctuation dropped, spaces to hyphens."""
    text = text.strip().lower()
    text = re.sub(r'[^\w\- ]', '', text)
    return text.replace(' ', '-')


def _normalize_heading(text: str) -> str:
    return re.sub(r'\s+', ' ', text.replace('`', '').replace('*', '')).strip().lower()


def resolve_citation(citation: Citation, story: Story, ctx: CheckContext) -> Optional[Path]:
    """Return the cited file or directory if it exists, else None."""
    target = citation.target
    if target.startswith("./"):
        target = target[2:]
    if not target:
        return None

    candidate = Path(target)
    if candidate.is_absolute():
        return candidate if candidate.exists() else None

    for base in (ctx.project_root, story.path.parent):
        path = base / candidate
        if path.exists():
            return path
    return None


def heading_anchors(path: Path, ctx: CheckContext) -> set[str]:
    """Slugs and normalized texts of every heading in a markdown file."""
    key = path.resolve()
    if key in ctx.heading_cache:
        return ctx.heading_cache[key]

    anchors: set[str] = set()
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read cited file {path}: {e}")
        lines = []

    in_fence = False
    for line in lines:
        if FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = ANY_HEADING_RE.match(line)
        if match:
            heading = match.group(1)
            anchors.add(slugify(heading))
            anchors.add(_normalize_heading(heading))

    ctx.heading_cache[key] = anchors
    return anchors


def anchor_exists(anchor: str, anchors: set[str]) -> bool:
    return (
        anchor in anchors
        or slugify(anchor) in anchors
        or _normalize_heading(anchor) in anchors
    )


def _local(story: Story) -> list[Citation]:
    return [c for c in story.citations if c.is_local]


def _is_markdown(target: str) -> bool:
    return target.lower().endswith(MARKDOWN_SUFFIXES)


@check("CITE-PRESENT")
def check_citations_present(story: Story, ctx: CheckContext) -> CheckResult:
    count = len(story.citations)
    required = ctx.min_citations

    if count >= required:
        return passed("CITE-PRESENT", f"{count} citations (minimum {required})")
    if count == 0:
        return failed("CITE-PRESENT", "No citations")
    return partial("CITE-PRESENT", f"{count} citations, expected at least {required}")


@check("CITE-FILES")
def check_cited_files(story: Story, ctx: CheckContext) -> CheckResult:
    local = _local(story)
    if not local:
        return not_applicable("CITE-FILES", "No local citations")

    missing = [c for c in local if resolve_citation(c, story, ctx) is None]
    if missing:
        return failed(
            "CITE-FILES",
            f"{len(missing)} of {len(local)} cited files not found",
            [f"line {c.line_number}: {c.target}" for c in missing],
        )
    return passed("CITE-FILES", f"All {len(local)} cited files exist")


@check("CITE-ANCHORS")
def check_cited_anchors(story: Story, ctx: CheckContext) -> CheckResult:
    checked = 0
    broken = []

    for c in _local(story):
        if not c.anchor or not _is_markdown(c.target):
            continue
        path = resolve_citation(c, story, ctx)
        if path is None or not path.is_file():
            continue  # Missing targets are reported by CITE-FILES
        checked += 1
        if not anchor_exists(c.anchor, heading_anchors(path, ctx)):
            broken.append(c)

    if checked == 0:
        return not_applicable("CITE-ANCHORS", "No section anchors to verify")
    if broken:
        return failed(
            "CITE-ANCHORS",
            f"{len(broken)} of {checked} cited sections not found",
            [f"line {c.line_number}: {c.target}#{c.anchor}" for c in broken],
        )
    return passed("CITE-ANCHORS", f"All {checked} cited sections exist")


@check("CITE-SPECIFIC")
def check_citations_specific(story: Story, ctx: CheckContext) -> CheckResult:
    docs = [
        c for c in _local(story)
        if _is_markdown(c.target) and not STORY_FILE_PATTERN.match(Path(c.target).name)
    ]
    if not docs:
        return not_applicable("CITE-SPECIFIC", "No document citations")

    vague = [c for c in docs if not c.anchor]
    if not vague:
        return passed("CITE-SPECIFIC", f"All {len(docs)} document citations name a section")

    details = [f"line {c.line_number}: {c.target}" for c in vague]
    if len(vague) == len(docs):
        return failed("CITE-SPECIFIC", "No citation names a section", details)
    return partial("CITE-SPECIFIC", f"{len(vague)} of {len(docs)} citations cite a whole file", details)


@check("CITE-REFERENCES")
def check_references(story: Story, ctx: CheckContext) -> CheckResult:
    notes = story.section("Dev Notes")
    references = notes.find(REFERENCES_SECTION) if notes else None
    if references is None:
        return failed("CITE-REFERENCES", "No References subsection under Dev Notes")

    listed = citations_under(story, notes, references)
    if not listed:
        return partial("CITE-REFERENCES", "References subsection lists no citations")
    return passed("CITE-REFERENCES", f"{len(listed)} references listed")
