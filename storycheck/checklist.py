"""
Story quality checklist definition.

The default checklist covers metadata, structure, citations, AC coverage
and continuity with the previous story. A project can tune it with a
YAML file (checklist.yaml by default):

    name: Create Story Quality Checklist
    max_major_issues: 2
    min_citations: 5
    disable:
      - META-CHANGELOG
    severity:
      CITE-SPECIFIC: major

Unknown check IDs are an error so a typo can't leave a check running.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import yaml

from storycheck.lib.config import (
    DEFAULT_MAX_MAJOR_ISSUES,
    DEFAULT_MIN_CITATIONS,
    ProjectConfig,
)
from storycheck.lib.validate import validate

logger = logging.getLogger(__name__)

DEFAULT_CHECKLIST_NAME = "Create Story Quality Checklist"

SECTION_TITLES = {
    "metadata": "Metadata",
    "structure": "Structure",
    "citations": "Citations",
    "coverage": "Acceptance Criteria Coverage",
    "continuity": "Previous Story Continuity",
}


@dataclass(frozen=True)
class CheckItem:
    """A single checklist criterion."""
    id: str
    section: str  # Key into SECTION_TITLES
    title: str
    severity: str  # critical, major, minor
    remediation: str
    enabled: bool = True


@dataclass
class Checklist:
    name: str
    items: list[CheckItem]
    max_major_issues: int
    min_citations: int

    def enabled_items(self) -> list[CheckItem]:
        return [i for i in self.items if i.enabled]

    def get(self, item_id: str) -> Optional[CheckItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def sections(self) -> list[str]:
        """Section keys of enabled items, in checklist order."""
        seen = []
        for item in self.enabled_items():
            if item.section not in seen:
                seen.append(item.section)
        return seen


DEFAULT_ITEMS = [
    # ─────────────────────────────────────────────────────────────────────
    # METADATA
    # ─────────────────────────────────────────────────────────────────────
    CheckItem("META-TITLE", "metadata", "Title names the story key",
              "critical", "Use a title of the form '# Story <epic>.<n>: <title>'."),
    CheckItem("META-STATUS", "metadata", "Status is set to a known value",
              "critical", "Add 'Status: drafted' under the title."),
    CheckItem("META-STATEMENT", "metadata", "User story statement is complete",
              "major", "Write the story as 'As a <role>, I want <goal>, so that <benefit>'."),
    CheckItem("META-AGENT-RECORD", "metadata", "Dev Agent Record is initialized",
              "minor", "Add '## Dev Agent Record' with its standard subsections."),
    CheckItem("META-CHANGELOG", "metadata", "Change Log is initialized",
              "minor", "Add a '## Change Log' section."),

    # ─────────────────────────────────────────────────────────────────────
    # STRUCTURE
    # ─────────────────────────────────────────────────────────────────────
    CheckItem("STRUCT-SECTIONS", "structure", "Required sections are present",
              "major", "Add the missing sections."),
    CheckItem("STRUCT-DEV-NOTES", "structure", "Dev Notes give specific guidance",
              "major", "Ground Dev Notes in cited architecture and epic documents."),

    # ─────────────────────────────────────────────────────────────────────
    # CITATIONS
    # ─────────────────────────────────────────────────────────────────────
    CheckItem("CITE-PRESENT", "citations", "Story cites its sources",
              "major", "Cite the architecture, tech spec and epic sections the story relies on."),
    CheckItem("CITE-FILES", "citations", "Cited files exist",
              "critical", "Fix the path or remove the citation."),
    CheckItem("CITE-ANCHORS", "citations", "Cited sections exist",
              "major", "Point the anchor at an existing heading of the cited file."),
    CheckItem("CITE-SPECIFIC", "citations", "Citations point at sections, not whole files",
              "minor", "Add '#<section>' to citations of whole files."),
    CheckItem("CITE-REFERENCES", "citations", "Dev Notes list references",
              "minor", "Add '### References' under Dev Notes listing the citations."),

    # ─────────────────────────────────────────────────────────────────────
    # ACCEPTANCE CRITERIA COVERAGE
    # ─────────────────────────────────────────────────────────────────────
    CheckItem("AC-PRESENT", "coverage", "Acceptance criteria are defined",
              "critical", "List numbered acceptance criteria."),
    CheckItem("AC-NUMBERING", "coverage", "Acceptance criteria are numbered 1..n",
              "minor", "Renumber acceptance criteria sequentially."),
    CheckItem("AC-MAPPED", "coverage", "Every AC is covered by a task",
              "major", "Reference each AC from a task, e.g. '(AC: #1)'."),
    CheckItem("AC-REFS-VALID", "coverage", "Tasks reference existing ACs",
              "major", "Fix task references to ACs that don't exist."),
    CheckItem("AC-TASK-LINKS", "coverage", "Every task references an AC",
              "minor", "Link each task to the AC it satisfies."),
    CheckItem("AC-TESTING", "coverage", "Testing subtasks are planned",
              "major", "Add testing subtasks covering each AC."),

    # ─────────────────────────────────────────────────────────────────────
    # CONTINUITY
    # ─────────────────────────────────────────────────────────────────────
    CheckItem("CONT-PREVIOUS", "continuity", "Learnings from the previous story are captured",
              "major", "Add '### Learnings from Previous Story' under Dev Notes."),
    CheckItem("CONT-PREV-CITED", "continuity", "Previous story is cited",
              "minor", "Cite the previous story file in the learnings subsection."),
]


def default_checklist(config: Optional[ProjectConfig] = None) -> Checklist:
    return Checklist(
        name=DEFAULT_CHECKLIST_NAME,
        items=list(DEFAULT_ITEMS),
        max_major_issues=config.max_major_issues if config else DEFAULT_MAX_MAJOR_ISSUES,
        min_citations=config.min_citations if config else DEFAULT_MIN_CITATIONS,
    )


def apply_overrides(checklist: Checklist, data: dict) -> Checklist:
    """Apply validated override data to a checklist.

    Raises:
        ValueError: If overrides name check IDs that don't exist
    """
    known = {item.id for item in checklist.items}
    disabled = set(data.get("disable", []))
    severities = data.get("severity", {})

    unknown = sorted((disabled | set(severities)) - known)
    if unknown:
        raise ValueError(f"Unknown check IDs in checklist overrides: {', '.join(unknown)}")

    items = []
    for item in checklist.items:
        if item.id in disabled:
            item = replace(item, enabled=False)
        if item.id in severities:
            item = replace(item, severity=severities[item.id])
        items.append(item)

    return Checklist(
        name=data.get("name", checklist.name),
        items=items,
        max_major_issues=data.get("max_major_issues", checklist.max_major_issues),
        min_citations=data.get("min_citations", checklist.min_citations),
    )


def load_checklist(
    path: Optional[Path],
    config: Optional[ProjectConfig] = None,
    required: bool = False,
) -> Checklist:
    """Load checklist.yaml overrides on top of the defaults.

    Missing file returns the defaults, unless required is set (a path the
    user named explicitly).

    Raises:
        FileNotFoundError: If required and the file doesn't exist
        ValidationError: If the YAML doesn't match the checklist schema
        ValueError: If the YAML is malformed or names unknown checks
    """
    checklist = default_checklist(config)
    if path is None or not path.exists():
        if required:
            raise FileNotFoundError(f"Checklist file not found: {path}")
        return checklist

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from None

    if data is None:
        logger.debug(f"Empty checklist file {path}, using defaults")
        return checklist

    validate(data, "checklist")

    checklist = apply_overrides(checklist, data)
    disabled = [i.id for i in checklist.items if not i.enabled]
    if disabled:
        logger.info(f"Checklist {path.name} disables: {', '.join(disabled)}")
    return checklist