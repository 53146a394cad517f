"""
Data models for story documents.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _compact(title: str) -> str:
    return "".join(title.split()).lower()


@dataclass
class Section:
    """A heading and the lines under it, up to the next heading of equal or higher level."""
    title: str
    level: int                                 # 2 for "##", 3 for "###"
    line_number: int
    content: str = ""                          # Body text, excluding nested subsections
    children: list["Section"] = field(default_factory=list)

    def find(self, title: str) -> Optional["Section"]:
        """Find a direct child section by title (case-insensitive)."""
        wanted = _compact(title)
        for child in self.children:
            if _compact(child.title) == wanted:
                return child
        return None

    def full_text(self) -> str:
        """Body text including all nested subsections."""
        parts = [self.content]
        for child in self.children:
            parts.append(child.full_text())
        return "\n".join(p for p in parts if p)


@dataclass
class AcceptanceCriterion:
    number: int
    text: str
    line_number: int


@dataclass
class Task:
    """A checkbox item under Tasks / Subtasks."""
    text: str
    done: bool
    depth: int                                 # 0 for tasks, 1+ for subtasks
    line_number: int
    ac_refs: list[int] = field(default_factory=list)
    subtasks: list["Task"] = field(default_factory=list)

    def all_ac_refs(self) -> set[int]:
        """AC numbers referenced by this task or any subtask."""
        refs = set(self.ac_refs)
        for sub in self.subtasks:
            refs |= sub.all_ac_refs()
        return refs


@dataclass
class Citation:
    """A reference from the story to another document."""
    target: str                                # docs/architecture.md
    anchor: Optional[str]                      # "Event Sourcing", or None
    text: str                                  # Raw citation as written
    line_number: int
    section: str                               # Section the citation appears in
    kind: str = "source"                       # source, link, external

    @property
    def is_local(self) -> bool:
        return self.kind != "external"


@dataclass
class Story:
    """A story document parsed from markdown.

    Parsing is lenient: anything missing stays empty so the
    checklist can report it rather than the parser failing.
    """
    path: Path
    title_line: str                            # Raw H1 text
    key: Optional[str] = None                  # "2.3"
    epic: Optional[int] = None
    number: Optional[int] = None
    title: str = ""
    status: Optional[str] = None
    statement: str = ""                        # As a / I want / so that
    sections: list[Section] = field(default_factory=list)
    acceptance_criteria: list[AcceptanceCriterion] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    citations: list[Citation] = field(default_factory=list)
    raw: str = ""

    def section(self, *titles: str) -> Optional[Section]:
        """Find a top-level section by any of the given titles.

        Matching ignores case and whitespace, so "Tasks/Subtasks"
        finds "Tasks / Subtasks".
        """
        wanted = {_compact(t) for t in titles}
        for s in self.sections:
            if _compact(s.title) in wanted:
                return s
        return None

    def all_tasks(self) -> list[Task]:
        """Tasks and subtasks, flattened in document order."""
        flat = []

        def walk(tasks: list[Task]):
            for t in tasks:
                flat.append(t)
                walk(t.subtasks)

        walk(self.tasks)
        return flat

    @property
    def display_name(self) -> str:
        if self.key:
            return f"Story {self.key}: {self.title}" if self.title else f"Story {self.key}"
        return self.path.stem
