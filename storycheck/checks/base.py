"""
Check registry and shared types.

Each check is a plain function taking (story, context) and returning a
CheckResult. Checks register themselves by checklist item ID:

    @check("META-TITLE")
    def check_title(story, ctx):
        ...
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from storycheck.lib.constants import RESULT_FAIL, RESULT_NA, RESULT_PARTIAL, RESULT_PASS
from storycheck.story.models import Story


@dataclass
class CheckResult:
    """Outcome of one checklist item against one story."""
    item_id: str
    result: str  # PASS, PARTIAL, FAIL, NA
    evidence: str  # One-line summary for the report table
    details: list[str] = field(default_factory=list)  # Per-finding lines, with line numbers

    @property
    def passed(self) -> bool:
        return self.result == RESULT_PASS


@dataclass
class CheckContext:
    """Everything a check may need besides the story itself."""
    project_root: Path
    stories_dir: Path
    min_citations: int
    previous_story: Optional[Story] = None
    # Cache of heading anchors per resolved file, filled by the citation checks
    heading_cache: dict[Path, set[str]] = field(default_factory=dict)


CheckFn = Callable[[Story, CheckContext], CheckResult]

CHECKS: dict[str, CheckFn] = {}


def check(item_id: str) -> Callable[[CheckFn], CheckFn]:
    """Register a check function under a checklist item ID."""
    def decorator(fn: CheckFn) -> CheckFn:
        if item_id in CHECKS:
            raise ValueError(f"Duplicate check registered for {item_id}")
        CHECKS[item_id] = fn
        return fn
    return decorator


def passed(item_id: str, evidence: str, details: list[str] | None = None) -> CheckResult:
    return CheckResult(item_id, RESULT_PASS, evidence, details or [])


def partial(item_id: str, evidence: str, details: list[str] | None = None) -> CheckResult:
    return CheckResult(item_id, RESULT_PARTIAL, evidence, details or [])


def failed(item_id: str, evidence: str, details: list[str] | None = None) -> CheckResult:
    return CheckResult(item_id, RESULT_FAIL, evidence, details or [])


def not_applicable(item_id: str, evidence: str) -> CheckResult:
    return CheckResult(item_id, RESULT_NA, evidence, [])
