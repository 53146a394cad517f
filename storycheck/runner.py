"""
Checklist runner.

Runs every enabled checklist item against a story and folds the results
into a ValidationReport:

- FAIL counts against the item's severity
- PARTIAL counts as one minor issue
- Outcome is FAIL on any critical issue or more majors than allowed,
  PASS_WITH_ISSUES on any other issue, PASS otherwise
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from storycheck.checklist import Checklist
from storycheck.checks import CHECKS, CheckContext, CheckResult
from storycheck.lib.config import ProjectConfig
from storycheck.lib.constants import (
    OUTCOME_FAIL,
    OUTCOME_PASS,
    OUTCOME_PASS_WITH_ISSUES,
    RESULT_FAIL,
    RESULT_PARTIAL,
    SEVERITIES,
)
from storycheck.report import ItemResult, ValidationReport
from storycheck.story.models import Story
from storycheck.story.stories import find_previous_story

logger = logging.getLogger(__name__)


def build_context(story: Story, config: ProjectConfig, checklist: Checklist) -> CheckContext:
    """Build the check context for a story, including its previous story."""
    return CheckContext(
        project_root=config.root,
        stories_dir=config.stories_dir,
        min_citations=checklist.min_citations,
        previous_story=find_previous_story(config.stories_dir, story),
    )


def count_issues(results: list[ItemResult]) -> dict[str, int]:
    counts = {s: 0 for s in SEVERITIES}
    for r in results:
        if r.result == RESULT_FAIL:
            counts[r.severity] += 1
        elif r.result == RESULT_PARTIAL:
            counts["minor"] += 1
    return counts


def decide_outcome(counts: dict[str, int], max_major_issues: int) -> str:
    if counts["critical"] > 0 or counts["major"] > max_major_issues:
        return OUTCOME_FAIL
    if counts["major"] > 0 or counts["minor"] > 0:
        return OUTCOME_PASS_WITH_ISSUES
    return OUTCOME_PASS


def _run_one(item_id: str, story: Story, ctx: CheckContext) -> CheckResult:
    fn = CHECKS.get(item_id)
    if fn is None:
        logger.warning(f"No check implemented for {item_id}")
        return CheckResult(item_id, RESULT_FAIL, f"No check implemented for {item_id}")
    try:
        return fn(story, ctx)
    except Exception as e:
        # A broken check must not hide the other results
        logger.exception(f"Check {item_id} crashed on {story.path}")
        return CheckResult(item_id, RESULT_FAIL, f"Check error: {e}")


def run_checklist(
    story: Story,
    checklist: Checklist,
    ctx: CheckContext,
    now: Optional[datetime] = None,
) -> ValidationReport:
    """Run every enabled checklist item against a story."""
    results = []
    for item in checklist.enabled_items():
        outcome = _run_one(item.id, story, ctx)
        logger.debug(f"{item.id}: {outcome.result} - {outcome.evidence}")
        results.append(ItemResult(
            item_id=item.id,
            section=item.section,
            title=item.title,
            severity=item.severity,
            result=outcome.result,
            evidence=outcome.evidence,
            details=list(outcome.details),
            remediation=item.remediation if outcome.result in (RESULT_FAIL, RESULT_PARTIAL) else "",
        ))

    counts = count_issues(results)
    generated = (now or datetime.now()).replace(microsecond=0)

    return ValidationReport(
        story_key=story.key,
        story_title=story.title,
        story_path=_display_path(story.path, ctx.project_root),
        checklist=checklist.name,
        generated_at=generated.isoformat(),
        outcome=decide_outcome(counts, checklist.max_major_issues),
        counts=counts,
        results=results,
    )


def _display_path(path: Path, root: Path) -> str:
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)
