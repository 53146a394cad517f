"""Acceptance criteria coverage checks."""

import re

from storycheck.checks.base import (
    CheckContext,
    CheckResult,
    check,
    failed,
    not_applicable,
    partial,
    passed,
)
from storycheck.story.models import Story

TESTING_RE = re.compile(r'\btest', re.IGNORECASE)


def _referenced(story: Story) -> set[int]:
    refs: set[int] = set()
    for task in story.tasks:
        refs |= task.all_ac_refs()
    return refs


@check("AC-PRESENT")
def check_acs_present(story: Story, ctx: CheckContext) -> CheckResult:
    count = len(story.acceptance_criteria)
    if count == 0:
        return failed("AC-PRESENT", "No numbered acceptance criteria")
    return passed("AC-PRESENT", f"{count} acceptance criteria")


@check("AC-NUMBERING")
def check_ac_numbering(story: Story, ctx: CheckContext) -> CheckResult:
    numbers = [ac.number for ac in story.acceptance_criteria]
    if not numbers:
        return not_applicable("AC-NUMBERING", "No acceptance criteria")

    expected = list(range(1, len(numbers) + 1))
    if numbers != expected:
        return failed(
            "AC-NUMBERING",
            f"Numbered {', '.join(str(n) for n in numbers)}",
            [f"Expected 1..{len(numbers)}"],
        )
    return passed("AC-NUMBERING", f"Numbered 1..{len(numbers)}")


@check("AC-MAPPED")
def check_acs_mapped(story: Story, ctx: CheckContext) -> CheckResult:
    acs = story.acceptance_criteria
    if not acs:
        return not_applicable("AC-MAPPED", "No acceptance criteria")

    refs = _referenced(story)
    unmapped = [ac for ac in acs if ac.number not in refs]
    details = [f"AC #{ac.number} (line {ac.line_number}) has no task" for ac in unmapped]

    if not unmapped:
        return passed("AC-MAPPED", f"All {len(acs)} ACs covered by tasks")
    if len(unmapped) == len(acs):
        return failed("AC-MAPPED", "No AC is referenced by any task", details)
    return partial("AC-MAPPED", f"{len(unmapped)} of {len(acs)} ACs have no task", details)


@check("AC-REFS-VALID")
def check_ac_refs_valid(story: Story, ctx: CheckContext) -> CheckResult:
    known = {ac.number for ac in story.acceptance_criteria}
    referencing = [t for t in story.all_tasks() if t.ac_refs]
    if not referencing:
        return not_applicable("AC-REFS-VALID", "No task references an AC")

    invalid = []
    for task in referencing:
        for ref in task.ac_refs:
            if ref not in known:
                invalid.append(f"line {task.line_number}: AC #{ref} does not exist")

    if invalid:
        return failed("AC-REFS-VALID", f"{len(invalid)} references to unknown ACs", invalid)
    return passed("AC-REFS-VALID", f"{len(referencing)} tasks reference existing ACs")


@check("AC-TASK-LINKS")
def check_task_links(story: Story, ctx: CheckContext) -> CheckResult:
    if not story.tasks:
        return failed("AC-TASK-LINKS", "No tasks")

    unlinked = [t for t in story.tasks if not t.all_ac_refs()]
    details = [f"line {t.line_number}: {t.text}" for t in unlinked]

    if not unlinked:
        return passed("AC-TASK-LINKS", f"All {len(story.tasks)} tasks reference an AC")
    if len(unlinked) == len(story.tasks):
        return failed("AC-TASK-LINKS", "No task references an AC", details)
    return partial(
        "AC-TASK-LINKS",
        f"{len(unlinked)} of {len(story.tasks)} tasks reference no AC",
        details,
    )


@check("AC-TESTING")
def check_testing_tasks(story: Story, ctx: CheckContext) -> CheckResult:
    testing = [t for t in story.all_tasks() if TESTING_RE.search(t.text)]
    ac_count = len(story.acceptance_criteria)

    if not testing:
        return failed("AC-TESTING", "No testing tasks or subtasks")
    if len(testing) < ac_count:
        return partial(
            "AC-TESTING",
            f"{len(testing)} testing tasks for {ac_count} ACs",
        )
    return passed("AC-TESTING", f"{len(testing)} testing tasks for {ac_count} ACs")
