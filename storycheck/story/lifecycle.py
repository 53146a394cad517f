"""Story status lifecycle using the transitions library.

The status lives in the story file's "Status:" line. Moving a story to
ready-for-dev is gated on its latest validation report: a story whose
last validation FAILED (or that was never validated) stays drafted
unless the transition is forced.

Usage:
    from storycheck.story.lifecycle import transition

    transition(story_path, "ready-for-dev", reports_dir)
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from transitions import Machine, MachineError

from storycheck.lib.constants import OUTCOME_FAIL, STORY_STATUSES
from storycheck.report import latest_outcome
from storycheck.story.parser import parse_story
from storycheck.story.stories import update_story_status

logger = logging.getLogger(__name__)


# Transitions defined as (trigger, source, dest)
# Each trigger becomes a method on the lifecycle
TRANSITIONS = [
    {"trigger": "draft", "source": "backlog", "dest": "drafted"},
    {"trigger": "mark_ready", "source": "drafted", "dest": "ready-for-dev",
     "conditions": "validation_passed"},
    {"trigger": "reopen", "source": "ready-for-dev", "dest": "drafted"},
    {"trigger": "start", "source": "ready-for-dev", "dest": "in-progress"},
    {"trigger": "submit", "source": "in-progress", "dest": "review"},
    {"trigger": "request_changes", "source": "review", "dest": "in-progress"},
    {"trigger": "complete", "source": "review", "dest": "done"},
]


def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name."""
    lookup: dict[tuple[str, str], str] = {}
    for t in TRANSITIONS:
        key = (t["source"], t["dest"])
        if key not in lookup:
            lookup[key] = t["trigger"]
    return lookup


TRIGGER_FOR = _build_trigger_lookup()


class InvalidTransition(Exception):
    """Raised when attempting an invalid status transition."""

    def __init__(self, from_status: Optional[str], to_status: str, story: str = "", reason: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.story = story
        self.reason = reason
        message = f"Invalid transition: {from_status} -> {to_status}"
        if story:
            message += f" (story: {story})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class StoryLifecycle:
    """State machine for one story file.

    Loads the initial status from the file, writes every change back,
    and logs each transition.
    """

    def __init__(
        self,
        story_path: Path,
        reports_dir: Path,
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        self.story_path = story_path
        self.reports_dir = reports_dir
        self.on_transition = on_transition

        self.loaded_status = parse_story(story_path).status
        initial = self.loaded_status
        if initial not in STORY_STATUSES:
            logger.warning(f"[STORY] {story_path.name}: Unknown status '{initial}', treating as 'drafted'")
            initial = "drafted"

        self.machine = Machine(
            model=self,
            states=STORY_STATUSES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def validation_passed(self, event) -> bool:
        """Guard for mark_ready: latest report exists and did not fail."""
        outcome = latest_outcome(self.reports_dir, self.story_path.stem)
        if outcome is None:
            logger.info(f"[STORY] {self.story_path.name}: no validation report, cannot mark ready")
            return False
        if outcome == OUTCOME_FAIL:
            logger.info(f"[STORY] {self.story_path.name}: latest validation failed, cannot mark ready")
            return False
        return True

    def on_state_change(self, event) -> None:
        from_status = event.transition.source
        to_status = event.transition.dest
        trigger = event.event.name

        logger.info(f"[STORY] {self.story_path.name}: {from_status} -> {to_status} ({trigger})")
        update_story_status(self.story_path, self.state)

        if self.on_transition:
            self.on_transition(from_status, to_status, trigger)

    def can(self, trigger: str) -> bool:
        return trigger in self.machine.get_triggers(self.state)

    def get_available_triggers(self) -> list[str]:
        return self.machine.get_triggers(self.state)


def transition(story_path: Path, to_status: str, reports_dir: Path, force: bool = False) -> str:
    """Move a story to a new status.

    Args:
        story_path: Story markdown file
        to_status: Target status
        reports_dir: Where validation reports live (for the ready gate)
        force: Skip transition rules and the validation gate

    Returns:
        The status the story was in before the transition

    Raises:
        InvalidTransition: If the transition is not allowed
    """
    if to_status not in STORY_STATUSES:
        raise InvalidTransition(None, to_status, story_path.name, "unknown status")

    lifecycle = StoryLifecycle(story_path, reports_dir)
    current = lifecycle.loaded_status

    if force:
        logger.info(f"[STORY] {story_path.name}: {current} -> {to_status} (forced)")
        update_story_status(story_path, to_status)
        return current

    if current == to_status:
        logger.debug(f"[STORY] {story_path.name}: already {to_status}, no-op")
        return current

    if current not in STORY_STATUSES:
        logger.warning(
            f"[STORY] {story_path.name}: {current} -> {to_status} "
            "(unknown source status, allowing)"
        )
        update_story_status(story_path, to_status)
        return current

    trigger = TRIGGER_FOR.get((current, to_status))
    if trigger is None:
        raise InvalidTransition(current, to_status, story_path.name)

    try:
        moved = getattr(lifecycle, trigger)()
    except MachineError as e:
        raise InvalidTransition(current, to_status, story_path.name) from e

    if not moved:
        raise InvalidTransition(
            current, to_status, story_path.name,
            "latest validation report is missing or FAILED (use --force to override)",
        )
    return current
