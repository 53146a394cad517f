"""Shared constants for storycheck."""

import re

# Story lifecycle statuses, in workflow order
STORY_STATUSES = [
    "backlog",
    "drafted",
    "ready-for-dev",
    "in-progress",
    "review",
    "done",
]

# A previous story in one of these states should have fed learnings forward
PREVIOUS_STORY_LEARNING_STATUSES = ("review", "done")

# Check severities, most severe first
SEVERITIES = ("critical", "major", "minor")

# Per-item results
RESULT_PASS = "PASS"
RESULT_PARTIAL = "PARTIAL"
RESULT_FAIL = "FAIL"
RESULT_NA = "NA"
RESULTS = (RESULT_PASS, RESULT_PARTIAL, RESULT_FAIL, RESULT_NA)

# Overall report outcomes
OUTCOME_PASS = "PASS"
OUTCOME_PASS_WITH_ISSUES = "PASS_WITH_ISSUES"
OUTCOME_FAIL = "FAIL"
OUTCOMES = (OUTCOME_PASS, OUTCOME_PASS_WITH_ISSUES, OUTCOME_FAIL)

# Section titles every story must have
REQUIRED_SECTIONS = ["Story", "Acceptance Criteria", "Tasks / Subtasks", "Dev Notes"]

DEV_AGENT_RECORD_SUBSECTIONS = [
    "Context Reference",
    "Agent Model Used",
    "Debug Log References",
    "Completion Notes List",
    "File List",
]

LEARNINGS_SECTION = "Learnings from Previous Story"
REFERENCES_SECTION = "References"

# Story file names: 2-3-approve-reject.md
STORY_FILE_PATTERN = re.compile(r'^(\d+)-(\d+)(?:-[A-Za-z0-9_-]+)?\.md$')
STORY_KEY_PATTERN = re.compile(r'^(\d+)\.(\d+)$')

# Accepted spellings for sections with common variants
TASKS_SECTION_TITLES = ("Tasks / Subtasks", "Tasks")
CHANGE_LOG_TITLES = ("Change Log", "Changelog")
