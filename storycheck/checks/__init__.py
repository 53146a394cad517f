"""
Story checklist checks.

Importing this package registers every check in CHECKS, keyed by
checklist item ID.
"""

from storycheck.checks.base import CHECKS, CheckContext, CheckResult, check
from storycheck.checks import metadata, structure, citations, coverage, continuity  # noqa: F401

__all__ = [
    "CHECKS",
    "CheckContext",
    "CheckResult",
    "check",
]
