"""Shared fixtures: a small project with docs and stories on disk."""

import pytest
from pathlib import Path

from storycheck.checks import CheckContext
from storycheck.lib.config import load_project_config


ARCHITECTURE_MD = """# Architecture

## Event Sourcing

Aggregates persist events.

## Multi-Tenancy

Every query is tenant scoped.

```
## Not A Heading
```
"""

EPICS_MD = """# Epics

## Epic 2: Requests

### Story 2.3: Approve or reject VM request

Admins review requests.
"""

PREVIOUS_STORY_MD = """# Story 2.2: Submit VM request

Status: done

## Story

As a user, I want to submit requests, so that I get VMs.
"""

GOOD_STORY_MD = """# Story 2.3: Approve or reject VM request

Status: drafted

## Story

As an admin,
I want to approve or reject pending VM requests,
so that resources are provisioned only after review.

## Acceptance Criteria

1. Admin sees pending requests of their tenant.
2. Rejecting a request requires a reason
   of at least 10 characters.

## Tasks / Subtasks

- [ ] Task 1: Add approve endpoint (AC: #1)
  - [ ] Write integration test for approve (AC: #1)
- [ ] Task 2: Add reject endpoint (AC: #2)
  - [ ] Write unit test for reason validation (AC: #2)

## Dev Notes

Commands are stored through the event store [Source: docs/architecture.md#Event Sourcing].
Tenant filtering follows [Source: docs/architecture.md#multi-tenancy].

### Learnings from Previous Story

Reuse the request projection from [Source: docs/stories/2-2-submit-request.md].

### References

- [Source: docs/epics.md#Story 2.3: Approve or reject VM request]

## Dev Agent Record

### Context Reference

### Agent Model Used

### Debug Log References

### Completion Notes List

### File List

## Change Log

- 2026-10-19: Draft created
"""

GOOD_STORY_NAME = "2-3-approve-reject.md"


@pytest.fixture
def project_root(tmp_path):
    """Project with architecture and epic docs plus a finished story 2.2."""
    docs = tmp_path / "docs"
    stories = docs / "stories"
    stories.mkdir(parents=True)
    (docs / "architecture.md").write_text(ARCHITECTURE_MD)
    (docs / "epics.md").write_text(EPICS_MD)
    (stories / "2-2-submit-request.md").write_text(PREVIOUS_STORY_MD)
    return tmp_path


@pytest.fixture
def stories_dir(project_root):
    return project_root / "docs" / "stories"


@pytest.fixture
def config(project_root):
    return load_project_config(project_root)


@pytest.fixture
def write_story(stories_dir):
    """Write a story file into the project and return its path."""
    def _write(text: str, name: str = GOOD_STORY_NAME) -> Path:
        path = stories_dir / name
        path.write_text(text)
        return path
    return _write


@pytest.fixture
def good_story_path(write_story):
    return write_story(GOOD_STORY_MD)


@pytest.fixture
def make_ctx(project_root, stories_dir):
    """Build a CheckContext rooted at the test project."""
    def _make(min_citations: int = 3, previous_story=None) -> CheckContext:
        return CheckContext(
            project_root=project_root,
            stories_dir=stories_dir,
            min_citations=min_citations,
            previous_story=previous_story,
        )
    return _make


@pytest.fixture
def good_story_text():
    """A story that passes every check when story 2.2 is done."""
    return GOOD_STORY_MD
