"""
Configuration loader for storycheck.

Loads project configuration from storycheck.env at the project root.
A project without the file runs on defaults rooted at the working directory.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import envparse

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "storycheck.env"

DEFAULT_DOCS_ROOT = "docs"
DEFAULT_STORIES_DIR = "docs/stories"
DEFAULT_REPORTS_DIR = "docs/stories/validation"
DEFAULT_CHECKLIST_PATH = "checklist.yaml"
DEFAULT_MAX_MAJOR_ISSUES = 3
DEFAULT_MIN_CITATIONS = 3


@dataclass
class ProjectConfig:
    """Project-level configuration from storycheck.env"""
    name: str
    root: Path
    docs_root: Path  # Where architecture / epic docs live
    stories_dir: Path  # Story markdown files
    reports_dir: Path  # Validation reports are written here
    checklist_path: Path  # Optional YAML checklist overrides
    max_major_issues: int  # More majors than this fails the story
    min_citations: int  # Fewer citations than this is a partial pass
    write_json: bool  # Write report JSON next to the markdown


def find_project_root(start: Path) -> Optional[Path]:
    """Walk up from start looking for storycheck.env."""
    current = start.resolve()
    for candidate in [current, *current.parents]:
        if (candidate / CONFIG_FILENAME).exists():
            return candidate
    return None


def _resolve(root: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else root / path


def load_project_config(project_root: Path) -> ProjectConfig:
    """Load storycheck.env from project_root and return ProjectConfig.

    Missing file yields defaults. Invalid values raise ValueError.
    """
    env_path = project_root / CONFIG_FILENAME
    env: dict[str, str] = {}
    if env_path.exists():
        env = envparse.load_env(str(env_path))
    else:
        logger.debug(f"No {CONFIG_FILENAME} in {project_root}, using defaults")

    max_major = envparse.get_int(env, "MAX_MAJOR_ISSUES", DEFAULT_MAX_MAJOR_ISSUES)
    min_citations = envparse.get_int(env, "MIN_CITATIONS", DEFAULT_MIN_CITATIONS)
    if max_major < 0:
        raise ValueError(f"MAX_MAJOR_ISSUES must be >= 0, got {max_major}")
    if min_citations < 0:
        raise ValueError(f"MIN_CITATIONS must be >= 0, got {min_citations}")

    return ProjectConfig(
        name=env.get("PROJECT_NAME", project_root.resolve().name),
        root=project_root,
        docs_root=_resolve(project_root, env.get("DOCS_ROOT", DEFAULT_DOCS_ROOT)),
        stories_dir=_resolve(project_root, env.get("STORIES_DIR", DEFAULT_STORIES_DIR)),
        reports_dir=_resolve(project_root, env.get("REPORTS_DIR", DEFAULT_REPORTS_DIR)),
        checklist_path=_resolve(project_root, env.get("CHECKLIST_PATH", DEFAULT_CHECKLIST_PATH)),
        max_major_issues=max_major,
        min_citations=min_citations,
        write_json=envparse.get_bool(env, "WRITE_JSON", True),
    )
