"""
storycheck checklist - Show the active checklist.
"""

from pathlib import Path

from storycheck.checklist import SECTION_TITLES, load_checklist
from storycheck.lib.config import ProjectConfig
from storycheck.lib.validate import ValidationError


def cmd_checklist(args, project_config: ProjectConfig) -> int:
    explicit = getattr(args, "checklist", None)
    checklist_path = Path(explicit) if explicit else project_config.checklist_path
    try:
        checklist = load_checklist(checklist_path, project_config, required=bool(explicit))
    except (ValidationError, ValueError, FileNotFoundError) as e:
        print(f"ERROR: Invalid checklist {checklist_path}: {e}")
        return 2

    source = checklist_path if checklist_path.exists() else "defaults"
    print(f"Checklist: {checklist.name} ({source})")
    print(f"Fails on any critical issue or more than {checklist.max_major_issues} major issues")
    print(f"Minimum citations: {checklist.min_citations}")
    print()

    for section in dict.fromkeys(item.section for item in checklist.items):
        print(SECTION_TITLES.get(section, section))
        print("-" * 60)
        for item in checklist.items:
            if item.section != section:
                continue
            marker = "   " if item.enabled else "off"
            print(f"  {marker} {item.id:<18} {item.severity:<8} {item.title}")
        print()
    return 0
