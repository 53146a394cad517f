"""
storycheck list - List stories with status and latest validation outcome.
"""

from storycheck.lib.config import ProjectConfig
from storycheck.report import latest_outcome
from storycheck.story.stories import list_stories


def cmd_list(args, project_config: ProjectConfig) -> int:
    """List stories."""
    stories = list_stories(project_config.stories_dir)
    if not stories:
        print(f"Stories: none in {project_config.stories_dir}")
        return 0

    print("Stories")
    print("-" * 72)
    for story in stories:
        key = story.key or "?"
        status = story.status or "-"
        outcome = latest_outcome(project_config.reports_dir, story.path.stem) or "not validated"
        title = story.title[:36] + "..." if len(story.title) > 36 else story.title
        print(f"  {key:<6} {status:<14} {outcome:<17} {title}")
    print()
    return 0
