"""
storycheck show - Print the latest validation report for a story.
"""

from storycheck.lib.config import ProjectConfig
from storycheck.report import latest_report_markdown
from storycheck.story.stories import find_story


def cmd_show(args, project_config: ProjectConfig) -> int:
    story_path = find_story(project_config.stories_dir, args.story)
    if story_path is None:
        print(f"ERROR: Story '{args.story}' not found in {project_config.stories_dir}")
        return 1

    report_path = latest_report_markdown(project_config.reports_dir, story_path.stem)
    if report_path is None:
        print(f"No validation report for {story_path.name}.")
        print(f"Run: storycheck validate {args.story}")
        return 1

    print(report_path.read_text())
    return 0
