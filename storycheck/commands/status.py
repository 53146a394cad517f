"""
storycheck status - Show or change a story's status.
"""

from storycheck.lib.config import ProjectConfig
from storycheck.report import latest_outcome
from storycheck.story.lifecycle import InvalidTransition, StoryLifecycle, transition
from storycheck.story.parser import StoryParseError
from storycheck.story.stories import find_story


def cmd_status(args, project_config: ProjectConfig) -> int:
    story_path = find_story(project_config.stories_dir, args.story)
    if story_path is None:
        print(f"ERROR: Story '{args.story}' not found in {project_config.stories_dir}")
        return 1

    try:
        if not args.new_status:
            lifecycle = StoryLifecycle(story_path, project_config.reports_dir)
            outcome = latest_outcome(project_config.reports_dir, story_path.stem)
            print(f"Story:      {story_path.name}")
            print(f"Status:     {lifecycle.loaded_status or '-'}")
            print(f"Validation: {outcome or 'not validated'}")
            triggers = lifecycle.get_available_triggers()
            if triggers:
                print(f"Next:       {', '.join(triggers)}")
            return 0

        previous = transition(
            story_path,
            args.new_status,
            project_config.reports_dir,
            force=getattr(args, "force", False),
        )
    except StoryParseError as e:
        print(f"ERROR: {e}")
        return 1
    except InvalidTransition as e:
        print(f"ERROR: {e}")
        return 1

    print(f"{story_path.name}: {previous or '-'} -> {args.new_status}")
    return 0
