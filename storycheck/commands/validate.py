"""
storycheck validate - Run the quality checklist against a story.
"""

from pathlib import Path

from storycheck.checklist import load_checklist
from storycheck.lib.config import ProjectConfig
from storycheck.lib.constants import RESULT_FAIL, RESULT_PARTIAL
from storycheck.lib.validate import ValidationError
from storycheck.report import ValidationReport, write_report
from storycheck.runner import build_context, run_checklist
from storycheck.story.parser import StoryParseError, parse_story
from storycheck.story.stories import find_story

RESULT_SYMBOLS = {"PASS": "+", "PARTIAL": "~", "FAIL": "x", "NA": "-"}


def print_summary(report: ValidationReport) -> None:
    """Print a compact per-item summary of a report."""
    label = f"Story {report.story_key}: {report.story_title}" if report.story_key else report.story_path
    print(f"Validating: {label}")
    print("=" * 60)
    for r in report.results:
        print(f"  [{RESULT_SYMBOLS.get(r.result, '?')}] {r.item_id:<18} {r.evidence}")
        if r.result in (RESULT_FAIL, RESULT_PARTIAL):
            for detail in r.details:
                print(f"        {detail}")
    print("-" * 60)
    print(f"Outcome: {report.outcome_line()}")


def cmd_validate(args, project_config: ProjectConfig) -> int:
    """Validate a story and write the report."""
    story_path = find_story(project_config.stories_dir, args.story)
    if story_path is None:
        print(f"ERROR: Story '{args.story}' not found in {project_config.stories_dir}")
        return 1

    explicit = getattr(args, "checklist", None)
    checklist_path = Path(explicit) if explicit else project_config.checklist_path
    try:
        checklist = load_checklist(checklist_path, project_config, required=bool(explicit))
    except (ValidationError, ValueError, FileNotFoundError) as e:
        print(f"ERROR: Invalid checklist {checklist_path}: {e}")
        return 2

    try:
        story = parse_story(story_path)
    except StoryParseError as e:
        print(f"ERROR: {e}")
        return 1

    ctx = build_context(story, project_config, checklist)
    report = run_checklist(story, checklist, ctx)

    if not getattr(args, "quiet", False):
        print_summary(report)

    if not getattr(args, "no_write", False):
        try:
            written = write_report(report, project_config.reports_dir, project_config.write_json)
        except ValidationError as e:
            print(f"ERROR: {e}")
            return 2
        print(f"Report: {written[0]}")

    return 1 if report.failed else 0
