#!/usr/bin/env python3
"""storycheck CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from storycheck.lib.config import find_project_root, load_project_config
from storycheck.lib.constants import STORY_STATUSES
from storycheck.commands import validate as cmd_validate_module
from storycheck.commands import list as cmd_list_module
from storycheck.commands import show as cmd_show_module
from storycheck.commands import checklist as cmd_checklist_module
from storycheck.commands import status as cmd_status_module


def get_project_config(args):
    """Load project config from --project-root or the nearest storycheck.env."""
    if args.project_root:
        root = Path(args.project_root)
        if not root.is_dir():
            print(f"ERROR: Project root not found: {root}")
            sys.exit(2)
    else:
        root = find_project_root(Path.cwd()) or Path.cwd()

    try:
        return load_project_config(root)
    except (ValueError, FileNotFoundError) as e:
        print(f"ERROR: Invalid configuration in {root}: {e}")
        sys.exit(2)


def cmd_validate(args):
    return cmd_validate_module.cmd_validate(args, get_project_config(args))


def cmd_list(args):
    return cmd_list_module.cmd_list(args, get_project_config(args))


def cmd_show(args):
    return cmd_show_module.cmd_show(args, get_project_config(args))


def cmd_checklist(args):
    return cmd_checklist_module.cmd_checklist(args, get_project_config(args))


def cmd_status(args):
    return cmd_status_module.cmd_status(args, get_project_config(args))


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='storycheck', description='Story quality validation')
    parser.add_argument('--project-root', '-C', help='Project root (default: nearest storycheck.env)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # storycheck validate
    p_validate = subparsers.add_parser('validate', help='Validate a story against the checklist')
    p_validate.add_argument('story', help='Story key (2.3), file stem, or path')
    p_validate.add_argument('--checklist', help='Checklist overrides YAML (default: CHECKLIST_PATH)')
    p_validate.add_argument('--no-write', action='store_true', help='Do not write report files')
    p_validate.add_argument('--quiet', '-q', action='store_true', help='Only print the report path')
    p_validate.set_defaults(func=cmd_validate)

    # storycheck list
    p_list = subparsers.add_parser('list', help='List stories with status and validation outcome')
    p_list.set_defaults(func=cmd_list)

    # storycheck show
    p_show = subparsers.add_parser('show', help='Print the latest validation report')
    p_show.add_argument('story', help='Story key (2.3), file stem, or path')
    p_show.set_defaults(func=cmd_show)

    # storycheck checklist
    p_checklist = subparsers.add_parser('checklist', help='Show the active checklist')
    p_checklist.add_argument('--checklist', help='Checklist overrides YAML (default: CHECKLIST_PATH)')
    p_checklist.set_defaults(func=cmd_checklist)

    # storycheck status
    p_status = subparsers.add_parser('status', help='Show or change story status')
    p_status.add_argument('story', help='Story key (2.3), file stem, or path')
    p_status.add_argument('new_status', nargs='?', choices=STORY_STATUSES, help='Status to move to')
    p_status.add_argument('--force', action='store_true', help='Skip transition rules and the validation gate')
    p_status.set_defaults(func=cmd_status)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
