"""Command-line front door for testtree.

Loads definition and outcome records from JSON files, merges persisted
options with command-line overrides, and prints the resulting tree.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import TestGrouping, load_tree_options, save_tree_options
from .definitions import InMemoryDefinitionIndex
from .engine import ReconciliationEngine
from .errors import TestTreeError
from .records import decode_definitions, decode_outcomes, load_records
from .render import format_tree, render_json
from .results import summarize_suite_results
from .ui_theme import available_theme_names, resolve_theme


def _existing_file(value: str) -> Path:
    """argparse type for input files that must exist."""
    path = Path(value)
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"file not found: {value}")
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testtree",
        description="Reconcile reported test outcomes with source test definitions and print the test tree.",
    )
    parser.add_argument("definitions", type=_existing_file, help="JSON file with a list of test definition records.")
    parser.add_argument("outcomes", type=_existing_file, help="JSON file with a list of test outcome records.")
    parser.add_argument(
        "--project-root",
        default=None,
        help="Project root used for folder grouping. Defaults to the current directory.",
    )
    parser.add_argument("--grouping", choices=[item.value for item in TestGrouping], default=None)
    parser.add_argument("--tests-base-path", default=None, help="Folder that folder grouping starts from.")
    parser.add_argument("--exclude-disabled", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--show-only-focused", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--show-unmapped", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--flatten-folders", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--flatten-files", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--indicators", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--save-config", action="store_true", help="Persist the effective options and continue.")
    parser.add_argument("--json", action="store_true", help="Print the tree as JSON.")
    parser.add_argument("--summary", action="store_true", help="Append per-suite result summaries to suite rows.")
    parser.add_argument("--messages", action="store_true", help="Print problem messages under affected rows.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--style", default="monokai", help="Pygments style name for --json output.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-vv for debug).")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, build one tree and write it to stdout."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    options = load_tree_options().with_overrides(
        test_grouping=TestGrouping(args.grouping) if args.grouping else None,
        tests_base_path=args.tests_base_path,
        exclude_disabled_tests=args.exclude_disabled,
        show_only_focused_tests=args.show_only_focused,
        show_unmapped_tests=args.show_unmapped,
        flatten_single_child_folders=args.flatten_folders,
        flatten_single_suite_files=args.flatten_files,
        show_test_definition_type_indicators=args.indicators,
    )
    if args.save_config:
        save_tree_options(options)

    project_root = str(Path(args.project_root or Path.cwd()).resolve())

    try:
        index = InMemoryDefinitionIndex()
        index.add_definitions(decode_definitions(load_records(args.definitions, "definition")))
        outcomes = decode_outcomes(load_records(args.outcomes, "outcome"))
        engine = ReconciliationEngine(index, project_root, options)
        result = engine.build(outcomes)
    except OSError as exc:
        raise SystemExit(f"Could not read input: {exc}") from exc
    except TestTreeError as exc:
        raise SystemExit(str(exc)) from exc

    color = not args.no_color and sys.stdout.isatty()
    if args.json:
        sys.stdout.write(render_json(result.root, color=color, style=args.style))
        return

    summaries = summarize_suite_results(result.root, outcomes) if args.summary else None
    theme = resolve_theme(args.theme, no_color=not color)
    rows = format_tree(result.root, theme, summaries=summaries, show_messages=args.messages)
    sys.stdout.write("\n".join(rows) + "\n")


if __name__ == "__main__":
    main()
