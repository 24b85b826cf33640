"""Tree options and their persisted JSON config.

Options are an immutable dataclass consumed by the engine. Persistence
never fails: malformed or missing config falls back to
defaults, and unknown or mistyped keys are ignored one by one.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "testtree"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_ROOT_SUITE_LABEL = "Tests"


class TestGrouping(str, Enum):
    __test__ = False

    SUITE = "suite"
    FOLDER = "folder"


@dataclass(frozen=True)
class TreeOptions:
    """Build, grouping and display options for one engine."""

    exclude_disabled_tests: bool = False
    show_only_focused_tests: bool = False
    show_unmapped_tests: bool = True
    test_grouping: TestGrouping = TestGrouping.FOLDER
    flatten_single_child_folders: bool = True
    flatten_single_suite_files: bool = True
    tests_base_path: str = ""
    show_test_definition_type_indicators: bool = True
    root_suite_label: str = DEFAULT_ROOT_SUITE_LABEL

    def with_overrides(self, **overrides: object) -> TreeOptions:
        """Return a copy with every non-``None`` override applied."""
        applied = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **applied) if applied else self


CONFIG_KEYS: dict[str, str] = {
    "exclude_disabled_tests": "excludeDisabledTests",
    "show_only_focused_tests": "showOnlyFocusedTests",
    "show_unmapped_tests": "showUnmappedTests",
    "test_grouping": "testGrouping",
    "flatten_single_child_folders": "flattenSingleChildFolders",
    "flatten_single_suite_files": "flattenSingleSuiteFiles",
    "tests_base_path": "testsBasePath",
    "show_test_definition_type_indicators": "showTestDefinitionTypeIndicators",
    "root_suite_label": "rootSuiteLabel",
}


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored so a read-only config location never breaks
    a build.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _coerce_grouping(value: object) -> TestGrouping | None:
    if not isinstance(value, str):
        return None
    try:
        return TestGrouping(value.lower())
    except ValueError:
        return None


def options_from_mapping(data: dict[str, object], base: TreeOptions | None = None) -> TreeOptions:
    """Build options from camelCase config keys, skipping invalid values."""
    options = base or TreeOptions()
    defaults = {item.name: getattr(options, item.name) for item in fields(TreeOptions)}
    values: dict[str, object] = {}
    for attribute, key in CONFIG_KEYS.items():
        if key not in data:
            continue
        raw = data[key]
        default = defaults[attribute]
        if isinstance(default, TestGrouping):
            grouping = _coerce_grouping(raw)
            if grouping is not None:
                values[attribute] = grouping
        elif isinstance(default, bool):
            if isinstance(raw, bool):
                values[attribute] = raw
        elif isinstance(raw, str):
            values[attribute] = raw
    return replace(options, **values)


def options_to_mapping(options: TreeOptions) -> dict[str, object]:
    data: dict[str, object] = {}
    for attribute, key in CONFIG_KEYS.items():
        value = getattr(options, attribute)
        data[key] = value.value if isinstance(value, Enum) else value
    return data


def load_tree_options() -> TreeOptions:
    """Return persisted options merged over defaults."""
    return options_from_mapping(load_config())


def save_tree_options(options: TreeOptions) -> None:
    """Persist ``options`` while keeping unrelated keys already in the file."""
    config = load_config()
    config.update(options_to_mapping(options))
    save_config(config)


__all__ = [
    "CONFIG_PATH",
    "TestGrouping",
    "TreeOptions",
    "load_config",
    "load_tree_options",
    "options_from_mapping",
    "options_to_mapping",
    "save_config",
    "save_tree_options",
]
