"""Text and JSON renderings of a built test tree."""

from __future__ import annotations

import json

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import JsonLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .nodes import Suite, TestCase, TestNode
from .results import SuiteResultSummary
from .ui_theme import DEFAULT_THEME, UITheme

DEFAULT_JSON_STYLE = "monokai"


def tree_to_dict(node: TestNode) -> dict[str, object]:
    """Serialize ``node`` with the camelCase keys of the output record."""
    data: dict[str, object] = {"kind": "suite" if isinstance(node, Suite) else "test"}
    if isinstance(node, Suite):
        data["suiteType"] = node.suite_type.value
    data.update(
        {
            "id": node.id,
            "name": node.name,
            "fullName": node.full_name,
            "label": node.label,
            "tooltip": node.tooltip,
            "activeState": node.active_state.value,
        }
    )
    if node.file is not None:
        data["file"] = node.file
    if node.line is not None:
        data["line"] = node.line
    if node.message is not None:
        data["message"] = node.message
    if node.errored:
        data["errored"] = True
    if isinstance(node, Suite):
        data["children"] = [tree_to_dict(child) for child in node.children]
    return data


def _normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_JSON_STYLE
    return style


def render_json(root: Suite, *, color: bool = False, style: str = DEFAULT_JSON_STYLE) -> str:
    """Serialize ``root`` as indented JSON, highlighted when ``color`` is set.

    Unknown Pygments style names fall back to ``monokai``.
    """
    text = json.dumps(tree_to_dict(root), indent=2, ensure_ascii=False) + "\n"
    if not color:
        return text
    return highlight(text, JsonLexer(), TerminalFormatter(style=_normalize_style(style)))


def message_headline(message: str) -> str:
    """Return the first line of a problem message after its quoted-name header."""
    lines = [line.strip() for line in message.splitlines() if line.strip()]
    body = [line for line in lines if line != "---" and not line.startswith('"')]
    return (body or lines or [""])[0]


def _row_color(node: TestNode, theme: UITheme) -> str:
    if node.errored:
        return theme.tree_errored
    if isinstance(node, TestCase):
        return theme.tree_test
    if node.is_folder:
        return theme.tree_folder
    if node.is_file:
        return theme.tree_file
    return theme.tree_suite


def format_tree_row(
    node: TestNode,
    depth: int,
    theme: UITheme | None = None,
    summary: SuiteResultSummary | None = None,
) -> str:
    """Render one node as an indented, ANSI-styled row."""
    active_theme = theme or DEFAULT_THEME
    reset = active_theme.reset
    indent = "  " * depth
    marker = "▾ " if isinstance(node, Suite) else "  "
    name = node.label + ("/" if isinstance(node, Suite) and node.is_folder else "")
    row = f"{indent}{active_theme.tree_marker}{marker}{reset}{_row_color(node, active_theme)}{name}{reset}"
    if isinstance(node, TestCase) and node.file is not None and node.line is not None:
        row += f"{active_theme.tree_location}  {node.file}:{node.line + 1}{reset}"
    if summary is not None:
        row += f"{active_theme.tree_summary} {summary.description}{reset}"
    return row


def format_tree(
    root: Suite,
    theme: UITheme | None = None,
    summaries: dict[str, SuiteResultSummary] | None = None,
    show_messages: bool = False,
) -> list[str]:
    """Render ``root`` and its descendants depth-first as display rows."""
    active_theme = theme or DEFAULT_THEME
    rows: list[str] = []

    def walk(node: TestNode, depth: int) -> None:
        summary = summaries.get(node.id) if summaries is not None and isinstance(node, Suite) else None
        rows.append(format_tree_row(node, depth, active_theme, summary))
        if show_messages and node.message:
            headline = message_headline(node.message)
            rows.append(f"{'  ' * (depth + 2)}{active_theme.tree_message}{headline}{active_theme.reset}")
        if isinstance(node, Suite):
            for child in node.children:
                walk(child, depth + 1)

    walk(root, 0)
    return rows


__all__ = ["format_tree", "format_tree_row", "message_headline", "render_json", "tree_to_dict"]
