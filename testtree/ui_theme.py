"""ANSI palettes for the text tree renderer.

Themes only color tree rows. JSON output is highlighted separately through a
Pygments style.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    tree_marker: str
    tree_folder: str
    tree_file: str
    tree_suite: str
    tree_test: str
    tree_location: str
    tree_errored: str
    tree_message: str
    tree_summary: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    tree_marker="\033[38;5;44m",
    tree_folder="\033[1;34m",
    tree_file="\033[38;5;110m",
    tree_suite="\033[1;38;5;252m",
    tree_test="\033[38;5;252m",
    tree_location="\033[2;38;5;250m",
    tree_errored="\033[38;5;203m",
    tree_message="\033[2;38;5;214m",
    tree_summary="\033[38;5;109m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    tree_marker="\033[38;5;39m",
    tree_folder="\033[1;38;5;45m",
    tree_file="\033[38;5;117m",
    tree_suite="\033[1;38;5;153m",
    tree_test="\033[38;5;252m",
    tree_location="\033[2;38;5;110m",
    tree_errored="\033[38;5;209m",
    tree_message="\033[2;38;5;215m",
    tree_summary="\033[38;5;73m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    tree_marker="",
    tree_folder="",
    tree_file="",
    tree_suite="",
    tree_test="",
    tree_location="",
    tree_errored="",
    tree_message="",
    tree_summary="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    candidate = (name or "").strip().lower()
    return _THEMES.get(candidate, DEFAULT_THEME)


__all__ = ["UITheme", "DEFAULT_THEME", "OCEAN_THEME", "PLAIN_THEME", "available_theme_names", "resolve_theme"]
