"""Tree node datatypes produced by the builder and organizer.

``TestNode`` is a closed union of ``Suite`` and ``TestCase``. Suites are
further classified by ``SuiteType``; only folder suites carry ``path``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class SuiteType(str, Enum):
    PLAIN = "plain"
    FILE = "file"
    FOLDER = "folder"


class ActiveState(str, Enum):
    DEFAULT = "default"
    FOCUSED = "focused"
    FOCUSED_IN = "focusedIn"
    DISABLED = "disabled"
    DISABLED_OUT = "disabledOut"


@dataclass(eq=False)
class TestCase:
    """Leaf node for one reported test execution."""

    __test__ = False

    id: str
    name: str
    full_name: str
    label: str
    tooltip: str = ""
    active_state: ActiveState = ActiveState.DEFAULT
    file: str | None = None
    line: int | None = None
    message: str | None = None
    errored: bool = False
    index: int = -1


@dataclass(eq=False)
class Suite:
    """Inner node grouping tests, nested suites, files or folders."""

    id: str
    name: str
    full_name: str
    label: str
    tooltip: str = ""
    active_state: ActiveState = ActiveState.DEFAULT
    file: str | None = None
    line: int | None = None
    message: str | None = None
    errored: bool = False
    suite_type: SuiteType = SuiteType.PLAIN
    path: str | None = None
    children: list[TestNode] = field(default_factory=list)
    index: int = -1

    @property
    def is_folder(self) -> bool:
        return self.suite_type is SuiteType.FOLDER

    @property
    def is_file(self) -> bool:
        return self.suite_type is SuiteType.FILE


TestNode = Suite | TestCase


def iter_nodes(node: TestNode) -> Iterator[TestNode]:
    """Yield ``node`` and all its descendants depth-first, parents first."""
    yield node
    if isinstance(node, Suite):
        for child in node.children:
            yield from iter_nodes(child)


def iter_tests(node: TestNode) -> Iterator[TestCase]:
    """Yield every test leaf under ``node`` in tree order."""
    for candidate in iter_nodes(node):
        if isinstance(candidate, TestCase):
            yield candidate


__all__ = ["ActiveState", "Suite", "SuiteType", "TestCase", "TestNode", "iter_nodes", "iter_tests"]
