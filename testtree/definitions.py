"""Source-side test definitions and the index that answers lookups for them.

Definitions come from an external parser. The index only stores and returns
them; it never reads source files itself.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class DefinitionState(str, Enum):
    """Directive carried by a suite or test definition in source."""

    DEFAULT = "default"
    FOCUSED = "focused"
    DISABLED = "disabled"


@dataclass(frozen=True)
class Definition:
    """Source location and directive state of one suite or test.

    ``line`` is zero-based. ``disabled`` is true when the definition itself or
    any enclosing suite is disabled.
    """

    file: str
    line: int
    state: DefinitionState = DefinitionState.DEFAULT
    disabled: bool = False
    parameterized: bool = False

    def location(self) -> str:
        """Return ``file:line`` with a one-based line for display."""
        return f"{self.file}:{self.line + 1}"


@dataclass(frozen=True)
class AncestorSuite:
    """One enclosing suite of a test definition."""

    name: str
    definition: Definition | None = None


@dataclass(frozen=True)
class TestDefinition:
    """A test definition with its enclosing suite chain."""

    __test__ = False

    description: str
    definition: Definition
    ancestors: tuple[AncestorSuite, ...] = ()

    @property
    def file(self) -> str:
        return self.definition.file

    @property
    def line(self) -> int:
        return self.definition.line

    @property
    def state(self) -> DefinitionState:
        return self.definition.state

    @property
    def disabled(self) -> bool:
        return self.definition.disabled

    @property
    def parameterized(self) -> bool:
        return self.definition.parameterized

    @property
    def suite_chain(self) -> tuple[str, ...]:
        return tuple(ancestor.name for ancestor in self.ancestors)

    @property
    def suite_definitions(self) -> tuple[Definition | None, ...]:
        return tuple(ancestor.definition for ancestor in self.ancestors)

    def is_same_location(self, other: TestDefinition | None) -> bool:
        """Return whether ``other`` points at the same file and line."""
        if other is None:
            return False
        return self.file == other.file and self.line == other.line


class DefinitionIndex(Protocol):
    """Lookup surface consumed by ``SpecMatcher``."""

    def get_test_definitions(self, suite_chain: Sequence[str], description: str) -> Sequence[TestDefinition]:
        """Return candidate definitions for a display chain in a stable order."""
        ...


class InMemoryDefinitionIndex:
    """Definition index backed by per-file definition lists.

    Lookup order is file insertion order, then definition order within a file.
    Re-adding a file replaces its definitions and moves it to the end.
    """

    def __init__(self) -> None:
        self._definitions_by_file: dict[str, list[TestDefinition]] = {}
        self._files_by_key: dict[tuple[tuple[str, ...], str], list[str]] = {}

    def add_file_definitions(self, file: str, definitions: Iterable[TestDefinition]) -> None:
        """Store ``definitions`` for ``file``, replacing earlier content."""
        self.remove_files([file])
        file_definitions = list(definitions)
        self._definitions_by_file[file] = file_definitions
        for definition in file_definitions:
            key = (definition.suite_chain, definition.description)
            files = self._files_by_key.setdefault(key, [])
            if file not in files:
                files.append(file)
        if not file_definitions:
            logger.warning("No tests found in spec file: %s", file)
        else:
            logger.debug("Indexed %d test definition(s) in %s", len(file_definitions), file)

    def add_definitions(self, definitions: Iterable[TestDefinition]) -> None:
        """Group ``definitions`` by file and add each file in first-seen order."""
        grouped: dict[str, list[TestDefinition]] = {}
        for definition in definitions:
            grouped.setdefault(definition.file, []).append(definition)
        for file, file_definitions in grouped.items():
            self.add_file_definitions(file, file_definitions)

    def remove_files(self, files: Iterable[str]) -> None:
        for file in files:
            if self._definitions_by_file.pop(file, None) is None:
                continue
            for key in list(self._files_by_key):
                key_files = self._files_by_key[key]
                if file in key_files:
                    key_files.remove(file)
                if not key_files:
                    del self._files_by_key[key]

    def clear(self) -> None:
        self._definitions_by_file.clear()
        self._files_by_key.clear()

    @property
    def files(self) -> list[str]:
        return list(self._definitions_by_file)

    def __len__(self) -> int:
        return sum(len(definitions) for definitions in self._definitions_by_file.values())

    def get_test_definitions(self, suite_chain: Sequence[str], description: str) -> list[TestDefinition]:
        key = (tuple(suite_chain), description)
        ordered_files = sorted(
            self._files_by_key.get(key, []),
            key=list(self._definitions_by_file).index,
        )
        matches: list[TestDefinition] = []
        for file in ordered_files:
            for definition in self._definitions_by_file[file]:
                if definition.suite_chain == key[0] and definition.description == description:
                    matches.append(definition)
        return matches


__all__ = [
    "AncestorSuite",
    "Definition",
    "DefinitionIndex",
    "DefinitionState",
    "InMemoryDefinitionIndex",
    "TestDefinition",
]
