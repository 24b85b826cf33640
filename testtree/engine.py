"""Build passes from definitions and outcomes to the final, sorted test tree.

The engine owns the only state carried between passes: the ids of nodes that
were focused when the last pass finished. A failing pass leaves both the
last tree and that state untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .builder import TreeBuilder
from .config import TreeOptions
from .definitions import DefinitionIndex
from .errors import BuildAbortedError, DefinitionLookupError, RecordDecodeError
from .labels import NodeLabeler
from .nodes import Suite
from .organizer import SuiteOrganizer
from .outcomes import SpecOutcome
from .records import decode_outcomes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    root: Suite
    test_count: int
    focused_ids: frozenset[str]
    demoted_ids: frozenset[str]


class ReconciliationEngine:
    def __init__(self, index: DefinitionIndex, project_root: str, options: TreeOptions | None = None) -> None:
        self.index = index
        self.project_root = project_root
        self.options = options or TreeOptions()
        self.tree: Suite | None = None
        self._focused_ids: frozenset[str] = frozenset()

    @property
    def focused_ids(self) -> frozenset[str]:
        return self._focused_ids

    def reset_focus(self) -> None:
        """Forget focus carried from earlier passes."""
        self._focused_ids = frozenset()

    def build(self, outcomes: Iterable[SpecOutcome]) -> BuildResult:
        """Run one full pass and keep its tree as the current one."""
        labeler = NodeLabeler(self.options.show_test_definition_type_indicators)
        builder = TreeBuilder(self.index, self.options, labeler)
        organizer = SuiteOrganizer(self.project_root, self.options, labeler)

        try:
            built = builder.build(outcomes, carried_focus_ids=self._focused_ids)
        except (RecordDecodeError, DefinitionLookupError) as exc:
            logger.error("Test tree build failed, keeping previous tree: %s", exc)
            raise BuildAbortedError(str(exc)) from exc

        root = organizer.organize(built)
        self.tree = root
        self._focused_ids = built.focus.focused_ids
        logger.info("Built test tree with %d tests", built.test_count)
        return BuildResult(
            root=root,
            test_count=built.test_count,
            focused_ids=built.focus.focused_ids,
            demoted_ids=built.focus.demoted_ids,
        )

    def build_from_records(self, records: Iterable[object]) -> BuildResult:
        """Decode every outcome record first, then build."""
        try:
            outcomes = decode_outcomes(records)
        except RecordDecodeError as exc:
            logger.error("Could not decode test outcomes, keeping previous tree: %s", exc)
            raise BuildAbortedError(str(exc)) from exc
        return self.build(outcomes)


__all__ = ["BuildResult", "ReconciliationEngine"]
