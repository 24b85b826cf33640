"""Exclusive-run ("focus") semantics for building test trees.

A focused suite or test hides every sibling outside its branch. A deeper
focus supersedes an enclosing one: the enclosing suite is demoted from the
current focus set into the previous set, and in focus-only mode its other
children are trimmed away.

Sets are keyed by the per-build node index assigned by the builder. Stable
node ids of the final focus set are carried to the next build so that
branches that lost their focus can be reported as demoted.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .definitions import Definition, DefinitionState, TestDefinition
from .labels import NodeLabeler, tooltip_for
from .nodes import ActiveState, Suite, TestCase, TestNode, iter_nodes

logger = logging.getLogger(__name__)


@dataclass
class FocusContext:
    """Focus bookkeeping for a single build pass."""

    current: dict[int, TestNode] = field(default_factory=dict)
    previous: dict[int, TestNode] = field(default_factory=dict)
    carried_ids: frozenset[str] = frozenset()


@dataclass(frozen=True)
class FocusResult:
    focused_ids: frozenset[str]
    demoted_ids: frozenset[str]


def _is_focused(definition: Definition | None) -> bool:
    return definition is not None and definition.state is DefinitionState.FOCUSED


class FocusFilter:
    def __init__(
        self,
        labeler: NodeLabeler,
        show_only_focused_tests: bool = False,
        carried_ids: frozenset[str] = frozenset(),
    ) -> None:
        self.labeler = labeler
        self.show_only_focused_tests = show_only_focused_tests
        self.context = FocusContext(carried_ids=carried_ids)

    def is_focusable(self, test_definition: TestDefinition | None) -> bool:
        """Pre-check run before any suite branch is created.

        Unmapped tests are always focusable here; they are decided later by
        ``apply`` once the branch exists.
        """
        if test_definition is None:
            return True
        if test_definition.state is DefinitionState.FOCUSED:
            return True
        has_focused_suite = any(_is_focused(item) for item in test_definition.suite_definitions)
        return not test_definition.disabled and has_focused_suite

    def apply(
        self,
        test: TestCase,
        test_definition: Definition | None,
        ancestors: Sequence[tuple[Suite, Definition | None]],
    ) -> bool:
        """Update focus bookkeeping for ``test`` and return whether to keep it."""
        context = self.context
        ancestor_suites = [suite for suite, _definition in ancestors]
        unfocused_ancestors = [suite for suite, definition in ancestors if _is_focused(definition)]

        tail: TestNode | None
        if _is_focused(test_definition):
            tail = test
        else:
            tail = unfocused_ancestors.pop() if unfocused_ancestors else None

        if tail is None or tail.index in context.previous:
            if self.show_only_focused_tests:
                logger.debug("Not building test attached to unfocused node: %s", test.full_name)
                return False
            return True

        context.current[tail.index] = tail

        first_newly_unfocused = next(
            (suite for suite in unfocused_ancestors if suite.index not in context.previous),
            None,
        )
        if first_newly_unfocused is None:
            return True

        start = unfocused_ancestors.index(first_newly_unfocused)
        for suite in unfocused_ancestors[start:]:
            context.current.pop(suite.index, None)
            context.previous[suite.index] = suite
            logger.debug("Focus on %s superseded by nested focus on %s", suite.full_name, tail.full_name)

        if self.show_only_focused_tests:
            self._trim_to_path(ancestor_suites, ancestor_suites.index(first_newly_unfocused), test)
        return True

    def _trim_to_path(self, ancestor_suites: list[Suite], start: int, test: TestCase) -> None:
        """Keep only the child on the path toward ``test`` from ``start`` down."""
        last = len(ancestor_suites) - 1
        for position in range(start, len(ancestor_suites)):
            suite = ancestor_suites[position]
            keep: TestNode = test if position == last else ancestor_suites[position + 1]
            suite.children = [keep] if any(child is keep for child in suite.children) else []

    def finish(self, root: Suite) -> FocusResult:
        """Propagate ``focusedIn`` below current focus and report id changes."""
        in_tree = {node.index for node in iter_nodes(root)}
        focused_ids: set[str] = set()
        for index, node in self.context.current.items():
            if index not in in_tree:
                continue
            focused_ids.add(node.id)
            self._propagate_focus(node)

        demoted_ids = frozenset(self.context.carried_ids - focused_ids)
        if demoted_ids:
            logger.debug("Demoted %d node(s) focused in the previous build", len(demoted_ids))
        return FocusResult(frozenset(focused_ids), demoted_ids)

    def _propagate_focus(self, node: TestNode) -> None:
        if node.active_state not in (ActiveState.DEFAULT, ActiveState.FOCUSED):
            return
        if node.active_state is ActiveState.DEFAULT:
            node.active_state = ActiveState.FOCUSED_IN
            node.label = self.labeler.label_for(node.name, DefinitionState.DEFAULT, ActiveState.FOCUSED_IN)
            node.tooltip = tooltip_for(node.full_name, ActiveState.FOCUSED_IN)
        if isinstance(node, Suite):
            for child in node.children:
                self._propagate_focus(child)


__all__ = ["FocusContext", "FocusFilter", "FocusResult"]
