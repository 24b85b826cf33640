"""Build the suite/test tree from matched runtime outcomes.

Outcomes are processed in arrival order. Suite branches are created on
demand along each outcome's suite chain; branches left empty because their
test was filtered out are pruned in a second, bottom-up pass.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .config import TreeOptions
from .definitions import Definition, DefinitionIndex, TestDefinition
from .focus import FocusFilter, FocusResult
from .labels import NodeLabeler, active_state_for, tooltip_for
from .matching import MatchKind, NormalizedId, SpecMatch, SpecMatcher, normalized_suite_id
from .nodes import Suite, TestCase, TestNode, iter_tests
from .outcomes import SpecOutcome

logger = logging.getLogger(__name__)

APP_DISPLAY_NAME = "testtree"
ROOT_SUITE_ID = ":"
UNMAPPED_SUITE_ID = "*"
UNMAPPED_SUITE_NAME = "Unmapped Tests"

UNMAPPED_SUITE_MESSAGE = (
    f"{APP_DISPLAY_NAME} could not find the test sources in your project "
    "for the tests in this group. This can occur if the tests:"
    "\n\n"
    "- Use parameterization \n"
    "- Use computed test descriptions \n"
    "- Are in test files not matched by the configured test file patterns \n"
    f"- Were otherwise not successfully discovered by {APP_DISPLAY_NAME}"
    "\n\n"
    "To exclude unmapped tests from being displayed, set the "
    "'showUnmappedTests' option to false."
)


@dataclass
class BuiltTree:
    """Builder output: mapped tree, optional unmapped suite and focus result."""

    root: Suite
    unmapped: Suite | None
    focus: FocusResult
    matches: list[SpecMatch] = field(default_factory=list)
    test_count: int = 0


def create_container_suite(node_id: str = ROOT_SUITE_ID, label: str = "root") -> Suite:
    return Suite(id=node_id, name="", full_name="", label=label)


def create_unmapped_suite(children: list[TestNode], labeler: NodeLabeler) -> Suite:
    """Wrap tests without a known source file in the unmapped pseudo-suite."""
    return Suite(
        id=UNMAPPED_SUITE_ID,
        name="",
        full_name="",
        label=labeler.label_for(UNMAPPED_SUITE_NAME),
        message=UNMAPPED_SUITE_MESSAGE,
        children=list(children),
    )


def _problem_header(outcome: SpecOutcome) -> str:
    return f'"{outcome.full_name}" \n\n--- \n\n'


class TreeBuilder:
    """Builds one tree per call to ``build``; holds no state between calls."""

    def __init__(
        self,
        index: DefinitionIndex,
        options: TreeOptions | None = None,
        labeler: NodeLabeler | None = None,
    ) -> None:
        self.index = index
        self.options = options or TreeOptions()
        self.labeler = labeler or NodeLabeler(self.options.show_test_definition_type_indicators)
        self._next_index = 0

    def build(self, outcomes: Iterable[SpecOutcome], carried_focus_ids: frozenset[str] = frozenset()) -> BuiltTree:
        """Match, filter and attach every outcome, then prune and finish focus."""
        self._next_index = 0
        root = self._claim(create_container_suite())
        unmapped_root = self._claim(create_container_suite(UNMAPPED_SUITE_ID))
        matcher = SpecMatcher(self.index)
        focus = FocusFilter(self.labeler, self.options.show_only_focused_tests, carried_focus_ids)
        tests_by_normalized_id: dict[NormalizedId, list[TestCase]] = {}
        matches: list[SpecMatch] = []

        for raw_outcome in outcomes:
            outcome = raw_outcome.without_suite_noise()
            match = matcher.match(outcome)
            matches.append(match)
            container = unmapped_root if match.selected is None else root
            test = self._build_test(container, focus, outcome, match.selected)
            self._annotate(match, test, tests_by_normalized_id)

        self._prune_empty_suites(root)
        self._prune_empty_suites(unmapped_root)
        focus_result = focus.finish(root)

        unmapped = create_unmapped_suite(unmapped_root.children, self.labeler) if unmapped_root.children else None
        test_count = sum(1 for _test in iter_tests(root)) + sum(1 for _test in iter_tests(unmapped_root))
        logger.debug("Processed %d specs to build %d tests", len(matches), test_count)
        return BuiltTree(root=root, unmapped=unmapped, focus=focus_result, matches=matches, test_count=test_count)

    def _claim(self, node: TestNode) -> TestNode:
        node.index = self._next_index
        self._next_index += 1
        return node

    def _build_test(
        self,
        container: Suite,
        focus: FocusFilter,
        outcome: SpecOutcome,
        test_definition: TestDefinition | None,
    ) -> TestCase | None:
        if test_definition is None:
            logger.debug("Undetermined test definition location for spec id: %s", outcome.id)
            if not self.options.show_unmapped_tests:
                logger.debug("'showUnmappedTests' is false - skipping unmapped spec id: %s", outcome.id)
                return None

        if self.options.exclude_disabled_tests and test_definition is not None and test_definition.disabled:
            logger.debug("'excludeDisabledTests' is true - skipping disabled spec id: %s", outcome.id)
            return None

        if self.options.show_only_focused_tests and not focus.is_focusable(test_definition):
            logger.debug("'showOnlyFocusedTests' is true - skipping unfocusable spec id: %s", outcome.id)
            return None

        suite_definitions = test_definition.suite_definitions if test_definition is not None else ()
        ancestors: list[tuple[Suite, Definition | None]] = []
        suite_chain: list[str] = []
        current = container

        for position, suite_name in enumerate(outcome.suite_chain):
            suite_definition = suite_definitions[position] if position < len(suite_definitions) else None
            suite_chain.append(suite_name)
            current = self._child_suite(current, suite_chain, suite_definition)
            ancestors.append((current, suite_definition))

        test = self._create_test(outcome, test_definition)
        definition = test_definition.definition if test_definition is not None else None
        if not focus.apply(test, definition, ancestors):
            logger.debug("Focus filter criteria excludes test id: %s", outcome.id)
            return None

        current.children.append(test)
        return test

    def _child_suite(self, parent: Suite, suite_chain: list[str], definition: Definition | None) -> Suite:
        """Return the child suite matching (name, file, line), creating it if absent."""
        name = suite_chain[-1]
        file = definition.file if definition is not None else None
        line = definition.line if definition is not None else None
        for child in parent.children:
            if isinstance(child, Suite) and child.name == name and child.file == file and child.line == line:
                return child

        suite = self._create_suite(suite_chain, definition)
        parent.children.append(suite)
        return suite

    def _create_suite(self, suite_chain: list[str], definition: Definition | None) -> Suite:
        name = suite_chain[-1]
        full_name = " ".join(suite_chain)
        active_state = active_state_for(definition)
        suite = Suite(
            id=normalized_suite_id(
                suite_chain,
                definition.file if definition is not None else None,
                definition.line if definition is not None else None,
            ),
            name=name,
            full_name=full_name,
            label=self.labeler.label_for(name, definition, active_state),
            tooltip=tooltip_for(full_name, active_state),
            active_state=active_state,
            file=definition.file if definition is not None else None,
            line=definition.line if definition is not None else None,
        )
        return self._claim(suite)

    def _create_test(self, outcome: SpecOutcome, test_definition: TestDefinition | None) -> TestCase:
        definition = test_definition.definition if test_definition is not None else None
        active_state = active_state_for(definition)
        test = TestCase(
            id=outcome.id,
            name=outcome.description,
            full_name=outcome.full_name,
            label=self.labeler.label_for(outcome.description, definition, active_state),
            tooltip=tooltip_for(outcome.full_name, active_state),
            active_state=active_state,
            file=definition.file if definition is not None else None,
            line=definition.line if definition is not None else None,
        )
        return self._claim(test)

    def _annotate(
        self,
        match: SpecMatch,
        test: TestCase | None,
        tests_by_normalized_id: dict[NormalizedId, list[TestCase]],
    ) -> None:
        """Attach unmapped and duplicate problem messages to built tests."""
        outcome = match.outcome
        earlier_tests = tests_by_normalized_id.setdefault(match.normalized_id, [])

        if match.kind is MatchKind.UNMAPPED:
            message = (
                f"{_problem_header(outcome)}"
                f"{APP_DISPLAY_NAME} could not find the test source for the above test "
                "within your project. This can occur in some scenarios if the test uses "
                "parameterization or a computed test description, or if the file in which "
                "this test is defined is not matched by the configured test file patterns."
            )
            if test is not None:
                test.message = message
        elif match.kind is MatchKind.DUPLICATE_DEFINITION:
            if test is not None:
                test.message = (
                    f"{_problem_header(outcome)}"
                    f"{APP_DISPLAY_NAME} found duplicate matching definitions for the above test "
                    "in your project, which can lead to incorrect or misreported test results. "
                    f"The duplicate tests are defined at: \n\n{self._candidate_list(match)}"
                )
                test.errored = True
        elif match.kind is MatchKind.DUPLICATE_REPORT:
            message = self._duplicate_report_message(match)
            reported_tests = [earlier for earlier in earlier_tests if self._is_at(earlier, match.selected)]
            if test is not None:
                reported_tests.append(test)
            for reported in reported_tests:
                reported.message = message
                reported.errored = True
            logger.warning("Duplicate executions reported for test: %s", outcome.full_name)

        if test is not None:
            earlier_tests.append(test)

    @staticmethod
    def _is_at(test: TestCase, test_definition: TestDefinition | None) -> bool:
        """Return whether ``test`` was built from the location of ``test_definition``."""
        if test_definition is None:
            return False
        return test.file == test_definition.file and test.line == test_definition.line

    def _duplicate_report_message(self, match: SpecMatch) -> str:
        selected = match.selected
        message = (
            f"{_problem_header(match.outcome)}"
            "Duplicate executions of the above test were reported in your project "
            "by the test runner, which can lead to incorrect or misreported test results. "
        )
        if selected is not None and selected.parameterized:
            message += (
                "(Tip: This seems to be a parameterized test. Ensure that each "
                "test case description is different by properly incorporating all "
                "its test parameters into the test description). "
            )
        if len(match.candidates) == 1 and selected is not None:
            message += (
                f"For the multiple executions reported, {APP_DISPLAY_NAME} found "
                "only one corresponding test defined in your project at: "
                f"\n\n{selected.definition.location()}"
            )
        else:
            message += f"The matching tests are defined at: \n\n{self._candidate_list(match)}"
        return message

    def _candidate_list(self, match: SpecMatch) -> str:
        return "\n".join(
            f"{position}. {candidate.definition.location()}"
            for position, candidate in enumerate(match.ordered_candidates(), start=1)
        )

    def _prune_empty_suites(self, suite: Suite) -> bool:
        """Drop suites without any test below them; return whether ``suite`` is empty."""
        kept: list[TestNode] = []
        for child in suite.children:
            if isinstance(child, Suite) and self._prune_empty_suites(child):
                continue
            kept.append(child)
        suite.children = kept
        return not kept


__all__ = [
    "BuiltTree",
    "ROOT_SUITE_ID",
    "TreeBuilder",
    "UNMAPPED_SUITE_ID",
    "UNMAPPED_SUITE_MESSAGE",
    "UNMAPPED_SUITE_NAME",
    "create_container_suite",
    "create_unmapped_suite",
]
