"""Whole build passes: determinism, aborts and record input."""

from __future__ import annotations

import unittest

from testtree.config import TreeOptions
from testtree.definitions import (
    AncestorSuite,
    Definition,
    DefinitionState,
    InMemoryDefinitionIndex,
    TestDefinition,
)
from testtree.engine import ReconciliationEngine
from testtree.errors import BuildAbortedError
from testtree.outcomes import SpecOutcome
from testtree.render import tree_to_dict

PROJECT_ROOT = "/proj"
SPEC_FILE = "/proj/src/calc.spec.ts"


def make_index() -> InMemoryDefinitionIndex:
    suite = AncestorSuite("Calc", Definition(SPEC_FILE, 0, DefinitionState.FOCUSED))
    index = InMemoryDefinitionIndex()
    index.add_definitions(
        [
            TestDefinition("adds", Definition(SPEC_FILE, 4), (suite,)),
            TestDefinition("subtracts", Definition(SPEC_FILE, 8), (suite,)),
            TestDefinition("subtracts", Definition(SPEC_FILE, 12), (suite,)),
        ]
    )
    return index


def make_outcomes() -> list[SpecOutcome]:
    return [
        SpecOutcome(id="2", suite_chain=("Calc",), description="subtracts"),
        SpecOutcome(id="1", suite_chain=("Calc",), description="adds"),
        SpecOutcome(id="3", suite_chain=("Ghost",), description="haunts"),
    ]


class BrokenIndex:
    def get_test_definitions(self, suite_chain, description):
        raise KeyError(description)


class EngineBuildTests(unittest.TestCase):
    def test_identical_inputs_build_identical_trees(self) -> None:
        first = ReconciliationEngine(make_index(), PROJECT_ROOT).build(make_outcomes())
        second = ReconciliationEngine(make_index(), PROJECT_ROOT).build(make_outcomes())

        self.assertEqual(tree_to_dict(first.root), tree_to_dict(second.root))
        self.assertEqual(first.test_count, 3)
        self.assertEqual(first.focused_ids, second.focused_ids)

    def test_build_keeps_tree_and_focus_on_engine(self) -> None:
        engine = ReconciliationEngine(make_index(), PROJECT_ROOT)
        result = engine.build(make_outcomes())

        self.assertIs(engine.tree, result.root)
        self.assertEqual(engine.focused_ids, frozenset({"/proj/src/calc.spec.ts:0:[Calc]"}))
        calc = result.root.children[0]
        self.assertEqual(calc.name, "Calc")
        self.assertEqual([child.name for child in calc.children], ["adds", "subtracts"])
        self.assertEqual(calc.children[1].line, 8)

    def test_failed_lookup_keeps_previous_tree_and_focus(self) -> None:
        engine = ReconciliationEngine(make_index(), PROJECT_ROOT)
        previous = engine.build(make_outcomes())

        engine.index = BrokenIndex()
        with self.assertLogs("testtree.engine", level="ERROR"):
            with self.assertRaises(BuildAbortedError):
                engine.build(make_outcomes())

        self.assertIs(engine.tree, previous.root)
        self.assertEqual(engine.focused_ids, previous.focused_ids)

    def test_bad_record_aborts_before_building(self) -> None:
        engine = ReconciliationEngine(make_index(), PROJECT_ROOT)
        previous = engine.build(make_outcomes())

        records = [
            {"id": "1", "suiteChain": ["Calc"], "description": "adds"},
            {"id": "2", "suiteChain": "Calc", "description": "subtracts"},
        ]
        with self.assertLogs("testtree.engine", level="ERROR"):
            with self.assertRaises(BuildAbortedError):
                engine.build_from_records(records)

        self.assertIs(engine.tree, previous.root)

    def test_build_from_records(self) -> None:
        engine = ReconciliationEngine(make_index(), PROJECT_ROOT, TreeOptions(show_unmapped_tests=False))
        result = engine.build_from_records(
            [
                {"id": 1, "suiteChain": ["Calc"], "description": "adds", "status": "passed"},
                {"id": 2, "suiteChain": ["Calc"], "description": "subtracts", "status": "failed"},
            ]
        )

        self.assertEqual(result.test_count, 2)
        calc = result.root.children[0]
        self.assertEqual([child.id for child in calc.children], ["1", "2"])


if __name__ == "__main__":
    unittest.main()
