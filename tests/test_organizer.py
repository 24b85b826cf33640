"""Folder grouping, flattening and placement of the unmapped suite."""

from __future__ import annotations

import unittest

from testtree.builder import UNMAPPED_SUITE_ID, TreeBuilder
from testtree.config import TestGrouping, TreeOptions
from testtree.definitions import AncestorSuite, Definition, InMemoryDefinitionIndex, TestDefinition
from testtree.nodes import Suite, SuiteType, TestCase
from testtree.organizer import SuiteOrganizer, file_suite_label, longest_common_path
from testtree.outcomes import SpecOutcome

PROJECT_ROOT = "/proj"


def make_definition(description: str, file: str, suite: str, line: int = 3) -> TestDefinition:
    return TestDefinition(
        description=description,
        definition=Definition(file, line),
        ancestors=(AncestorSuite(suite, Definition(file, 1)),),
    )


def organize(definitions, outcomes, **options) -> Suite:
    tree_options = TreeOptions(**options)
    index = InMemoryDefinitionIndex()
    index.add_definitions(definitions)
    built = TreeBuilder(index, tree_options).build(outcomes)
    return SuiteOrganizer(PROJECT_ROOT, tree_options).organize(built)


def outcome(outcome_id: str, suite: str, description: str) -> SpecOutcome:
    return SpecOutcome(id=outcome_id, suite_chain=(suite,), description=description)


class FolderFlatteningTests(unittest.TestCase):
    def deep_tree(self, flatten: bool) -> Suite:
        return organize(
            [make_definition("digs", "/proj/a/b/c/deep.spec.ts", "Deep")],
            [outcome("1", "Deep", "digs")],
            tests_base_path=PROJECT_ROOT,
            flatten_single_child_folders=flatten,
            flatten_single_suite_files=False,
        )

    def test_single_child_folder_chain_collapses_into_one_folder(self) -> None:
        root = self.deep_tree(flatten=True)

        self.assertEqual(len(root.children), 1)
        folder = root.children[0]
        self.assertIs(folder.suite_type, SuiteType.FOLDER)
        self.assertEqual(folder.name, "a/b/c")
        self.assertEqual(folder.label, "a/b/c")
        self.assertEqual(folder.path, "/proj/a/b/c")
        file_suite = folder.children[0]
        self.assertIs(file_suite.suite_type, SuiteType.FILE)
        self.assertEqual(file_suite.label, "deep")
        self.assertEqual(file_suite.id, "/proj/a/b/c/deep.spec.ts:")

    def test_folder_chain_stays_nested_without_flattening(self) -> None:
        root = self.deep_tree(flatten=False)

        names = []
        node = root.children[0]
        while isinstance(node, Suite) and node.suite_type is SuiteType.FOLDER:
            names.append(node.name)
            self.assertEqual(len(node.children), 1)
            node = node.children[0]
        self.assertEqual(names, ["a", "b", "c"])
        self.assertIs(node.suite_type, SuiteType.FILE)

    def test_files_at_and_below_base_path_share_one_folder_tree(self) -> None:
        root = organize(
            [
                make_definition("top", "/proj/top.spec.ts", "Top"),
                make_definition("nested", "/proj/lib/nested.spec.ts", "Nested"),
            ],
            [outcome("1", "Top", "top"), outcome("2", "Nested", "nested")],
            tests_base_path=PROJECT_ROOT,
            flatten_single_child_folders=False,
            flatten_single_suite_files=False,
        )

        lib, top = root.children
        self.assertEqual((lib.name, lib.path, lib.tooltip), ("lib", "/proj/lib", "lib"))
        self.assertEqual([child.id for child in lib.children], ["/proj/lib/nested.spec.ts:"])
        self.assertEqual((top.id, top.suite_type), ("/proj/top.spec.ts:", SuiteType.FILE))

    def test_sibling_folders_are_not_merged(self) -> None:
        root = organize(
            [
                make_definition("one", "/proj/src/x/one.spec.ts", "One"),
                make_definition("two", "/proj/src/y/two.spec.ts", "Two"),
            ],
            [outcome("1", "One", "one"), outcome("2", "Two", "two")],
            tests_base_path=PROJECT_ROOT,
            flatten_single_suite_files=False,
        )

        src = root.children[0]
        self.assertEqual(src.name, "src")
        self.assertEqual([child.name for child in src.children], ["x", "y"])


class FileFlatteningTests(unittest.TestCase):
    def test_file_with_one_top_level_suite_merges_into_it(self) -> None:
        root = organize(
            [make_definition("adds", "/proj/src/calc.spec.ts", "Calculator")],
            [outcome("1", "Calculator", "adds")],
            tests_base_path="/proj/src",
        )

        merged = root.children[0]
        self.assertIs(merged.suite_type, SuiteType.FILE)
        self.assertEqual(merged.name, "Calculator")
        self.assertEqual(merged.label, "Calculator")
        self.assertEqual(merged.full_name, "Calculator")
        self.assertEqual(merged.file, "/proj/src/calc.spec.ts")
        self.assertIsInstance(merged.children[0], TestCase)

    def test_file_with_two_top_level_suites_never_merges(self) -> None:
        for flatten in (True, False):
            with self.subTest(flatten=flatten):
                root = organize(
                    [
                        make_definition("adds", "/proj/src/calc.spec.ts", "Calculator"),
                        make_definition("parses", "/proj/src/calc.spec.ts", "Parser", line=9),
                    ],
                    [outcome("1", "Calculator", "adds"), outcome("2", "Parser", "parses")],
                    tests_base_path="/proj/src",
                    flatten_single_suite_files=flatten,
                )

                file_suite = root.children[0]
                self.assertIs(file_suite.suite_type, SuiteType.FILE)
                self.assertEqual(file_suite.label, "calc")
                self.assertEqual(file_suite.full_name, "")
                self.assertEqual([child.name for child in file_suite.children], ["Calculator", "Parser"])


class GroupingModeTests(unittest.TestCase):
    def inputs(self):
        definitions = [
            make_definition("b test", "/proj/b.spec.ts", "beta"),
            make_definition("a test", "/proj/a.spec.ts", "Alpha"),
        ]
        outcomes = [
            outcome("1", "beta", "b test"),
            outcome("2", "Ghost", "missing"),
            outcome("3", "Alpha", "a test"),
        ]
        return definitions, outcomes

    def test_suite_grouping_keeps_built_nesting_and_appends_unmapped(self) -> None:
        definitions, outcomes = self.inputs()
        root = organize(definitions, outcomes, test_grouping=TestGrouping.SUITE)

        self.assertEqual((root.id, root.label, root.name, root.full_name), (":", "Tests", "", ""))
        self.assertEqual([child.name for child in root.children[:2]], ["Alpha", "beta"])
        self.assertTrue(all(child.suite_type is SuiteType.PLAIN for child in root.children[:2]))
        self.assertEqual(root.children[-1].id, UNMAPPED_SUITE_ID)

    def test_folder_grouping_appends_unmapped_last(self) -> None:
        definitions, outcomes = self.inputs()
        root = organize(definitions, outcomes, root_suite_label="Karma")

        self.assertEqual(root.label, "Karma")
        self.assertEqual([child.name for child in root.children[:2]], ["Alpha", "beta"])
        self.assertTrue(all(child.suite_type is SuiteType.FILE for child in root.children[:2]))
        self.assertEqual(root.children[-1].id, UNMAPPED_SUITE_ID)
        self.assertEqual(root.children[-1].children[0].name, "Ghost")

    def test_no_unmapped_suite_without_unmapped_tests(self) -> None:
        root = organize(
            [make_definition("a test", "/proj/a.spec.ts", "Alpha")],
            [outcome("1", "Alpha", "a test")],
        )

        self.assertNotIn(UNMAPPED_SUITE_ID, [child.id for child in root.children])


class BasePathTests(unittest.TestCase):
    def test_configured_base_path_inside_project_is_used(self) -> None:
        organizer = SuiteOrganizer(PROJECT_ROOT, TreeOptions(tests_base_path="/proj/tests"))

        self.assertEqual(organizer.resolve_tests_base_path(["/proj/src/a.spec.ts"]), "/proj/tests")

    def test_base_path_outside_project_falls_back_to_common_folder(self) -> None:
        organizer = SuiteOrganizer(PROJECT_ROOT, TreeOptions(tests_base_path="/elsewhere"))

        base = organizer.resolve_tests_base_path(["/proj/x/a.spec.ts", "/proj/x/y/b.spec.ts"])
        self.assertEqual(base, "/proj/x")

    def test_project_root_is_last_resort(self) -> None:
        organizer = SuiteOrganizer(PROJECT_ROOT, TreeOptions())

        self.assertEqual(organizer.resolve_tests_base_path(["/other/a.spec.ts"]), PROJECT_ROOT)
        self.assertEqual(organizer.resolve_tests_base_path([]), PROJECT_ROOT)


class PathHelperTests(unittest.TestCase):
    def test_file_suite_label_strips_test_affixes(self) -> None:
        self.assertEqual(file_suite_label("/p/component-2.spec.ts"), "component-2")
        self.assertEqual(file_suite_label("/p/test_widget.py"), "widget")
        self.assertEqual(file_suite_label("/p/Makefile"), "Makefile")

    def test_longest_common_path(self) -> None:
        self.assertEqual(longest_common_path(["/a/b/c", "/a/b/d"]), "/a/b")
        self.assertIsNone(longest_common_path(["relative/a", "/a"]))
        self.assertIsNone(longest_common_path([]))


if __name__ == "__main__":
    unittest.main()
