"""Ordering of organized tree nodes."""

from __future__ import annotations

import unittest

from testtree.nodes import Suite, SuiteType, TestCase
from testtree.sorting import compare_nodes, node_rank, sort_tree


def make_test(name: str, file: str | None = None, line: int | None = None) -> TestCase:
    return TestCase(id=name, name=name, full_name=name, label=name, file=file, line=line)


def make_suite(name: str, suite_type: SuiteType = SuiteType.PLAIN, full_name: str | None = None, **fields) -> Suite:
    return Suite(
        id=name,
        name=name,
        full_name=name if full_name is None else full_name,
        label=name,
        suite_type=suite_type,
        **fields,
    )


class NodeRankTests(unittest.TestCase):
    def test_folders_then_unmerged_files_then_everything_else(self) -> None:
        folder = make_suite("zeta", SuiteType.FOLDER, full_name="")
        file_suite = make_suite("beta", SuiteType.FILE, full_name="")
        merged_file = make_suite("Alpha", SuiteType.FILE)
        plain = make_suite("Aardvark")
        test = make_test("aaa")

        self.assertEqual([node_rank(node) for node in (folder, file_suite, merged_file, plain, test)], [0, 1, 2, 2, 2])

        nodes = [test, plain, merged_file, file_suite, folder]
        sort_tree(nodes)
        self.assertEqual([node.name for node in nodes], ["zeta", "beta", "aaa", "Aardvark", "Alpha"])


class CompareNodesTests(unittest.TestCase):
    def test_same_file_orders_by_line_regardless_of_arrival(self) -> None:
        late = make_test("a late test", "/proj/a.spec.ts", 7)
        early = make_test("z early test", "/proj/a.spec.ts", 3)

        nodes = [late, early]
        sort_tree(nodes)

        self.assertEqual(nodes, [early, late])
        self.assertLess(compare_nodes(early, late), 0)

    def test_names_compare_case_insensitively(self) -> None:
        nodes = [make_test("beta"), make_test("Alpha"), make_test("alphabet")]
        sort_tree(nodes)

        self.assertEqual([node.name for node in nodes], ["Alpha", "alphabet", "beta"])

    def test_different_files_fall_back_to_names(self) -> None:
        first = make_test("b", "/proj/a.spec.ts", 1)
        second = make_test("a", "/proj/b.spec.ts", 9)

        self.assertGreater(compare_nodes(first, second), 0)

    def test_equal_names_keep_arrival_order(self) -> None:
        first = make_test("same")
        second = make_test("Same")
        nodes = [first, second]
        sort_tree(nodes)

        self.assertEqual(compare_nodes(first, second), 0)
        self.assertEqual(nodes, [first, second])


class SortTreeTests(unittest.TestCase):
    def test_sorts_every_level(self) -> None:
        inner = make_suite("inner", children=[make_test("b"), make_test("a")])
        outer = make_suite("outer", children=[make_test("z"), inner])
        nodes = [outer]

        sort_tree(nodes)

        self.assertEqual([child.name for child in outer.children], ["inner", "z"])
        self.assertEqual([child.name for child in inner.children], ["a", "b"])


if __name__ == "__main__":
    unittest.main()
