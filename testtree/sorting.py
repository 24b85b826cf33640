"""Deterministic ordering for organized test trees."""

from __future__ import annotations

from functools import cmp_to_key

from .nodes import Suite, TestNode


def node_rank(node: TestNode) -> int:
    """Folders first, then file suites still without a full name, then the rest."""
    if isinstance(node, Suite):
        if node.is_folder:
            return 0
        if node.is_file and not node.full_name:
            return 1
    return 2


def compare_nodes(first: TestNode, second: TestNode) -> int:
    rank_delta = node_rank(first) - node_rank(second)
    if rank_delta:
        return rank_delta
    if first.file and first.file == second.file and first.line is not None and second.line is not None:
        return first.line - second.line
    first_name = first.name.lower()
    second_name = second.name.lower()
    if first_name == second_name:
        return 0
    return -1 if first_name < second_name else 1


def sort_tree(nodes: list[TestNode]) -> None:
    """Sort ``nodes`` in place and recurse into every suite's children."""
    nodes.sort(key=cmp_to_key(compare_nodes))
    for node in nodes:
        if isinstance(node, Suite):
            sort_tree(node.children)


__all__ = ["compare_nodes", "node_rank", "sort_tree"]
