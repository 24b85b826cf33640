"""Regroup a built test tree by folder and flatten redundant levels.

Folder grouping keeps the suite/test nesting inside each file and replaces
everything above the file boundary with folder nodes that mirror the
directory layout below the tests base path.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import replace
from pathlib import PurePath, PurePosixPath

from .builder import BuiltTree, create_container_suite, create_unmapped_suite
from .config import TestGrouping, TreeOptions
from .labels import NodeLabeler
from .nodes import Suite, SuiteType, TestNode
from .sorting import sort_tree

logger = logging.getLogger(__name__)

TEST_FILE_LABEL_PATTERN = re.compile(r"^(test[_.-])?([^.]*)([_.-]test)?(\..*)$", re.IGNORECASE)


def is_same_or_child_path(parent: str, child: str) -> bool:
    return PurePath(child).is_relative_to(PurePath(parent))


def longest_common_path(paths: list[str]) -> str | None:
    """Return the deepest folder shared by all ``paths`` when all are absolute."""
    if not paths or any(not PurePath(path).is_absolute() for path in paths):
        return None
    try:
        return os.path.commonpath(paths)
    except ValueError:
        return None


def file_suite_label(file: str) -> str:
    """Strip test affixes and extensions: ``component.spec.ts`` -> ``component``."""
    return TEST_FILE_LABEL_PATTERN.sub(r"\2", PurePath(file).name)


class SuiteOrganizer:
    def __init__(self, project_root: str, options: TreeOptions | None = None, labeler: NodeLabeler | None = None) -> None:
        self.project_root = project_root
        self.options = options or TreeOptions()
        self.labeler = labeler or NodeLabeler(self.options.show_test_definition_type_indicators)

    def organize(self, built: BuiltTree) -> Suite:
        """Return the final root suite: grouped, flattened and sorted."""
        mapped: list[TestNode] = []
        fileless: list[TestNode] = []
        for node in built.root.children:
            if node.file:
                mapped.append(node)
            else:
                logger.debug("Got test with unknown file - test id is: %s", node.id)
                fileless.append(node)

        grouped = self.group_by_folder(mapped) if self.options.test_grouping is TestGrouping.FOLDER else mapped
        sort_tree(grouped)

        root = create_container_suite(label=self.options.root_suite_label)
        root.children.extend(grouped)

        unmapped = built.unmapped
        if fileless:
            unmapped = create_unmapped_suite([*(unmapped.children if unmapped else []), *fileless], self.labeler)
        if unmapped is not None:
            root.children.append(unmapped)
        return root

    def resolve_tests_base_path(self, test_files: list[str]) -> str:
        """Pick the folder that grouping starts from.

        A configured base path must be the project root or inside it;
        otherwise the common folder of all test files is used when it is
        inside the project root, and the project root as a last resort.
        """
        configured = self.options.tests_base_path
        if configured and is_same_or_child_path(self.project_root, configured):
            return configured
        if configured:
            logger.warning(
                "Ignoring tests base path outside project root %s: %s", self.project_root, configured
            )
        common = longest_common_path([os.path.dirname(file) for file in test_files])
        if common and is_same_or_child_path(self.project_root, common):
            return common
        return self.project_root

    def group_by_folder(self, nodes: list[TestNode]) -> list[TestNode]:
        file_suites: dict[str, Suite] = {}
        base_path = self.resolve_tests_base_path([node.file for node in nodes if node.file])

        for node in nodes:
            if not node.file:
                logger.warning("Unexpected test with unknown file in folder grouping - test id is: %s", node.id)
                continue
            file_suite = file_suites.get(node.file)
            if file_suite is None:
                file_suite = self._create_file_suite(node.file, base_path)
                file_suites[node.file] = file_suite
            file_suite.children.append(node)

        root_folder = self._create_folder_suite(base_path)
        root_folder.name = "."
        root_folder.label = "."

        for file, file_suite in file_suites.items():
            self._descendant_folder(root_folder, base_path, os.path.dirname(file)).children.append(file_suite)

        logger.debug("Rearranged %d test files into folders", len(file_suites))

        top_folder = self._flatten(root_folder)
        return list(top_folder.children) if top_folder is root_folder else [top_folder]

    def _flatten(self, folder: Suite) -> Suite:
        """Merge single-suite files and single-child folder chains below ``folder``."""
        flatten_folders = self.options.flatten_single_child_folders
        flatten_files = self.options.flatten_single_suite_files
        if not flatten_folders and not flatten_files:
            return folder

        children: list[TestNode] = []
        for child in folder.children:
            if isinstance(child, Suite) and child.is_folder:
                child = self._flatten(child)
            elif isinstance(child, Suite) and child.is_file and flatten_files and len(child.children) == 1:
                single = child.children[0]
                if isinstance(single, Suite):
                    child = replace(single, suite_type=SuiteType.FILE)
            children.append(child)
        folder.children = children

        if flatten_folders and len(children) == 1:
            single = children[0]
            if isinstance(single, Suite) and single.is_folder:
                merged_name = PurePosixPath(folder.name, single.name).as_posix()
                return replace(single, name=merged_name, label=merged_name)
        return folder

    def _create_folder_suite(self, folder_path: str) -> Suite:
        folder_name = PurePath(folder_path).name
        return Suite(
            id=folder_path,
            name=folder_name,
            full_name="",
            label=folder_name,
            tooltip=os.path.relpath(folder_path, self.project_root),
            suite_type=SuiteType.FOLDER,
            path=folder_path,
        )

    def _create_file_suite(self, file: str, base_path: str) -> Suite:
        label = file_suite_label(file)
        return Suite(
            id=f"{file}:",
            name=label,
            full_name="",
            label=label,
            tooltip=os.path.relpath(file, base_path),
            file=file,
            line=0,
            suite_type=SuiteType.FILE,
        )

    def _descendant_folder(self, base_folder: Suite, base_path: str, folder_path: str) -> Suite:
        """Return the folder node for ``folder_path`` below ``base_folder`` at ``base_path``.

        Missing folder levels are created on the way down.
        """
        if PurePath(base_path) == PurePath(folder_path):
            return base_folder

        current = base_folder
        current_path = base_path
        for segment in PurePath(os.path.relpath(folder_path, base_path)).parts:
            current_path = os.path.normpath(os.path.join(current_path, segment))
            next_folder = next(
                (
                    child
                    for child in current.children
                    if isinstance(child, Suite) and child.is_folder and child.path == current_path
                ),
                None,
            )
            if next_folder is None:
                next_folder = self._create_folder_suite(current_path)
                current.children.append(next_folder)
            current = next_folder
        return current


__all__ = ["SuiteOrganizer", "file_suite_label", "is_same_or_child_path", "longest_common_path"]
