"""Public package surface for testtree.

Builds a deterministic suite/test tree from statically discovered test
definitions and runtime test outcomes. ``main`` runs the CLI.
"""

from __future__ import annotations

from .config import TestGrouping, TreeOptions
from .definitions import AncestorSuite, Definition, DefinitionState, InMemoryDefinitionIndex, TestDefinition
from .engine import BuildResult, ReconciliationEngine
from .errors import BuildAbortedError, DefinitionLookupError, RecordDecodeError, TestTreeError
from .nodes import ActiveState, Suite, SuiteType, TestCase, TestNode
from .outcomes import OutcomeStatus, SpecOutcome


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "ActiveState",
    "AncestorSuite",
    "BuildAbortedError",
    "BuildResult",
    "Definition",
    "DefinitionLookupError",
    "DefinitionState",
    "InMemoryDefinitionIndex",
    "OutcomeStatus",
    "ReconciliationEngine",
    "RecordDecodeError",
    "SpecOutcome",
    "Suite",
    "SuiteType",
    "TestCase",
    "TestDefinition",
    "TestGrouping",
    "TestNode",
    "TestTreeError",
    "TreeOptions",
    "main",
]
