"""Exception types raised by the tree engine and its record decoders."""

from __future__ import annotations


class TestTreeError(Exception):
    """Base class for errors that abort a tree build pass."""

    __test__ = False


class RecordDecodeError(TestTreeError, ValueError):
    """Raised when a definition or outcome record cannot be decoded."""

    def __init__(self, kind: str, message: str, record: object | None = None) -> None:
        super().__init__(f"invalid {kind} record: {message}")
        self.kind = kind
        self.record = record


class DefinitionLookupError(TestTreeError):
    """Raised when the definition index fails while answering a lookup."""


class BuildAbortedError(TestTreeError):
    """Raised when a build pass fails; the previously built tree is kept."""
