"""Resolve runtime outcomes to the source definitions they came from.

An outcome only carries display strings, so a lookup can return zero, one,
or several candidate definitions. Duplicates are handed out first-come,
first-served per normalized id, in index order.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .definitions import DefinitionIndex, TestDefinition
from .errors import DefinitionLookupError
from .outcomes import SpecOutcome

logger = logging.getLogger(__name__)


class MatchKind(str, Enum):
    MAPPED = "mapped"
    UNMAPPED = "unmapped"
    DUPLICATE_DEFINITION = "duplicate_definition"
    DUPLICATE_REPORT = "duplicate_report"


def normalized_suite_id(suite_chain: Sequence[str], file: str | None = None, line: int | None = None) -> str:
    """Return the display id of a suite, with its definition line when known."""
    suite_component = "-->".join(f"[{name}]" for name in suite_chain)
    if line is not None:
        return f"{file or ''}:{line}:{suite_component}"
    return f"{file or ''}:{suite_component}"


@dataclass(frozen=True)
class NormalizedId:
    """Disambiguation key for a test display chain.

    Compared field by field, so display chains that render to the same
    string never collide. ``str()`` gives the display form.
    """

    file: str
    suite_chain: tuple[str, ...]
    description: str

    def __str__(self) -> str:
        return f"{normalized_suite_id(self.suite_chain, self.file)}==>{self.description}"


def normalized_id(suite_chain: Sequence[str], description: str, file: str | None = None) -> NormalizedId:
    return NormalizedId(file or "", tuple(suite_chain), description)


@dataclass(frozen=True)
class SpecMatch:
    """Matcher decision for one outcome."""

    outcome: SpecOutcome
    normalized_id: NormalizedId
    candidates: tuple[TestDefinition, ...]
    selected: TestDefinition | None
    kind: MatchKind

    @property
    def is_unmapped(self) -> bool:
        return self.kind is MatchKind.UNMAPPED

    def ordered_candidates(self) -> list[TestDefinition]:
        """Candidates with the selected definition moved to the front."""
        selected = self.selected
        if selected is None:
            return list(self.candidates)
        return sorted(self.candidates, key=lambda candidate: not candidate.is_same_location(selected))


class SpecMatcher:
    """Per-pass matcher; create a fresh one for every build."""

    def __init__(self, index: DefinitionIndex) -> None:
        self.index = index
        self._unconsumed: dict[NormalizedId, deque[TestDefinition]] = {}
        self._seen_single: set[NormalizedId] = set()

    def match(self, outcome: SpecOutcome) -> SpecMatch:
        key = normalized_id(outcome.suite_chain, outcome.description)
        try:
            candidates = tuple(self.index.get_test_definitions(outcome.suite_chain, outcome.description))
        except (LookupError, ValueError, TypeError) as exc:
            raise DefinitionLookupError(f"definition lookup failed for {outcome.full_name!r}: {exc}") from exc

        logger.debug("Got %d matching test definition(s) for spec: %s", len(candidates), outcome.id)

        if not candidates:
            return SpecMatch(outcome, key, candidates, None, MatchKind.UNMAPPED)

        if len(candidates) == 1:
            kind = MatchKind.DUPLICATE_REPORT if key in self._seen_single else MatchKind.MAPPED
            self._seen_single.add(key)
            return SpecMatch(outcome, key, candidates, candidates[0], kind)

        queue = self._unconsumed.get(key)
        if queue is None:
            queue = deque(candidates)
            self._unconsumed[key] = queue

        if queue:
            selected = queue.popleft()
            logger.debug("Selected duplicate candidate %s for spec: %s", selected.definition.location(), outcome.id)
            return SpecMatch(outcome, key, candidates, selected, MatchKind.DUPLICATE_DEFINITION)

        logger.debug("All %d candidates already consumed for spec: %s", len(candidates), outcome.id)
        return SpecMatch(outcome, key, candidates, candidates[0], MatchKind.DUPLICATE_REPORT)


__all__ = ["MatchKind", "NormalizedId", "SpecMatch", "SpecMatcher", "normalized_id", "normalized_suite_id"]
