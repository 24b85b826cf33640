"""Runtime outcome records reported by the test execution backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

TOP_LEVEL_SUITE_NOISE = "Jasmine__TopLevel__Suite"


class OutcomeStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SpecOutcome:
    """One reported test execution.

    Outcomes carry display strings only: no file, no line, and no guarantee
    that ``(suite_chain, description)`` is unique across a run.
    """

    id: str
    suite_chain: tuple[str, ...]
    description: str
    status: OutcomeStatus = OutcomeStatus.PASSED
    duration_ms: float = 0.0
    failure_messages: tuple[str, ...] = field(default_factory=tuple)

    @property
    def full_name(self) -> str:
        return " ".join((*self.suite_chain, self.description))

    def without_suite_noise(self) -> SpecOutcome:
        """Return a copy without the runner's synthetic top-level suite name."""
        if self.suite_chain and self.suite_chain[0] == TOP_LEVEL_SUITE_NOISE:
            return SpecOutcome(
                id=self.id,
                suite_chain=self.suite_chain[1:],
                description=self.description,
                status=self.status,
                duration_ms=self.duration_ms,
                failure_messages=self.failure_messages,
            )
        return self


__all__ = ["OutcomeStatus", "SpecOutcome", "TOP_LEVEL_SUITE_NOISE"]
