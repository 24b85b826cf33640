"""Decode definition and outcome records from JSON-like mappings.

Records use the camelCase keys of the wire format. Any structural problem
raises ``RecordDecodeError`` so the caller can abort the whole pass.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path

from .definitions import AncestorSuite, Definition, DefinitionState, TestDefinition
from .errors import RecordDecodeError
from .outcomes import OutcomeStatus, SpecOutcome

_STATUS_ALIASES = {
    "passed": OutcomeStatus.PASSED,
    "success": OutcomeStatus.PASSED,
    "failed": OutcomeStatus.FAILED,
    "failure": OutcomeStatus.FAILED,
    "skipped": OutcomeStatus.SKIPPED,
}


def _require(record: Mapping[str, object], key: str, kind: str) -> object:
    if key not in record:
        raise RecordDecodeError(kind, f"missing {key!r}", record)
    return record[key]


def _require_str(record: Mapping[str, object], key: str, kind: str) -> str:
    value = _require(record, key, kind)
    if not isinstance(value, str):
        raise RecordDecodeError(kind, f"{key!r} must be a string", record)
    return value


def _require_line(record: Mapping[str, object], kind: str) -> int:
    value = _require(record, "line", kind)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise RecordDecodeError(kind, "'line' must be a non-negative integer", record)
    return value


def _optional_bool(record: Mapping[str, object], key: str, kind: str) -> bool:
    value = record.get(key, False)
    if not isinstance(value, bool):
        raise RecordDecodeError(kind, f"{key!r} must be a boolean", record)
    return value


def _decode_state(record: Mapping[str, object], kind: str) -> DefinitionState:
    value = record.get("state", DefinitionState.DEFAULT.value)
    if not isinstance(value, str):
        raise RecordDecodeError(kind, "'state' must be a string", record)
    try:
        return DefinitionState(value.lower())
    except ValueError as exc:
        raise RecordDecodeError(kind, f"unknown state {value!r}", record) from exc


def decode_source_definition(record: Mapping[str, object], kind: str = "definition") -> Definition:
    return Definition(
        file=_require_str(record, "file", kind),
        line=_require_line(record, kind),
        state=_decode_state(record, kind),
        disabled=_optional_bool(record, "disabled", kind),
        parameterized=_optional_bool(record, "parameterized", kind),
    )


def decode_definition(record: object) -> TestDefinition:
    """Decode one test definition record with its ancestor chain."""
    if not isinstance(record, Mapping):
        raise RecordDecodeError("definition", "expected an object", record)

    raw_chain = record.get("ancestorChain", [])
    if not isinstance(raw_chain, list):
        raise RecordDecodeError("definition", "'ancestorChain' must be a list", record)

    ancestors: list[AncestorSuite] = []
    for item in raw_chain:
        if isinstance(item, str):
            ancestors.append(AncestorSuite(item))
        elif isinstance(item, Mapping):
            ancestors.append(
                AncestorSuite(
                    name=_require_str(item, "name", "suite definition"),
                    definition=decode_source_definition(item, "suite definition"),
                )
            )
        else:
            raise RecordDecodeError("definition", "ancestor entries must be strings or objects", record)

    return TestDefinition(
        description=_require_str(record, "description", "definition"),
        definition=decode_source_definition(record),
        ancestors=tuple(ancestors),
    )


def decode_outcome(record: object) -> SpecOutcome:
    """Decode one runtime outcome record."""
    if not isinstance(record, Mapping):
        raise RecordDecodeError("outcome", "expected an object", record)

    raw_id = _require(record, "id", "outcome")
    if not isinstance(raw_id, (str, int)) or isinstance(raw_id, bool):
        raise RecordDecodeError("outcome", "'id' must be a string or integer", record)

    suite_chain = _require(record, "suiteChain", "outcome")
    if not isinstance(suite_chain, list) or not all(isinstance(name, str) for name in suite_chain):
        raise RecordDecodeError("outcome", "'suiteChain' must be a list of strings", record)

    raw_status = record.get("status", OutcomeStatus.PASSED.value)
    status = _STATUS_ALIASES.get(raw_status.lower()) if isinstance(raw_status, str) else None
    if status is None:
        raise RecordDecodeError("outcome", f"unknown status {raw_status!r}", record)

    duration = record.get("durationMs", 0)
    if isinstance(duration, str):
        try:
            duration = float(duration)
        except ValueError as exc:
            raise RecordDecodeError("outcome", "'durationMs' must be numeric", record) from exc
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise RecordDecodeError("outcome", "'durationMs' must be numeric", record)

    failure_messages = record.get("failureMessages") or []
    if not isinstance(failure_messages, list) or not all(isinstance(item, str) for item in failure_messages):
        raise RecordDecodeError("outcome", "'failureMessages' must be a list of strings", record)

    return SpecOutcome(
        id=str(raw_id),
        suite_chain=tuple(suite_chain),
        description=_require_str(record, "description", "outcome"),
        status=status,
        duration_ms=float(duration),
        failure_messages=tuple(failure_messages),
    )


def decode_definitions(records: Iterable[object]) -> list[TestDefinition]:
    return [decode_definition(record) for record in records]


def decode_outcomes(records: Iterable[object]) -> list[SpecOutcome]:
    return [decode_outcome(record) for record in records]


def load_records(path: Path, kind: str) -> list[object]:
    """Read a JSON file holding a top-level list of records."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise RecordDecodeError(kind, f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise RecordDecodeError(kind, f"{path} must contain a JSON list")
    return data


__all__ = [
    "decode_definition",
    "decode_definitions",
    "decode_outcome",
    "decode_outcomes",
    "decode_source_definition",
    "load_records",
]
