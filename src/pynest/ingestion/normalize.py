"""Normalization helpers for raw collection snapshots."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from pynest.exceptions import MalformedSnapshotError
from pynest.models.device import DeviceRecord
from pynest.models.structure import Structure


def iter_entries(raw_collection: Any) -> Iterator[Any]:
    """Yield the records of a collection snapshot in delivery order.

    Collections arrive keyed by identifier (``{id: record}``); plain
    sequences of records are accepted too.  ``None`` and scalars yield
    nothing.
    """
    if raw_collection is None:
        return
    if isinstance(raw_collection, Mapping):
        yield from raw_collection.values()
        return
    if isinstance(raw_collection, Sequence) and not isinstance(raw_collection, (str, bytes, bytearray)):
        yield from raw_collection


def _require_mapping(entry: Any, kind: str) -> dict[str, Any]:
    if not isinstance(entry, Mapping):
        raise MalformedSnapshotError(f"{kind} entry is not a mapping: {type(entry).__name__}")
    return dict(entry)


def parse_structure(entry: Any) -> Structure:
    """Validate a raw structure record."""
    record = _require_mapping(entry, "structure")
    try:
        return Structure.model_validate(record)
    except ValidationError as exc:
        raise MalformedSnapshotError(f"structure entry missing identity fields: {exc.error_count()} error(s)") from exc


def parse_device_record(entry: Any) -> tuple[DeviceRecord, dict[str, Any]]:
    """Validate the identity fields of a raw device record.

    Returns the identity model and the record as a plain dict.
    """
    record = _require_mapping(entry, "device")
    try:
        return DeviceRecord.model_validate(record), record
    except ValidationError as exc:
        raise MalformedSnapshotError(f"device entry missing identity fields: {exc.error_count()} error(s)") from exc
