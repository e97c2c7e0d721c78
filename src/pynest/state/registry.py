"""Canonical in-memory registry of structures and devices.

This is the only component allowed to merge collection snapshots.  Each
collection is a dict keyed by identifier, so uniqueness is structural and
an upsert is a single map write.  Snapshots carry full collection values
(not deltas): within one snapshot entries apply in delivery order, and
across snapshots the last write for an identifier wins.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from pynest._redact import redact_for_log
from pynest.exceptions import MalformedSnapshotError, NotFoundError
from pynest.ingestion.normalize import iter_entries, parse_device_record, parse_structure
from pynest.models.device import DeviceCategory, DeviceEntry
from pynest.models.structure import Structure

_logger = logging.getLogger(__name__)


class Registry:
    """Deduplicated structures and per-category devices."""

    def __init__(self) -> None:
        self._structures: dict[str, Structure] = {}
        self._devices: dict[DeviceCategory, dict[str, DeviceEntry]] = {category: {} for category in DeviceCategory}

    # ------------------------------------------------------------------
    # Snapshot application
    # ------------------------------------------------------------------

    def apply_structure_snapshot(self, raw_collection: Any) -> int:
        """Upsert every valid structure in *raw_collection*.

        Returns the number of entries applied.
        """
        applied = 0
        for entry in iter_entries(raw_collection):
            try:
                structure = parse_structure(entry)
            except MalformedSnapshotError as exc:
                _logger.debug("Dropping structure entry: %s %s", exc, redact_for_log(entry))
                continue
            self._structures[structure.structure_id] = structure
            applied += 1
        return applied

    def apply_device_snapshot(self, raw_collection: Any, category: DeviceCategory) -> int:
        """Upsert every valid device of *category* in *raw_collection*.

        The owning structure is resolved by lookup; it stays unresolved
        when the structure has not synced yet.  The new entry replaces any
        prior one wholesale.
        """
        category = DeviceCategory(category)
        devices = self._devices[category]
        applied = 0
        for entry in iter_entries(raw_collection):
            try:
                identity, record = parse_device_record(entry)
            except MalformedSnapshotError as exc:
                _logger.debug("Dropping %s entry: %s %s", category, exc, redact_for_log(entry))
                continue

            structure = self._structures.get(identity.structure_id)
            if structure is None:
                _logger.debug(
                    "Structure %s of %s %s not synced yet; leaving reference unresolved",
                    identity.structure_id,
                    category,
                    identity.device_id,
                )

            devices[identity.device_id] = DeviceEntry(
                device_id=identity.device_id,
                name_long=identity.name_long,
                structure_id=identity.structure_id,
                category=category,
                structure=structure,
                values=copy.deepcopy(record),
                raw=record,
            )
            applied += 1
        return applied

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def structures(self) -> list[Structure]:
        return list(self._structures.values())

    def devices(self, category: DeviceCategory) -> list[DeviceEntry]:
        return list(self._devices[DeviceCategory(category)].values())

    def get_structure(self, structure_id: str | None) -> Structure | None:
        if not structure_id:
            return None
        return self._structures.get(structure_id)

    def get_device(self, category: DeviceCategory, device_id: str) -> DeviceEntry | None:
        return self._devices[DeviceCategory(category)].get(device_id)

    def require_device(self, category: DeviceCategory, device_id: str) -> DeviceEntry:
        """Return the entry for *device_id* or raise :class:`NotFoundError`."""
        entry = self.get_device(category, device_id)
        if entry is None:
            raise NotFoundError(
                f"No {category} device with id {device_id!r}",
                category=str(category),
                device_id=device_id,
            )
        return entry
