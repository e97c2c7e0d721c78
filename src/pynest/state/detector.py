"""Capability-based change detection.

A :class:`ChangeDetector` holds the settled field values of one device.
For every snapshot it first works out which capabilities changed, then
emits one notification per change, and only then merges the snapshot.
Detect-then-merge means each notification describes a transition from
the previous settled state.  Detect-all-then-emit-all means simultaneous
changes each produce exactly one notification.
"""

from __future__ import annotations

import copy
import enum
import logging
import math
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pynest.state.events import CapabilityChange

_logger = logging.getLogger(__name__)


class DetectorState(enum.StrEnum):
    CONSTRUCTED = "constructed"
    SYNCED = "synced"


def values_differ(current: Any, incoming: Any) -> bool:
    """Scalar inequality.

    Numbers compare by value (``20 == 20.0``); a bool never equals a
    number; NaN equals NaN.
    """
    if isinstance(current, bool) or isinstance(incoming, bool):
        return type(current) is not type(incoming) or current != incoming
    if isinstance(current, (int, float)) and isinstance(incoming, (int, float)):
        if isinstance(current, float) and isinstance(incoming, float) and math.isnan(current) and math.isnan(incoming):
            return False
        return current != incoming
    return type(current) is not type(incoming) or current != incoming


class ChangeDetector:
    """Per-device change detection and state merge.

    Parameters
    ----------
    capabilities
        Fixed capability list.  ``None`` turns :meth:`apply` into a no-op.
    initial
        Values copied (deep) into the settled state.
    on_change
        Called as ``on_change(capability, new_value)`` per change.
    """

    def __init__(
        self,
        capabilities: Sequence[str] | None,
        *,
        initial: Mapping[str, Any] | None = None,
        on_change: Callable[[str, Any], None] | None = None,
    ) -> None:
        self._capabilities = tuple(capabilities) if capabilities is not None else None
        self._values: dict[str, Any] = copy.deepcopy(dict(initial)) if initial else {}
        self._on_change = on_change
        self._state = DetectorState.CONSTRUCTED

    @property
    def capabilities(self) -> tuple[str, ...] | None:
        return self._capabilities

    @property
    def state(self) -> DetectorState:
        return self._state

    @property
    def values(self) -> dict[str, Any]:
        """Copy of the settled state."""
        return copy.deepcopy(self._values)

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def diff(self, snapshot: Mapping[str, Any]) -> list[CapabilityChange]:
        """Changes *snapshot* would produce, without emitting or merging."""
        if self._capabilities is None:
            return []
        changes: list[CapabilityChange] = []
        for name in self._capabilities:
            if name not in self._values or name not in snapshot:
                continue
            current = self._values[name]
            incoming = snapshot[name]
            if values_differ(current, incoming):
                changes.append(CapabilityChange(capability=name, previous=current, value=incoming))
        return changes

    def apply(self, snapshot: Any) -> list[CapabilityChange]:
        """Detect changes, emit them, then shallow-merge *snapshot*."""
        if self._capabilities is None:
            return []
        if not isinstance(snapshot, Mapping):
            _logger.debug("Ignoring non-mapping snapshot of type %s", type(snapshot).__name__)
            return []

        changes = self.diff(snapshot)

        if self._on_change is not None:
            for change in changes:
                try:
                    self._on_change(change.capability, change.value)
                except Exception:
                    _logger.exception("Change callback for %r failed", change.capability)

        # Non-capability fields are merged too.
        self._values.update(copy.deepcopy(dict(snapshot)))
        self._state = DetectorState.SYNCED
        return changes
