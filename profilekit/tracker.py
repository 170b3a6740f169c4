"""At-most-once bookkeeping for hook implementations."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from profilekit.models import HookImplementation, InvocationRecord

logger = logging.getLogger(__name__)

TrackKey = tuple[str, str]


class InvocationTracker:
    """In-memory invocation records keyed by (hook, context key, implementation).

    Records are created once per (hook, key) and only ever flip from not
    invoked to invoked. Callers mark an implementation *before* calling it so
    that a nested dispatch for the same pair sees it as done.

    ``critical_section`` holds one re-entrant lock per (hook, key). Locks for
    different pairs are independent and not ordered, so two threads that each
    dispatch a second pair from inside a first one, in opposite orders, will
    deadlock. Hosts that dispatch from several threads should not nest
    dispatches of different pairs across them.
    """

    def __init__(self) -> None:
        self._records: dict[TrackKey, dict[str, InvocationRecord]] = {}
        self._implementations: dict[TrackKey, dict[str, HookImplementation]] = {}
        self._guard = threading.Lock()
        self._locks: dict[TrackKey, threading.RLock] = {}

    @contextmanager
    def critical_section(self, hook: str, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault((hook, key), threading.RLock())
        with lock:
            yield

    def is_tracked(self, hook: str, key: str) -> bool:
        with self._guard:
            return (hook, key) in self._records

    def ensure_tracked(self, hook: str, key: str, implementations: Iterable[HookImplementation]) -> bool:
        """Register implementations for (hook, key). Returns False if already registered."""
        track_key = (hook, key)
        with self._guard:
            if track_key in self._records:
                return False
            records: dict[str, InvocationRecord] = {}
            by_identity: dict[str, HookImplementation] = {}
            for implementation in implementations:
                if implementation.identity in records:
                    continue
                records[implementation.identity] = InvocationRecord(
                    hook=hook,
                    key=key,
                    extension=implementation.extension,
                    function=implementation.function,
                )
                by_identity[implementation.identity] = implementation
            self._records[track_key] = records
            self._implementations[track_key] = by_identity
        logger.debug("Tracking %s implementation(s) of %s for key %s", len(records), hook, key)
        return True

    def pending(self, hook: str, key: str) -> list[HookImplementation]:
        track_key = (hook, key)
        with self._guard:
            records = self._records.get(track_key, {})
            implementations = self._implementations.get(track_key, {})
            return [implementations[identity] for identity, record in records.items() if not record.invoked]

    def is_invoked(self, hook: str, key: str, implementation: HookImplementation) -> bool:
        with self._guard:
            record = self._records.get((hook, key), {}).get(implementation.identity)
            return bool(record and record.invoked)

    def knows(self, hook: str, key: str, implementation: HookImplementation) -> bool:
        with self._guard:
            return implementation.identity in self._records.get((hook, key), {})

    def mark_invoked(self, hook: str, key: str, implementation: HookImplementation) -> None:
        with self._guard:
            record = self._records.get((hook, key), {}).get(implementation.identity)
            if record is None:
                raise ValueError(
                    f"{implementation.function} is not tracked for {hook} under key {key}; "
                    "call ensure_tracked before mark_invoked"
                )
            record.invoked = True

    def records(self, hook: str | None = None) -> list[InvocationRecord]:
        with self._guard:
            rows: list[InvocationRecord] = []
            for (tracked_hook, _key), records in self._records.items():
                if hook is not None and tracked_hook != hook:
                    continue
                rows.extend(record.model_copy() for record in records.values())
            return rows
