"""Notification-style dispatch: a subject notifies attached subprofiles.

The subject holds the currently active hook while it notifies. Every attached
subprofile is offered the notification and runs the method named after the
hook suffix if it defines one (``install_tasks`` for ``hook_install_tasks``).
Invocations are tracked per (active hook, context key, subprofile), so a
subprofile that triggers a notification for the hook it is handling is not
called again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from profilekit.hooks import HookName, coerce_hook, merge_result
from profilekit.keys import context_key
from profilekit.models import DispatchResult, HookImplementation, ImplementationFailure
from profilekit.tracker import InvocationTracker

logger = logging.getLogger(__name__)


class Subprofile:
    """Base class for observers. Subclasses define methods named by hook suffix."""

    def __init__(self, name: str) -> None:
        self.name = name

    def callback_for(self, hook: HookName) -> Callable[[Any, Any], Any] | None:
        method = getattr(self, hook.suffix, None)
        return method if callable(method) else None

    def update(self, subject: ProfileSubject, payload: Any, context: Any) -> Any:
        hook = subject.active_hook
        if hook is None:
            return None
        callback = self.callback_for(hook)
        if callback is None:
            return None
        return callback(payload, context)


class ProfileSubject:
    def __init__(
        self,
        *,
        tracker: InvocationTracker | None = None,
        keyer: Callable[[Any], str] = context_key,
    ) -> None:
        self.tracker = tracker or InvocationTracker()
        self.keyer = keyer
        self._observers: list[Subprofile] = []
        self._active_hook: HookName | None = None

    @property
    def active_hook(self) -> HookName | None:
        return self._active_hook

    @property
    def observers(self) -> tuple[Subprofile, ...]:
        return tuple(self._observers)

    def attach(self, observer: Subprofile) -> None:
        if any(existing.name == observer.name for existing in self._observers):
            raise ValueError(f"A subprofile named {observer.name!r} is already attached")
        self._observers.append(observer)

    def detach(self, observer: Subprofile) -> None:
        self._observers = [existing for existing in self._observers if existing is not observer]

    def _implementation(self, hook: HookName, observer: Subprofile) -> HookImplementation:
        return HookImplementation(
            hook=hook.value,
            extension=observer.name,
            function=hook.implementation_name(observer.name),
            source=f"{type(observer).__module__}.{type(observer).__qualname__}",
        )

    def notify(self, hook: HookName | str, context: Any = None, payload: Any = None) -> DispatchResult:
        name = coerce_hook(hook)
        key = self.keyer(context)
        if payload is None:
            payload = name.default_payload()

        matching = [(observer, self._implementation(name, observer)) for observer in self._observers if observer.callback_for(name)]
        result = DispatchResult(hook=name.value, key=key)

        with self.tracker.critical_section(name.value, key):
            self.tracker.ensure_tracked(name.value, key, [impl for _, impl in matching])
            previous = self._active_hook
            self._active_hook = name
            try:
                for observer, implementation in matching:
                    if not self.tracker.knows(name.value, key, implementation):
                        continue
                    if self.tracker.is_invoked(name.value, key, implementation):
                        result.skipped.append(implementation.function)
                        continue
                    self.tracker.mark_invoked(name.value, key, implementation)
                    result.invoked.append(implementation.function)
                    try:
                        returned = observer.update(self, payload, context)
                        payload = merge_result(name, payload, returned)
                    except Exception as exc:
                        logger.warning("Subprofile %s failed during %s: %s", observer.name, name.value, exc)
                        result.failures.append(
                            ImplementationFailure(
                                hook=name.value,
                                key=key,
                                extension=observer.name,
                                function=implementation.function,
                                error_type=type(exc).__name__,
                                message=str(exc),
                            )
                        )
            finally:
                self._active_hook = previous

        result.payload = payload
        return result
