"""Idempotent hook dispatch across a resolved profile graph."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from profilekit.catalog import HookCatalog
from profilekit.discovery import DeclarationSource
from profilekit.graph import GraphResolver
from profilekit.hooks import SUPPORTED_HOOKS, HookName, coerce_hook, merge_result
from profilekit.keys import context_key
from profilekit.loader import CodeLoader
from profilekit.models import (
    DispatchResult,
    ExtensionGraph,
    HookImplementation,
    ImplementationFailure,
    InvocationRecord,
    ReentrantLoopPrevented,
)
from profilekit.tracker import InvocationTracker

logger = logging.getLogger(__name__)


class DispatchEngine:
    """Run each hook implementation at most once per (hook, context key).

    The graph and catalog are built on first use and cached for the life of
    the engine. A dispatch that arrives while the same (hook, key) is already
    being dispatched on this thread is a no-op: the outer pass still owns the
    remaining implementations and runs them in catalog order.
    """

    def __init__(
        self,
        root: str,
        *,
        source: DeclarationSource,
        loader: CodeLoader,
        supported_hooks: Iterable[HookName | str] = SUPPORTED_HOOKS,
        extra_includes: Iterable[str] = (),
        include_root_hooks: bool = True,
        tracker: InvocationTracker | None = None,
        keyer: Callable[[Any], str] = context_key,
    ) -> None:
        self.root = root
        self.source = source
        self.loader = loader
        self.supported_hooks = tuple(coerce_hook(hook) for hook in supported_hooks)
        self.extra_includes = tuple(extra_includes)
        self.include_root_hooks = include_root_hooks
        self.tracker = tracker or InvocationTracker()
        self.keyer = keyer
        self.reentrant_skips: list[ReentrantLoopPrevented] = []

        self._graph: ExtensionGraph | None = None
        self._catalog: HookCatalog | None = None
        self._install_callbacks: tuple[HookImplementation, ...] | None = None
        self._build_lock = threading.Lock()
        self._local = threading.local()

    def _ensure_built(self) -> tuple[ExtensionGraph, HookCatalog]:
        with self._build_lock:
            if self._graph is None or self._catalog is None:
                graph = GraphResolver(self.source, extra_includes=self.extra_includes).resolve(self.root)
                catalog = HookCatalog.build(
                    graph,
                    self.supported_hooks,
                    self.loader,
                    include_root=self.include_root_hooks,
                )
                self._graph, self._catalog = graph, catalog
            return self._graph, self._catalog

    @property
    def graph(self) -> ExtensionGraph:
        return self._ensure_built()[0]

    @property
    def catalog(self) -> HookCatalog:
        return self._ensure_built()[1]

    def install_callbacks(self) -> tuple[HookImplementation, ...]:
        """Callbacks ``hook_install`` runs, defaulting to the catalog's implementations."""
        if self._install_callbacks is not None:
            return self._install_callbacks
        return self.catalog.implementations_for(HookName.INSTALL)

    def set_install_callbacks(self, callbacks: Iterable[HookImplementation] | None) -> None:
        """Override which install callbacks run and in what order. ``None`` restores the default."""
        self._install_callbacks = None if callbacks is None else tuple(callbacks)

    def invocations(self, hook: HookName | str | None = None) -> list[InvocationRecord]:
        name = None if hook is None else coerce_hook(hook).value
        return self.tracker.records(name)

    def _active(self) -> list[tuple[str, str]]:
        stack = getattr(self._local, "active", None)
        if stack is None:
            stack = []
            self._local.active = stack
        return stack

    def dispatch(
        self,
        hook: HookName | str,
        context: Any = None,
        payload: Any = None,
        *,
        implementations: Iterable[HookImplementation] | None = None,
    ) -> DispatchResult:
        """Run the pending implementations of ``hook`` for ``context``.

        Unknown hook names raise ``ValueError``. Lookups such as
        ``HookCatalog.implementations_for`` answer ``()`` for them instead,
        since asking what implements a hook is not a request to run it.
        """
        name = coerce_hook(hook)
        key = self.keyer(context)
        if payload is None:
            payload = name.default_payload()

        explicit = implementations is not None
        candidates = tuple(implementations) if explicit else self.catalog.implementations_for(name)
        pair = (name.value, key)
        result = DispatchResult(hook=name.value, key=key)

        with self.tracker.critical_section(*pair):
            self.tracker.ensure_tracked(name.value, key, candidates)
            active = self._active()
            if pair in active:
                pending = self.tracker.pending(name.value, key)
                self._record_reentry(name, key, pending, depth=active.count(pair))
                result.skipped = [item.function for item in pending]
                result.payload = payload
                return result

            pending = self.tracker.pending(name.value, key)
            if explicit:
                pending = self._order_explicit(name, key, candidates, pending)
            already = [item.function for item in candidates if self.tracker.is_invoked(name.value, key, item)]
            if already:
                logger.debug("Skipping %s already-invoked implementation(s) of %s for key %s", len(already), name.value, key)
            result.skipped.extend(already)

            active.append(pair)
            try:
                for implementation in pending:
                    if self.tracker.is_invoked(name.value, key, implementation):
                        result.skipped.append(implementation.function)
                        continue
                    self.tracker.mark_invoked(name.value, key, implementation)
                    payload = self._invoke(name, key, implementation, payload, context, result)
            finally:
                active.pop()

        result.payload = payload
        if result.failures:
            logger.warning("%s of %s implementation(s) of %s failed", len(result.failures), len(result.invoked), name.value)
        return result

    def install(self) -> DispatchResult:
        """Run install callbacks once per process, honouring any host override."""
        return self.dispatch(HookName.INSTALL, None, None, implementations=self.install_callbacks())

    def _order_explicit(
        self,
        name: HookName,
        key: str,
        candidates: tuple[HookImplementation, ...],
        pending: list[HookImplementation],
    ) -> list[HookImplementation]:
        pending_ids = {item.identity for item in pending}
        ordered: list[HookImplementation] = []
        for item in candidates:
            if item.identity in pending_ids:
                ordered.append(item)
            elif not self.tracker.knows(name.value, key, item):
                logger.warning(
                    "Ignoring %s for %s: implementations for key %s were registered before it was supplied",
                    item.function,
                    name.value,
                    key,
                )
        return ordered

    def _record_reentry(self, name: HookName, key: str, pending: list[HookImplementation], *, depth: int) -> None:
        for implementation in pending:
            self.reentrant_skips.append(
                ReentrantLoopPrevented(
                    hook=name.value,
                    key=key,
                    extension=implementation.extension,
                    function=implementation.function,
                    depth=depth,
                )
            )
        logger.warning(
            "Re-entrant dispatch of %s for key %s ignored; %s pending implementation(s) left to the outer pass",
            name.value,
            key,
            len(pending),
        )

    def _invoke(
        self,
        name: HookName,
        key: str,
        implementation: HookImplementation,
        payload: Any,
        context: Any,
        result: DispatchResult,
    ) -> Any:
        result.invoked.append(implementation.function)
        logger.debug("Invoking %s for %s (key=%s)", implementation.function, name.value, key)
        try:
            descriptor = self.graph.descriptor(implementation.extension)
            symbol = self.loader.lookup(descriptor, implementation.function)
            if symbol is None:
                raise LookupError(f"{implementation.function} is no longer defined by {implementation.extension}")
            returned = symbol.callback(payload, context)
            return merge_result(name, payload, returned)
        except Exception as exc:
            logger.warning("Hook implementation %s failed for %s: %s", implementation.function, name.value, exc)
            result.failures.append(
                ImplementationFailure(
                    hook=name.value,
                    key=key,
                    extension=implementation.extension,
                    function=implementation.function,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
            )
            return payload
