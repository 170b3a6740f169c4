"""Catalog of hook implementations discovered across a profile graph."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from profilekit.hooks import HookName, coerce_hook
from profilekit.loader import CodeLoader
from profilekit.models import ExtensionGraph, HookImplementation

logger = logging.getLogger(__name__)


class HookCatalog:
    """Static mapping of hook name to its implementations, in graph order."""

    def __init__(self, entries: dict[HookName, tuple[HookImplementation, ...]] | None = None) -> None:
        self._entries: dict[HookName, tuple[HookImplementation, ...]] = dict(entries or {})

    @classmethod
    def build(
        cls,
        graph: ExtensionGraph,
        supported_hooks: Iterable[HookName | str],
        loader: CodeLoader,
        *,
        include_root: bool = True,
    ) -> HookCatalog:
        entries: dict[HookName, tuple[HookImplementation, ...]] = {}
        extensions = [name for name in graph.extensions if include_root or name != graph.root]

        for hook in (coerce_hook(item) for item in supported_hooks):
            found: list[HookImplementation] = []
            for extension in extensions:
                function = hook.implementation_name(extension)
                symbol = loader.lookup(graph.descriptor(extension), function)
                if symbol is None:
                    continue
                found.append(
                    HookImplementation(
                        hook=hook.value,
                        extension=extension,
                        function=function,
                        source=symbol.source,
                    )
                )
            entries[hook] = tuple(found)

        catalog = cls(entries)
        logger.info(
            "Built hook catalog for %s: %s",
            graph.root,
            ", ".join(f"{hook.suffix}={len(found)}" for hook, found in entries.items()) or "no supported hooks",
        )
        return catalog

    @property
    def hooks(self) -> tuple[HookName, ...]:
        return tuple(self._entries)

    def implementations_for(self, hook: HookName | str) -> tuple[HookImplementation, ...]:
        try:
            name = coerce_hook(hook)
        except ValueError:
            return ()
        return self._entries.get(name, ())

    def as_dict(self) -> dict[str, list[dict[str, str]]]:
        return {hook.value: [item.model_dump() for item in found] for hook, found in self._entries.items()}
