"""Profile graph resolution: included profiles, dependencies and removals."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from profilekit.discovery import DeclarationSource
from profilekit.errors import NotFoundError
from profilekit.models import ExtensionDescriptor, ExtensionGraph

logger = logging.getLogger(__name__)


def _extend_unique(target: list[str], seen: set[str], names: Iterable[str]) -> None:
    for name in names:
        if name not in seen:
            seen.add(name)
            target.append(name)


class GraphResolver:
    """Flatten a base profile and everything it includes.

    Traversal is preorder and depth first. Each profile is visited at most
    once, so mutually including profiles terminate and are flattened rather
    than reported. Removals are applied after every profile's dependencies
    have been merged, so a removal anywhere in the graph wins over a
    dependency declared anywhere else.
    """

    def __init__(self, source: DeclarationSource, *, extra_includes: Iterable[str] = ()) -> None:
        self.source = source
        self.extra_includes = tuple(extra_includes)

    def _load(self, name: str) -> ExtensionDescriptor:
        if not self.source.exists(name):
            raise NotFoundError(name)
        return self.source.load(name)

    def resolve(self, root: str) -> ExtensionGraph:
        descriptors: dict[str, ExtensionDescriptor] = {}
        order: list[str] = []
        dependencies: list[str] = []
        removals: list[str] = []
        seen_dependencies: set[str] = set()
        seen_removals: set[str] = set()

        stack: list[tuple[str, bool]] = [(root, True)]
        while stack:
            name, is_root = stack.pop()
            if name in descriptors:
                logger.debug("Profile %s already visited; not descending again", name)
                continue

            descriptor = self._load(name)
            descriptors[name] = descriptor
            order.append(name)
            _extend_unique(dependencies, seen_dependencies, descriptor.dependencies)
            _extend_unique(removals, seen_removals, descriptor.remove_dependencies)

            includes = list(descriptor.profiles)
            if is_root:
                includes.extend(self.extra_includes)
            for included in reversed(includes):
                if included not in descriptors:
                    stack.append((included, False))

        removal_set = set(removals)
        final = tuple(name for name in dependencies if name not in removal_set)
        graph = ExtensionGraph(
            root=root,
            extensions=tuple(order),
            dependencies=final,
            removals=tuple(removals),
            descriptors=descriptors,
        )
        logger.info(
            "Resolved profile %s: profiles=%s dependencies=%s removals=%s",
            root,
            len(order),
            len(final),
            len(removals),
        )
        return graph
