"""Host-facing installer that drives the install lifecycle through the engine."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from profilekit.catalog import HookCatalog
from profilekit.config import ProfileKitConfig, load_effective_config
from profilekit.discovery import DeclarationSource, FilesystemDeclarationSource
from profilekit.dispatch import DispatchEngine
from profilekit.hooks import HookName
from profilekit.keys import context_key
from profilekit.loader import CodeLoader, FileCodeLoader
from profilekit.models import DispatchResult, ExtensionGraph, HookImplementation

logger = logging.getLogger(__name__)


class ProfileInstaller:
    """One installer per base profile, constructed by the host and passed around.

    Each lifecycle method takes the state it needs as parameters and returns
    the built or altered value. Each hook's result is remembered per context
    key, so a host that repeats a lifecycle phase with an equal context gets
    the first result back rather than a payload no implementation touched.
    """

    def __init__(
        self,
        root: str,
        config: ProfileKitConfig | None = None,
        *,
        project_path: str | Path = ".",
        source: DeclarationSource | None = None,
        loader: CodeLoader | None = None,
        engine: DispatchEngine | None = None,
    ) -> None:
        self.root = root
        self.config = config or ProfileKitConfig()
        self.source = source or FilesystemDeclarationSource(
            project_path,
            base=root,
            search_paths=self.config.discovery.search_paths,
            info_suffix=self.config.discovery.info_suffix,
        )
        self.loader = loader or FileCodeLoader(self.config.discovery.code_units)
        self.engine = engine or DispatchEngine(
            root,
            source=self.source,
            loader=self.loader,
            supported_hooks=self.config.dispatch.supported_hooks,
            extra_includes=self.config.site.profiles,
            include_root_hooks=self.config.dispatch.include_root_hooks,
        )
        self._profile_modules: dict[str, list[str]] = {}
        self._results: dict[tuple[str, str], Any] = {}

    @classmethod
    def from_project(
        cls,
        project_path: str | Path,
        root: str,
        org_defaults: dict | None = None,
        system_defaults: dict | None = None,
        runtime_override: dict | None = None,
        loader: CodeLoader | None = None,
    ) -> ProfileInstaller:
        config = load_effective_config(
            project_path=project_path,
            org_defaults=org_defaults,
            system_defaults=system_defaults,
            runtime_override=runtime_override,
        )
        return cls(root, config, project_path=project_path, loader=loader)

    @property
    def graph(self) -> ExtensionGraph:
        return self.engine.graph

    @property
    def catalog(self) -> HookCatalog:
        return self.engine.catalog

    def _finish(self, result: DispatchResult) -> Any:
        if result.failures:
            if self.config.dispatch.raise_on_failure:
                result.raise_for_failures()
            for failure in result.failures:
                logger.error("%s failed during %s: %s: %s", failure.function, failure.hook, failure.error_type, failure.message)
        return result.payload

    def _dispatch_once(self, hook: HookName, context: Any, payload: Any) -> Any:
        """Dispatch ``hook`` for ``context`` and remember the payload it produced.

        Every implementation is already marked invoked after the first pass,
        so a repeat dispatch would only hand back the seed payload. Repeat
        calls return a copy of the first result instead.
        """
        cache_key = (hook.value, context_key(context))
        if cache_key in self._results:
            logger.debug("Reusing %s result for key %s", hook.value, cache_key[1])
            return copy.deepcopy(self._results[cache_key])

        value = self._finish(self.engine.dispatch(hook, context, payload))
        self._results[cache_key] = copy.deepcopy(value)
        return value

    def _apply_removals(self, dependencies: Iterable[str]) -> list[str]:
        removals = self.graph.removal_set
        kept: list[str] = []
        for name in dependencies:
            if name not in removals and name not in kept:
                kept.append(name)
        return kept

    def get_dependencies(self, context: Any = None) -> list[str]:
        """Graph dependencies plus whatever profiles gather, with removals applied last."""
        gathered = self._dispatch_once(HookName.GATHER_DEPENDENCIES, context, list(self.graph.dependencies))
        return self._apply_removals(gathered)

    def alter_dependencies(self, dependencies: Iterable[str], context: Any = None) -> list[str]:
        altered = self._dispatch_once(HookName.ALTER_DEPENDENCIES, context, list(dependencies))
        return self._apply_removals(altered)

    def install_profile_modules(self, base_modules: Iterable[str], install_state: Any = None) -> list[str]:
        """Merge the host's module list with profile dependencies, then let profiles alter it.

        Computed once per install state; later calls with an identical state
        return the same list.
        """
        key = context_key(install_state)
        cached = self._profile_modules.get(key)
        if cached is not None:
            return list(cached)

        merged: list[str] = []
        for name in [*base_modules, *self.get_dependencies(install_state)]:
            if name not in merged:
                merged.append(name)
        modules = self.alter_dependencies(merged, install_state)
        self._profile_modules[key] = modules
        logger.info("Install profile modules for %s: %s", self.root, len(modules))
        return list(modules)

    def get_install_tasks(self, install_state: Any) -> dict[str, Any]:
        return self._dispatch_once(HookName.GATHER_TASKS, install_state, {})

    def alter_install_tasks(self, tasks: Mapping[str, Any], install_state: Any) -> dict[str, Any]:
        return self._dispatch_once(HookName.ALTER_TASKS, install_state, dict(tasks))

    def install_callbacks(self) -> tuple[HookImplementation, ...]:
        return self.engine.install_callbacks()

    def set_install_callbacks(self, callbacks: Iterable[HookImplementation] | None) -> None:
        self.engine.set_install_callbacks(callbacks)

    def install(self) -> None:
        self._finish(self.engine.install())

    def alter_install_configure_form(self, form: dict[str, Any], form_state: Any) -> dict[str, Any]:
        return self._dispatch_once(HookName.ALTER_CONFIGURE_FORM, form_state, form)

    def submit_install_configure_form(self, form: dict[str, Any], form_state: Any) -> None:
        self._finish(self.engine.dispatch(HookName.SUBMIT_CONFIGURE_FORM, form_state, form))
