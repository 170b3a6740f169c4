"""Supported hook vocabulary and payload merge rules."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, MutableMapping, MutableSequence, MutableSet
from enum import Enum
from typing import Any

HOOK_PREFIX = "hook_"


class MergeStrategy(str, Enum):
    UNION = "union"
    APPEND = "append"
    REPLACE = "replace"
    NONE = "none"


class HookName(str, Enum):
    GATHER_DEPENDENCIES = "hook_dependencies"
    ALTER_DEPENDENCIES = "hook_dependencies_alter"
    GATHER_TASKS = "hook_install_tasks"
    ALTER_TASKS = "hook_install_tasks_alter"
    INSTALL = "hook_install"
    ALTER_CONFIGURE_FORM = "hook_form_install_configure_form_alter"
    SUBMIT_CONFIGURE_FORM = "hook_form_install_configure_form_submit"

    @property
    def suffix(self) -> str:
        return self.value[len(HOOK_PREFIX) :]

    @property
    def merge(self) -> MergeStrategy:
        return _MERGE_STRATEGIES[self]

    def implementation_name(self, extension: str) -> str:
        """Function name an extension must define to implement this hook."""
        return f"{extension}_{self.suffix}"

    def default_payload(self) -> Any:
        if self.merge == MergeStrategy.UNION:
            return []
        if self.merge in (MergeStrategy.APPEND, MergeStrategy.REPLACE):
            return {}
        return None


_MERGE_STRATEGIES: dict[HookName, MergeStrategy] = {
    HookName.GATHER_DEPENDENCIES: MergeStrategy.UNION,
    HookName.ALTER_DEPENDENCIES: MergeStrategy.REPLACE,
    HookName.GATHER_TASKS: MergeStrategy.APPEND,
    HookName.ALTER_TASKS: MergeStrategy.REPLACE,
    HookName.INSTALL: MergeStrategy.NONE,
    HookName.ALTER_CONFIGURE_FORM: MergeStrategy.REPLACE,
    HookName.SUBMIT_CONFIGURE_FORM: MergeStrategy.NONE,
}

SUPPORTED_HOOKS: tuple[HookName, ...] = tuple(HookName)


def coerce_hook(hook: HookName | str) -> HookName:
    if isinstance(hook, HookName):
        return hook
    try:
        return HookName(hook)
    except ValueError:
        return HookName(HOOK_PREFIX + hook)


def _merge_union(payload: Any, result: Any) -> Any:
    if isinstance(result, (str, bytes)) or not isinstance(result, Iterable):
        raise TypeError(f"dependency hooks must return an iterable of names, got {type(result).__name__}")
    if isinstance(payload, MutableSet):
        payload.update(result)
        return payload
    if isinstance(payload, MutableSequence):
        for name in result:
            if name not in payload:
                payload.append(name)
        return payload
    raise TypeError(f"dependency payload must be a list or set, got {type(payload).__name__}")


def _merge_append(payload: Any, result: Any) -> Any:
    if isinstance(payload, MutableMapping):
        if not isinstance(result, Mapping):
            raise TypeError(f"task hooks must return a mapping when the payload is a mapping, got {type(result).__name__}")
        payload.update(result)
        return payload
    if isinstance(payload, MutableSequence):
        if isinstance(result, Mapping):
            payload.extend(result.items())
        else:
            payload.extend(result)
        return payload
    raise TypeError(f"task payload must be a mapping or list, got {type(payload).__name__}")


def merge_result(hook: HookName, payload: Any, result: Any) -> Any:
    """Fold one implementation's return value into the running payload."""
    if result is None:
        return payload
    strategy = hook.merge
    if strategy == MergeStrategy.UNION:
        return _merge_union(payload, result)
    if strategy == MergeStrategy.APPEND:
        return _merge_append(payload, result)
    if strategy == MergeStrategy.REPLACE:
        return result
    return payload
