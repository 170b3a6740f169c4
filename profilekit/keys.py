"""Content keys for lifecycle contexts.

Two contexts are the same dispatch context when their canonical JSON
serialization is byte-identical: mapping keys are sorted, sets are ordered by
their own canonical form, and separators are compact. Empty contexts share a
fixed key so context-free hooks (``hook_install``) fire once per process.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Set
from enum import Enum
from typing import Any

from pydantic import BaseModel

from profilekit.errors import InvalidContextError

NO_CONTEXT_KEY = "no-context"

_SCALARS = (str, int, float, bool, type(None))


def _canonical_key(key: Any, path: str) -> str:
    if isinstance(key, Enum):
        key = key.value
    if not isinstance(key, _SCALARS):
        raise InvalidContextError(f"Unsupported mapping key {key!r} at {path or '<root>'}")
    return key if isinstance(key, str) else json.dumps(key)


def _canonicalize(value: Any, path: str, active: frozenset[int] = frozenset()) -> Any:
    if isinstance(value, BaseModel):
        return _canonicalize(value.model_dump(mode="json"), path, active)
    if isinstance(value, Enum):
        return _canonicalize(value.value, path, active)
    if isinstance(value, _SCALARS):
        return value
    if not isinstance(value, (Mapping, list, tuple, Set)):
        raise InvalidContextError(f"Context value of type {type(value).__name__} at {path or '<root>'} cannot be serialized")

    # containers on the current path; a repeat means the context refers to itself
    if id(value) in active:
        raise InvalidContextError(f"Context contains a reference cycle at {path or '<root>'}")
    active = active | {id(value)}

    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, item in value.items():
            text_key = _canonical_key(key, path)
            if text_key in out:
                raise InvalidContextError(f"Mapping key {key!r} collides with another key at {path or '<root>'}")
            out[text_key] = _canonicalize(item, f"{path}.{text_key}", active)
        return out
    if isinstance(value, (list, tuple)):
        return [_canonicalize(item, f"{path}[{index}]", active) for index, item in enumerate(value)]
    items = [_canonicalize(item, f"{path}{{}}", active) for item in value]
    return sorted(items, key=_dumps)


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def is_empty_context(context: Any) -> bool:
    if context is None:
        return True
    if isinstance(context, (Mapping, list, tuple, Set)) and not context:
        return True
    return False


def canonical_bytes(context: Any) -> bytes:
    try:
        return _dumps(_canonicalize(context, "")).encode("utf-8")
    except ValueError as exc:
        # json rejects NaN/Infinity with allow_nan=False
        raise InvalidContextError(f"Context cannot be serialized: {exc}") from exc
    except RecursionError as exc:
        raise InvalidContextError("Context is nested too deeply to serialize") from exc


def context_key(context: Any) -> str:
    if is_empty_context(context):
        return NO_CONTEXT_KEY
    return hashlib.sha256(canonical_bytes(context)).hexdigest()
