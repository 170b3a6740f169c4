"""Code-unit loaders: find and load hook implementation callables."""

from __future__ import annotations

import importlib.util
import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol

from profilekit.errors import InvalidDeclarationError
from profilekit.models import ExtensionDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CODE_UNITS = ("install.py", "profile.py")


@dataclass(frozen=True)
class LoadedSymbol:
    callback: Callable[..., Any]
    source: str


class CodeLoader(Protocol):
    def lookup(self, descriptor: ExtensionDescriptor, symbol: str) -> LoadedSymbol | None: ...


class FileCodeLoader:
    """Import code units that live beside a profile's declaration.

    Units are tried in order and the first one defining the symbol wins.
    Imported modules are cached for the lifetime of the loader and are not
    registered in ``sys.modules``.
    """

    def __init__(self, code_units: tuple[str, ...] | list[str] = DEFAULT_CODE_UNITS) -> None:
        self.code_units = tuple(code_units)
        self._modules: dict[Path, ModuleType] = {}
        self._lock = threading.Lock()

    def _load_module(self, descriptor: ExtensionDescriptor, path: Path) -> ModuleType:
        with self._lock:
            module = self._modules.get(path)
            if module is not None:
                return module
            module_name = f"profilekit_units.{descriptor.name}.{path.stem}"
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise InvalidDeclarationError(f"Cannot import code unit {path}")
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            self._modules[path] = module
            logger.debug("Imported code unit %s for %s", path, descriptor.name)
            return module

    def lookup(self, descriptor: ExtensionDescriptor, symbol: str) -> LoadedSymbol | None:
        if not descriptor.path:
            return None
        base = Path(descriptor.path)
        for unit in self.code_units:
            path = base / unit
            if not path.is_file():
                continue
            module = self._load_module(descriptor, path)
            callback = getattr(module, symbol, None)
            if callable(callback):
                return LoadedSymbol(callback=callback, source=str(path))
        return None


class ObjectCodeLoader:
    """Resolve symbols on host-supplied objects, keyed by profile name.

    Units may be modules, classes, instances or plain mappings of name to
    callable.
    """

    def __init__(self, units: Mapping[str, Any] | None = None) -> None:
        self._units: dict[str, Any] = dict(units or {})

    def register(self, name: str, unit: Any) -> None:
        self._units[name] = unit

    def lookup(self, descriptor: ExtensionDescriptor, symbol: str) -> LoadedSymbol | None:
        unit = self._units.get(descriptor.name)
        if unit is None:
            return None
        if isinstance(unit, Mapping):
            callback = unit.get(symbol)
        else:
            callback = getattr(unit, symbol, None)
        if not callable(callback):
            return None
        source = getattr(unit, "__file__", None) or f"<{descriptor.name}>"
        return LoadedSymbol(callback=callback, source=str(source))
