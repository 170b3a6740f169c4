"""Declaration sources: locate profiles and parse their ``.info.yml`` files."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import ValidationError

from profilekit.errors import InvalidDeclarationError, NotFoundError
from profilekit.models import ExtensionDescriptor

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_PATHS = (
    "profiles/{name}",
    "profiles/{base}/subprofiles/{name}",
    "profiles/subprofiles/{name}",
)
DEFAULT_INFO_SUFFIX = ".info.yml"


class DeclarationSource(Protocol):
    def exists(self, name: str) -> bool: ...

    def load(self, name: str) -> ExtensionDescriptor: ...


def parse_declaration(name: str, data: Any, *, path: str | None = None) -> ExtensionDescriptor:
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise InvalidDeclarationError(f"Declaration for {name} must decode to a mapping")

    fields = dict(data)
    declared = fields.pop("name", None)
    if declared is not None and declared != name:
        raise InvalidDeclarationError(f"Declaration for {name} names itself {declared!r}")
    for key in ("dependencies", "remove_dependencies", "profiles"):
        value = fields.get(key)
        if value is None:
            fields.pop(key, None)
        elif isinstance(value, str):
            raise InvalidDeclarationError(f"{name}: '{key}' must be a list, not a string")
    try:
        return ExtensionDescriptor.model_validate({**fields, "name": name, "path": path})
    except ValidationError as exc:
        raise InvalidDeclarationError(f"Invalid declaration for {name}: {exc}") from exc


class FilesystemDeclarationSource:
    """Find ``<dir>/<name>.info.yml`` under a project directory.

    Search templates may use ``{name}`` (the profile being looked up) and
    ``{base}`` (the base profile being installed).
    """

    def __init__(
        self,
        project_dir: str | Path,
        *,
        base: str | None = None,
        search_paths: tuple[str, ...] | list[str] = DEFAULT_SEARCH_PATHS,
        info_suffix: str = DEFAULT_INFO_SUFFIX,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.base = base
        self.search_paths = tuple(search_paths)
        self.info_suffix = info_suffix
        self._cache: dict[str, ExtensionDescriptor] = {}

    def _candidates(self, name: str) -> list[Path]:
        candidates: list[Path] = []
        for template in self.search_paths:
            if "{base}" in template and not self.base:
                continue
            directory = self.project_dir / template.format(name=name, base=self.base or "")
            candidates.append(directory / f"{name}{self.info_suffix}")
        return candidates

    def find(self, name: str) -> Path | None:
        for candidate in self._candidates(name):
            if candidate.is_file():
                return candidate
        return None

    def exists(self, name: str) -> bool:
        return name in self._cache or self.find(name) is not None

    def load(self, name: str) -> ExtensionDescriptor:
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        info_file = self.find(name)
        if info_file is None:
            raise NotFoundError(name, [str(path) for path in self._candidates(name)])

        try:
            data = yaml.safe_load(info_file.read_text())
        except yaml.YAMLError as exc:
            raise InvalidDeclarationError(f"Could not parse {info_file}: {exc}") from exc

        descriptor = parse_declaration(name, data, path=str(info_file.parent))
        self._cache[name] = descriptor
        logger.debug("Loaded declaration for %s from %s", name, info_file)
        return descriptor


class InMemoryDeclarationSource:
    """Declarations supplied directly by the host, keyed by profile name."""

    def __init__(self, declarations: Mapping[str, ExtensionDescriptor | Mapping[str, Any]] | None = None) -> None:
        self._descriptors: dict[str, ExtensionDescriptor] = {}
        for name, declaration in (declarations or {}).items():
            self.add(name, declaration)

    def add(self, name: str, declaration: ExtensionDescriptor | Mapping[str, Any]) -> ExtensionDescriptor:
        if isinstance(declaration, ExtensionDescriptor):
            if declaration.name != name:
                raise InvalidDeclarationError(f"Descriptor {declaration.name!r} registered as {name!r}")
            descriptor = declaration
        else:
            descriptor = parse_declaration(name, declaration)
        self._descriptors[name] = descriptor
        return descriptor

    def exists(self, name: str) -> bool:
        return name in self._descriptors

    def load(self, name: str) -> ExtensionDescriptor:
        try:
            return self._descriptors[name]
        except KeyError:
            raise NotFoundError(name) from None
