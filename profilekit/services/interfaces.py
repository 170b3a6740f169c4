"""Service interfaces used by command/runtime orchestration."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from profilekit.discovery import DeclarationSource
from profilekit.loader import CodeLoader


class DeclarationSourceFactory(Protocol):
    def __call__(
        self,
        project_dir: str | Path,
        *,
        base: str | None = None,
        search_paths: tuple[str, ...] | list[str] = ...,
        info_suffix: str = ...,
    ) -> DeclarationSource: ...


class CodeLoaderFactory(Protocol):
    def __call__(self, code_units: tuple[str, ...] | list[str] = ...) -> CodeLoader: ...
