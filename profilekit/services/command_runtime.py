"""Typed command runtime dependency container."""

from __future__ import annotations

from dataclasses import dataclass

from profilekit.services.interfaces import CodeLoaderFactory, DeclarationSourceFactory


@dataclass(frozen=True)
class CommandRuntime:
    declaration_source_cls: DeclarationSourceFactory
    code_loader_cls: CodeLoaderFactory
