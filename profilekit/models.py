"""Core Pydantic domain models for profilekit."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from profilekit.errors import ImplementationError


class ExtensionDescriptor(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    path: str | None = None
    description: str = ""
    version: str | None = None
    dependencies: tuple[str, ...] = ()
    remove_dependencies: tuple[str, ...] = ()
    profiles: tuple[str, ...] = ()


class ExtensionGraph(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    root: str
    extensions: tuple[str, ...]
    dependencies: tuple[str, ...] = ()
    removals: tuple[str, ...] = ()
    descriptors: dict[str, ExtensionDescriptor] = Field(default_factory=dict)

    def descriptor(self, name: str) -> ExtensionDescriptor:
        return self.descriptors[name]

    @property
    def dependency_set(self) -> frozenset[str]:
        return frozenset(self.dependencies)

    @property
    def removal_set(self) -> frozenset[str]:
        return frozenset(self.removals)


class HookImplementation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    hook: str
    extension: str
    function: str
    source: str = ""

    @property
    def identity(self) -> str:
        return self.function


class InvocationRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hook: str
    key: str
    extension: str
    function: str
    invoked: bool = False


class ImplementationFailure(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hook: str
    key: str
    extension: str
    function: str
    error_type: str
    message: str = ""


class ReentrantLoopPrevented(BaseModel):
    """A skip caused by a nested dispatch for a (hook, key) already in progress."""

    model_config = ConfigDict(extra="forbid")

    hook: str
    key: str
    extension: str
    function: str
    depth: int = 1


class DispatchResult(BaseModel):
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    hook: str
    key: str
    payload: Any = None
    invoked: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failures: list[ImplementationFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise ImplementationError(self.failures)
