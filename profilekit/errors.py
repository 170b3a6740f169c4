"""Exception types raised by profilekit."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from profilekit.models import ImplementationFailure


class ProfileKitError(Exception):
    """Base class for profilekit errors."""


class NotFoundError(ProfileKitError, LookupError):
    def __init__(self, name: str, searched: list[str] | None = None) -> None:
        self.name = name
        self.searched = list(searched or [])
        message = f"Profile not found: {name}"
        if self.searched:
            message += f" (searched: {', '.join(self.searched)})"
        super().__init__(message)


class InvalidDeclarationError(ProfileKitError, ValueError):
    pass


class InvalidContextError(ProfileKitError, TypeError):
    pass


class ImplementationError(ProfileKitError):
    """Aggregate of every implementation that raised during one dispatch pass."""

    def __init__(self, failures: list[ImplementationFailure]) -> None:
        self.failures = list(failures)
        summary = "; ".join(f"{failure.function}: {failure.error_type}: {failure.message}" for failure in self.failures)
        super().__init__(f"{len(self.failures)} hook implementation(s) failed: {summary}")
