"""Compose install profiles from included profiles and dispatch their hooks once per context."""

from profilekit.catalog import HookCatalog
from profilekit.discovery import FilesystemDeclarationSource, InMemoryDeclarationSource
from profilekit.dispatch import DispatchEngine
from profilekit.errors import (
    ImplementationError,
    InvalidContextError,
    InvalidDeclarationError,
    NotFoundError,
    ProfileKitError,
)
from profilekit.graph import GraphResolver
from profilekit.hooks import HookName
from profilekit.installer import ProfileInstaller
from profilekit.keys import NO_CONTEXT_KEY, context_key
from profilekit.loader import FileCodeLoader, ObjectCodeLoader
from profilekit.observer import ProfileSubject, Subprofile
from profilekit.tracker import InvocationTracker

__version__ = "0.1.0"

__all__ = [
    "NO_CONTEXT_KEY",
    "DispatchEngine",
    "FileCodeLoader",
    "FilesystemDeclarationSource",
    "GraphResolver",
    "HookCatalog",
    "HookName",
    "ImplementationError",
    "InMemoryDeclarationSource",
    "InvalidContextError",
    "InvalidDeclarationError",
    "InvocationTracker",
    "NotFoundError",
    "ObjectCodeLoader",
    "ProfileInstaller",
    "ProfileKitError",
    "ProfileSubject",
    "Subprofile",
    "context_key",
]
