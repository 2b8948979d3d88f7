"""Error taxonomy for SmartInject.

Every failure raised by the injector derives from :class:`InjectionError`, and
each concrete class also inherits the builtin exception it most resembles so
callers can catch either. Exceptions raised by user module code while loading
are not wrapped: they reach the caller unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

__all__ = [
    "InjectionError",
    "ConfigValidationError",
    "PatternResolutionError",
    "NamingError",
    "LoadError",
]


class InjectionError(Exception):
    """Base class for all SmartInject errors."""


class ConfigValidationError(InjectionError, ValueError):
    """Configuration failed shape validation; nothing was registered."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class PatternResolutionError(InjectionError, LookupError):
    """A pattern matched no files, or could not be expanded at all."""

    def __init__(self, message: str, pattern: Optional[str] = None):
        super().__init__(message)
        self.pattern = pattern


class NamingError(InjectionError, ValueError):
    """A registration name could not be derived for an item."""


class LoadError(InjectionError):
    """The loader could not locate or interpret a referenced file."""
