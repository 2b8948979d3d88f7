"""SmartInject public API surface (source of truth).

Recreate the module with these rules:
- Public exports: ``Injector``, ``inject``, ``MemoryHost``, ``PipelineResult``,
  ``merge_options`` and the error classes.
- Phase registration: import built-in phases (``apps``, ``binds``,
  ``methods``, ``handlers``, ``routes``) for their side effect of calling
  ``Injector.register_phase(<class>)``. Imports are done lazily via
  ``import_module`` to avoid cycles.

Constraints
-----------
- Import must stay lightweight: no injector instantiation or filesystem work
  beyond phase registration.
- Version string lives here as ``__version__`` and must remain available for
  packaging tools.
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import Injector, PipelineResult, inject, merge_options
from .errors import (
    ConfigValidationError,
    InjectionError,
    LoadError,
    NamingError,
    PatternResolutionError,
)
from .host import MemoryHost

# Import phases to trigger auto-registration (lazy to avoid cycles)
for _phase in ("apps", "binds", "methods", "handlers", "routes"):
    import_module(f"{__name__}.phases.{_phase}")
del _phase

__all__ = [
    "ConfigValidationError",
    "InjectionError",
    "Injector",
    "LoadError",
    "MemoryHost",
    "NamingError",
    "PatternResolutionError",
    "PipelineResult",
    "inject",
    "merge_options",
]
