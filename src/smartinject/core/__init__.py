"""Core runtime aggregator (source of truth).

Purpose: expose the runtime building blocks from a single module:
``Injector``, ``inject``, ``PipelineResult``, ``MethodsRegistry``,
``merge_options``, ``PatternResolver``, ``ModuleResolver``, ``ModuleLoader``
and the configuration models. No extra logic beyond imports/exports.

Guarantees
----------
- Importing this module performs only imports; it does not register phases or
  touch the filesystem.
- Public API mirrors underlying modules 1:1:
  * ``config`` → ``InjectionConfig``, ``InjectionGroup``, ``MergeOptions``,
    ``validate_config``
  * ``patterns`` → ``PatternResolver``, ``expand_pattern``
  * ``loader`` → ``ModuleLoader``
  * ``items`` → ``ModuleResolver``
  * ``options`` → ``merge_options``
  * ``registry`` → ``PipelineResult``, ``MethodsRegistry``
  * ``injector`` → ``Injector``, ``inject``
"""

from .config import InjectionConfig, InjectionGroup, MergeOptions, validate_config
from .injector import Injector, inject
from .items import ModuleResolver
from .loader import ModuleLoader
from .options import merge_options
from .patterns import PatternResolver, expand_pattern
from .registry import MethodsRegistry, PipelineResult

__all__ = [
    "InjectionConfig",
    "InjectionGroup",
    "Injector",
    "MergeOptions",
    "MethodsRegistry",
    "ModuleLoader",
    "ModuleResolver",
    "PatternResolver",
    "PipelineResult",
    "expand_pattern",
    "inject",
    "merge_options",
    "validate_config",
]
