"""Configuration models and validation (source of truth).

The injector consumes one configuration mapping per registration pass. It is
validated here, before any pattern is expanded or any file loaded, and
converted to :class:`InjectionConfig`.

Shape
-----
::

    {
        "relative_to": str,          # alias "relativeTo"; see search_root()
        "apps":     [InjectionGroup, ...],
        "binds":    [InjectionGroup, ...],
        "methods":  [InjectionGroup, ...],
        "handlers": [InjectionGroup, ...],
        "routes":   [InjectionGroup, ...],
    }

``InjectionGroup``
    ``prefix`` (optional string, methods only), ``includes`` (required,
    non-empty list of pattern strings, mappings, callables or any object),
    ``ignores`` (list of pattern strings, default empty) and ``options``
    (optional :class:`MergeOptions`).

``MergeOptions``
    ``bind``, ``cache`` (dict), ``generate_key`` (alias ``generateKey``,
    callable), ``callback`` (bool) plus the control flags ``override`` and
    ``merge``. Unknown keys are rejected. :meth:`MergeOptions.as_dict` only
    returns keys that were explicitly set, spelled as in the configuration
    (``generateKey``) so they line up with item options. An unset flag never
    masks an item-level value during merging.

Validation errors
-----------------
``validate_config`` accepts a mapping or an ``InjectionConfig`` instance. A
pydantic ``ValidationError`` is re-raised as ``ConfigValidationError`` with
the pydantic error kept as ``__cause__`` and its ``errors()`` list on ``.errors``.
Include entries are typed ``Any`` so objects pass through by identity.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from smartinject.errors import ConfigValidationError

__all__ = [
    "InjectionConfig",
    "InjectionGroup",
    "MergeOptions",
    "PHASE_NAMES",
    "validate_config",
]

PHASE_NAMES = ("apps", "binds", "methods", "handlers", "routes")

_MODEL_CONFIG = ConfigDict(
    extra="forbid",
    populate_by_name=True,
    arbitrary_types_allowed=True,
)


class MergeOptions(BaseModel):
    """Group-level default options for method registrations."""

    model_config = _MODEL_CONFIG

    bind: Optional[Any] = None
    cache: Optional[Dict[str, Any]] = None
    generate_key: Optional[Callable[..., Any]] = Field(default=None, alias="generateKey")
    callback: Optional[bool] = None
    override: bool = False
    merge: bool = False

    def as_dict(self) -> Dict[str, Any]:
        """Explicitly set options keyed by their configuration spelling."""
        fields = type(self).model_fields
        return {
            fields[name].alias or name: getattr(self, name) for name in self.model_fields_set
        }


class InjectionGroup(BaseModel):
    """One configured bundle of includes/ignores/options for a phase."""

    model_config = _MODEL_CONFIG

    prefix: Optional[str] = None
    includes: List[Any] = Field(min_length=1)
    ignores: List[str] = Field(default_factory=list)
    options: Optional[MergeOptions] = None

    def option_dict(self) -> Optional[Dict[str, Any]]:
        if self.options is None:
            return None
        return self.options.as_dict()


class InjectionConfig(BaseModel):
    """Validated registration pass configuration."""

    model_config = _MODEL_CONFIG

    relative_to: Optional[str] = Field(default=None, alias="relativeTo")
    apps: List[InjectionGroup] = Field(default_factory=list)
    binds: List[InjectionGroup] = Field(default_factory=list)
    methods: List[InjectionGroup] = Field(default_factory=list)
    handlers: List[InjectionGroup] = Field(default_factory=list)
    routes: List[InjectionGroup] = Field(default_factory=list)

    def search_root(self, fallback: Optional[str] = None) -> str:
        """Directory patterns resolve against: ``relative_to``, ``fallback``, cwd."""
        return self.relative_to or fallback or os.getcwd()

    def groups(self, phase: str) -> List[InjectionGroup]:
        if phase not in PHASE_NAMES:
            raise KeyError(f"Unknown phase: {phase!r}")
        return getattr(self, phase)


def validate_config(config: Union[InjectionConfig, Mapping[str, Any], None]) -> InjectionConfig:
    """Validate ``config`` and return it as an :class:`InjectionConfig`."""
    if isinstance(config, InjectionConfig):
        return config
    if config is None:
        config = {}
    if not isinstance(config, Mapping):
        raise ConfigValidationError(
            f"Configuration must be a mapping, got {type(config).__name__}"
        )
    try:
        return InjectionConfig.model_validate(dict(config))
    except ValidationError as exc:
        raise ConfigValidationError(
            f"Invalid injection configuration: {exc}", errors=exc.errors()
        ) from exc
