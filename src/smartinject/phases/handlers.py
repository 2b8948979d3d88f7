"""Handlers phase: named handler factories.

Each resolved item is registered once under its base name through
``host.register_handler(name, factory)``; mappings are not fanned out and no
options are merged.
"""

from __future__ import annotations

from typing import Any, List

from smartinject.core.injector import Injector
from smartinject.core.items import ResolvedModule, derive_name, raw_value
from smartinject.phases._base_phase import BasePhase, Registration


class HandlersPhase(BasePhase):
    """Register handler factories by name."""

    phase_code = "handlers"
    phase_description = "Named request handler factories"

    def collect(self, group: Any, resolved: ResolvedModule) -> List[Registration]:
        name = derive_name(resolved.item, resolved.base_name)
        return [Registration(name=name, value=raw_value(resolved.item))]

    def commit(self, group: Any, registrations: List[Registration], result: Any) -> None:
        for registration in registrations:
            self._host.register_handler(registration.name, registration.value)
            result.handlers[registration.name] = registration.value


Injector.register_phase(HandlersPhase)
