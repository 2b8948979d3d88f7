"""Routes phase: route descriptors handed straight to the host route table."""

from __future__ import annotations

from typing import Any, List

from smartinject.core.injector import Injector
from smartinject.core.items import ResolvedModule, raw_value
from smartinject.phases._base_phase import BasePhase, Registration


class RoutesPhase(BasePhase):
    """Register route descriptors as resolved."""

    phase_code = "routes"
    phase_description = "Route table entries"

    def collect(self, group: Any, resolved: ResolvedModule) -> List[Registration]:
        return [Registration(name=resolved.base_name, value=raw_value(resolved.item))]

    def commit(self, group: Any, registrations: List[Registration], result: Any) -> None:
        for registration in registrations:
            self._host.register_route(registration.value)
            if isinstance(registration.value, (list, tuple)):
                result.routes.extend(registration.value)
            else:
                result.routes.append(registration.value)


Injector.register_phase(RoutesPhase)
