"""Apps phase: shared application values.

Each callable or value is stored under its derived name; a mapping
contributes one entry per key, named by the key. Every entry lands in
``result.apps`` and is mirrored through ``host.set_app_value(name, value)``.
"""

from __future__ import annotations

from typing import Any, List

from smartinject.core.injector import Injector
from smartinject.phases._base_phase import BasePhase, Registration


class AppsPhase(BasePhase):
    """Register shared application state."""

    phase_code = "apps"
    phase_description = "Shared application values"

    def commit(self, group: Any, registrations: List[Registration], result: Any) -> None:
        for registration in registrations:
            self._host.set_app_value(registration.key, registration.value)
            result.apps[registration.key] = registration.value


Injector.register_phase(AppsPhase)
