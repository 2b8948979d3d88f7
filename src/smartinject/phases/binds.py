"""Binds phase: helper context bound into the host.

Naming follows the apps phase. Entries are only collected into
``result.binds``; the host's ``bind_context`` sink is called exactly once,
from ``finish``, and only when at least one entry was collected.
"""

from __future__ import annotations

from typing import Any, List

from smartinject.core.injector import Injector
from smartinject.phases._base_phase import BasePhase, Registration


class BindsPhase(BasePhase):
    """Collect bind values and flush them once."""

    phase_code = "binds"
    phase_description = "Bound helper context"

    def commit(self, group: Any, registrations: List[Registration], result: Any) -> None:
        for registration in registrations:
            result.binds[registration.key] = registration.value

    def finish(self, result: Any) -> None:
        if result.binds:
            self._host.bind_context(dict(result.binds))


Injector.register_phase(BindsPhase)
