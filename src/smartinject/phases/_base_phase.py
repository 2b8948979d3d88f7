"""Phase contract used by the Injector runtime.

Source of truth
---------------
If this module were wiped except for this docstring, the implementation must be
reconstructed exactly as described below.

Objects
~~~~~~~
``Registration``
    Dataclass buffering one pending sink call. Fields:

    - ``name`` – base name (may be ``None`` for fanned-out inline mappings)
    - ``value`` – value handed to the sink
    - ``sub_key`` – collection key when the source was a mapping
    - ``options`` – effective options (methods phase only)

    ``key`` is the flat registry key: ``sub_key`` when set, else ``name``.

``BasePhase``
    Base class every phase subclasses. Required class attributes:

    - ``phase_code`` – configuration key of the phase (e.g. ``"apps"``)
    - ``phase_description`` – human-readable description

    Constructor signature: ``BasePhase(host, *, logger=None)``.

    ``collect(group, resolved)``
        Pure: turn one ``ResolvedModule`` into an ordered list of
        ``Registration`` records. Runs concurrently with other items; must not
        touch the host or the result. Naming failures raise here.

    ``check(batches)`` (default no-op)
        Called with every ``(group, registrations)`` batch of the phase once
        all items resolved and before the first commit. Conflicts the host
        could not accept raise here, so a rejected phase writes nothing.

    ``commit(group, registrations, result)``
        Called in declaration order after every item of the phase resolved:
        performs the sink calls and updates the ``PipelineResult``.

    ``finish(result)`` (default no-op)
        Called once after the last commit of the phase.

Design constraints
~~~~~~~~~~~~~~~~~~
* The Injector only imports this module (not the concrete phases) to avoid
  circular dependencies; concrete phases self-register on import.
* Phases hold no state between runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from smartinject.core.items import ResolvedModule, named_modules

__all__ = ["BasePhase", "Registration"]


@dataclass
class Registration:
    """One buffered sink call."""

    name: Optional[str]
    value: Any
    sub_key: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> Optional[str]:
        return self.sub_key if self.sub_key is not None else self.name


class BasePhase:
    """Hook interface for one registration phase."""

    __slots__ = ("name", "_host", "_logger")

    # Subclasses MUST define these class attributes
    phase_code: str = ""
    phase_description: str = ""

    def __init__(self, host: Any, *, logger: Optional[logging.Logger] = None):
        self.name = self.phase_code
        self._host = host
        self._logger = logger or logging.getLogger("smartinject")

    def collect(self, group: Any, resolved: ResolvedModule) -> List[Registration]:
        """Default: one registration per named module (mappings fan out)."""
        return [
            Registration(name=module.name, value=module.value, sub_key=module.sub_key)
            for module in named_modules(resolved)
        ]

    def check(self, batches: List[Tuple[Any, List[Registration]]]) -> None:
        """Hook run before the first commit with every pending batch."""

    def commit(
        self, group: Any, registrations: List[Registration], result: Any
    ) -> None:  # pragma: no cover - overridden by every phase
        raise NotImplementedError

    def finish(self, result: Any) -> None:
        """Hook run once after the phase's last commit."""
