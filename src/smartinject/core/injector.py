"""Registration pass orchestrator (source of truth).

If this module disappeared, rebuild it exactly as described. ``Injector``
validates a configuration, then runs the five registration phases against a
host and returns a fresh ``PipelineResult``.

Constructor
-----------
::

    Injector(host, *, relative_to=None, loader=None, expander=None,
             logger=None, **defaults)

- ``host`` is required; ``None`` raises ``ValueError``. It must expose the
  sinks ``set_app_value``, ``bind_context``, ``register_method``,
  ``register_handler`` and ``register_route``.
- ``relative_to``: search root used when the configuration gives none; the
  final fallback is ``os.getcwd()``.
- ``loader``: object with ``load(reference)``; by default one
  ``ModuleLoader`` per search root, kept for the injector's lifetime so that
  repeated passes see the same loaded values.
- ``expander``: pattern expansion primitive (default ``expand_pattern``).
- ``defaults``: run options merged under per-call options via
  ``SmartOptions``. Recognized: ``allow_empty`` (log zero-match patterns as
  warnings instead of failing).

Global phase registry
---------------------
``Injector.register_phase(phase_class, name=None)`` validates that
``phase_class`` is a ``BasePhase`` subclass with a ``phase_code``.
Re-registering a code with a different class raises ``ValueError`` unless
``name`` is given explicitly (intentional replacement).
``available_phases`` returns a shallow copy of the registry. Concrete phases
register themselves when ``smartinject.phases.<code>`` is imported.

Registration pass
-----------------
``await inject(config, **options)``:

1. ``validate_config`` (raises ``ConfigValidationError`` before any I/O).
2. For each code in ``PHASE_ORDER`` (apps, binds, methods, handlers, routes)
   with at least one group: run the phase.
3. Return the ``PipelineResult``.

Running a phase:

- resolve every group concurrently; inside a group, expand patterns then
  resolve every item concurrently into ``Registration`` buffers;
- fan-in waits with ``FIRST_EXCEPTION``; on failure pending siblings are
  cancelled and drained, then the failure of the earliest-declared failed
  task is raised. Nothing of the failing phase has been committed;
- ``phase.check(batches)`` sees every buffered batch before the first sink
  call and may reject the phase, which then also commits nothing;
- otherwise commit buffers in declaration order (group, then item), then
  call ``phase.finish``.

Phases log ``"<phase> start"`` / ``"<phase> end (<ms> ms)"`` at DEBUG on the
``smartinject`` logger. ``run(config, **options)`` drives ``inject`` with
``asyncio.run`` for synchronous callers.

Invariants
----------
- Phases never overlap; a failed phase stops the pass.
- Registries are last-declared-wins within a phase.
- Earlier phases stay committed when a later phase fails.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Sequence, Type, Union

from smartseeds import SmartOptions

from smartinject.core.config import PHASE_NAMES, InjectionConfig, InjectionGroup, validate_config
from smartinject.core.items import ModuleResolver
from smartinject.core.loader import ModuleLoader
from smartinject.core.patterns import Expander, PatternResolver
from smartinject.core.registry import PipelineResult
from smartinject.phases._base_phase import BasePhase, Registration

__all__ = ["Injector", "PHASE_ORDER", "gather_first_error", "inject"]

PHASE_ORDER = PHASE_NAMES

HOST_SINKS = (
    "set_app_value",
    "bind_context",
    "register_method",
    "register_handler",
    "register_route",
)

_PHASE_REGISTRY: Dict[str, Type[BasePhase]] = {}


async def gather_first_error(awaitables: Sequence[Awaitable[Any]]) -> List[Any]:
    """Await ``awaitables`` concurrently; results keep the input order.

    On the first failure the still-pending tasks are cancelled and drained
    before the error of the earliest failed task (by position) is raised.
    """
    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    if not tasks:
        return []
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    if any(not task.cancelled() and task.exception() is not None for task in done):
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        failed = [
            task for task in tasks if not task.cancelled() and task.exception() is not None
        ]
        raise failed[0].exception()
    return [task.result() for task in tasks]


class Injector:
    """Run declarative registration passes against a host."""

    __slots__ = ("host", "relative_to", "_loader", "_loaders", "_expander", "_logger", "_run_defaults")

    def __init__(
        self,
        host: Any,
        *,
        relative_to: Optional[str] = None,
        loader: Optional[Any] = None,
        expander: Optional[Expander] = None,
        logger: Optional[logging.Logger] = None,
        **defaults: Any,
    ) -> None:
        if host is None:
            raise ValueError("Injector requires a host")
        missing = [sink for sink in HOST_SINKS if not callable(getattr(host, sink, None))]
        if missing:
            raise TypeError(f"Host {host!r} is missing sinks: {', '.join(missing)}")
        self.host = host
        self.relative_to = relative_to
        self._loader = loader
        self._loaders: Dict[str, ModuleLoader] = {}
        self._expander = expander
        self._logger = logger or logging.getLogger("smartinject")
        self._run_defaults: Dict[str, Any] = dict(defaults)

    # ------------------------------------------------------------------
    # Phase registration
    # ------------------------------------------------------------------
    @classmethod
    def register_phase(cls, phase_class: Type[BasePhase], name: Optional[str] = None) -> None:
        """Register a phase class globally.

        Args:
            phase_class: A BasePhase subclass with phase_code defined
            name: Optional override code. If provided, overwrites any existing
                  registration. If not provided, uses phase_code and raises
                  if already registered with another class.
        """
        if not isinstance(phase_class, type) or not issubclass(phase_class, BasePhase):
            raise TypeError("phase_class must be a BasePhase subclass")
        if not getattr(phase_class, "phase_code", None):
            raise ValueError(
                f"Phase {phase_class.__name__} not following standards: missing phase_code"
            )
        code = name or phase_class.phase_code
        if code not in PHASE_ORDER:
            raise ValueError(f"Unknown phase '{code}'. Known phases: {', '.join(PHASE_ORDER)}")
        if name is None:
            existing = _PHASE_REGISTRY.get(code)
            if existing is not None and existing is not phase_class:
                raise ValueError(f"Phase '{code}' already registered")
        _PHASE_REGISTRY[code] = phase_class

    @classmethod
    def available_phases(cls) -> Dict[str, Type[BasePhase]]:
        return dict(_PHASE_REGISTRY)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def inject(
        self, config: Union[InjectionConfig, Mapping[str, Any], None], **options: Any
    ) -> PipelineResult:
        """Run one registration pass and return what was registered."""
        validated = validate_config(config)
        opts = SmartOptions(options, defaults=self._run_defaults)
        allow_empty = bool(getattr(opts, "allow_empty", False))

        root = validated.search_root(self.relative_to)
        patterns = PatternResolver(
            root, expander=self._expander, allow_empty=allow_empty, logger=self._logger
        )
        modules = ModuleResolver(self._loader_for(root))
        result = PipelineResult()

        for code in PHASE_ORDER:
            groups = validated.groups(code)
            if not groups:
                continue
            phase = self._phase(code)
            await self._run_phase(phase, groups, patterns, modules, result)
        return result

    def run(self, config: Union[InjectionConfig, Mapping[str, Any], None], **options: Any) -> PipelineResult:
        """Synchronous wrapper around :meth:`inject`."""
        return asyncio.run(self.inject(config, **options))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _loader_for(self, root: str) -> Any:
        if self._loader is not None:
            return self._loader
        loader = self._loaders.get(root)
        if loader is None:
            loader = ModuleLoader(root)
            self._loaders[root] = loader
        return loader

    def _phase(self, code: str) -> BasePhase:
        phase_class = _PHASE_REGISTRY.get(code)
        if phase_class is None:
            available = ", ".join(sorted(_PHASE_REGISTRY)) or "none"
            raise ValueError(
                f"No phase registered for '{code}'. Available phases: {available}"
            )
        return phase_class(self.host, logger=self._logger)

    async def _run_phase(
        self,
        phase: BasePhase,
        groups: List[InjectionGroup],
        patterns: PatternResolver,
        modules: ModuleResolver,
        result: PipelineResult,
    ) -> None:
        self._logger.debug("%s start", phase.name)
        t0 = time.perf_counter()
        try:
            buffers = await gather_first_error(
                [self._resolve_group(phase, group, patterns, modules) for group in groups]
            )
            batches = [
                (group, registrations)
                for group, group_buffers in zip(groups, buffers)
                for registrations in group_buffers
            ]
            phase.check(batches)
        except Exception as exc:
            self._logger.debug("%s failed: %s", phase.name, exc)
            raise
        for group, registrations in batches:
            phase.commit(group, registrations, result)
        phase.finish(result)
        elapsed = (time.perf_counter() - t0) * 1000
        self._logger.debug("%s end (%.2f ms)", phase.name, elapsed)

    async def _resolve_group(
        self,
        phase: BasePhase,
        group: InjectionGroup,
        patterns: PatternResolver,
        modules: ModuleResolver,
    ) -> List[List[Registration]]:
        items = await patterns.resolve_async(group)
        return await gather_first_error(
            [self._resolve_item(phase, group, item, modules) for item in items]
        )

    async def _resolve_item(
        self, phase: BasePhase, group: InjectionGroup, item: Any, modules: ModuleResolver
    ) -> List[Registration]:
        resolved = modules.resolve(item)
        return phase.collect(group, resolved)


async def inject(
    host: Any, config: Union[InjectionConfig, Mapping[str, Any], None], **options: Any
) -> PipelineResult:
    """Run one registration pass with a throwaway :class:`Injector`."""
    return await Injector(host).inject(config, **options)
