"""In-memory reference host (source of truth).

``MemoryHost`` implements the five sinks the Injector calls into and keeps
everything it receives in plain containers, the way a web framework's server
object would:

- ``app``: dict filled by ``set_app_value(name, value)``;
- ``context``: dict updated by ``bind_context(mapping)``; ``bind_calls``
  counts how many times it was called;
- ``methods``: nested namespace dict filled by
  ``register_method(dotted, fn, options)``; each dotted segment is one level
  (``"math.util.add"`` → ``methods["math"]["util"]["add"]``).
  ``method_entries`` maps the dotted name to a :class:`MethodEntry` that also
  keeps the options; ``get_method(dotted)`` walks the namespace;
- ``handlers``: dict filled by ``register_handler(name, factory)``;
- ``routes``: list extended by ``register_route(descriptor)`` (a list or
  tuple of descriptors is registered element by element).

Collisions
----------
Registering a method or handler name again replaces the earlier value, so the
last registration wins. A host built with ``replace=False`` raises
``ValueError`` on such a repeat instead. A dotted method name whose parent
segment is already a method (or vice versa) always raises ``ValueError``.

Every registration is logged at DEBUG on the ``smartinject.host`` logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

__all__ = ["MemoryHost", "MethodEntry"]


@dataclass
class MethodEntry:
    """Metadata for a registered method."""

    name: str
    func: Callable
    options: Dict[str, Any] = field(default_factory=dict)


class MemoryHost:
    """Registration sinks backed by dictionaries and lists."""

    def __init__(self, *, replace: bool = True, logger: Optional[logging.Logger] = None) -> None:
        self.replace = bool(replace)
        self.app: Dict[str, Any] = {}
        self.context: Dict[str, Any] = {}
        self.bind_calls = 0
        self.methods: Dict[str, Any] = {}
        self.method_entries: Dict[str, MethodEntry] = {}
        self.handlers: Dict[str, Any] = {}
        self.routes: List[Any] = []
        self._logger = logger or logging.getLogger("smartinject.host")

    # ------------------------------------------------------------------
    # Sinks
    # ------------------------------------------------------------------
    def set_app_value(self, name: str, value: Any) -> None:
        self.app[name] = value
        self._logger.debug("app %s registered", name)

    def bind_context(self, mapping: Mapping[str, Any]) -> None:
        self.context.update(mapping)
        self.bind_calls += 1
        self._logger.debug("context bound: %s", ", ".join(mapping))

    def register_method(
        self, name: str, func: Callable, options: Optional[Dict[str, Any]] = None
    ) -> Callable:
        if not callable(func):
            raise TypeError(f"Method {name!r} must be callable, got {type(func).__name__}")
        if name in self.method_entries and not self.replace:
            raise ValueError(f"Method name collision: {name}")
        *parents, leaf = name.split(".")
        node = self.methods
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ValueError(f"Method namespace collision at {segment!r} in {name!r}")
            node = child
        if isinstance(node.get(leaf), dict):
            raise ValueError(f"Method namespace collision: {name!r} is a namespace")
        node[leaf] = func
        self.method_entries[name] = MethodEntry(name=name, func=func, options=dict(options or {}))
        self._logger.debug("method %s registered", name)
        return func

    def register_handler(self, name: str, factory: Any) -> None:
        if name in self.handlers and not self.replace:
            raise ValueError(f"Handler name collision: {name}")
        self.handlers[name] = factory
        self._logger.debug("handler %s registered", name)

    def register_route(self, descriptor: Any) -> None:
        if isinstance(descriptor, (list, tuple)):
            for single in descriptor:
                self.register_route(single)
            return
        self.routes.append(descriptor)
        self._logger.debug("route registered: %r", descriptor)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get_method(self, name: str) -> Callable:
        """Return the method registered under ``name``; raise ``KeyError`` if missing."""
        node: Any = self.methods
        for segment in name.split("."):
            if not isinstance(node, dict) or segment not in node:
                raise KeyError(name)
            node = node[segment]
        if isinstance(node, dict):
            raise KeyError(name)
        return node

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Fetch and invoke a method in one step."""
        return self.get_method(name)(*args, **kwargs)
