"""Per-run registration results (source of truth).

``PipelineResult`` is returned by every registration pass and owned by the
caller; nothing is kept in module globals. It mirrors what the host sinks
received:

- ``apps`` / ``binds``: flat ``name → value`` dicts;
- ``handlers``: flat ``name → factory`` dict;
- ``routes``: route descriptors in registration order;
- ``methods``: a :class:`MethodsRegistry`.

Methods tree
------------
Three levels, each owning the next:

``PrefixNode(prefix)`` (``prefix`` may be ``None`` for unprefixed groups)
  → ``MethodNode(name)``
  → either a direct ``value`` or ``members`` (``sub_key → value``).

A ``MethodNode`` is built completely for one resolved file before it is
attached with ``MethodsRegistry.attach``, which replaces any node already
stored under the same prefix/name. ``as_dict()`` renders the nested mapping
view where unprefixed nodes sit at the top level next to prefix mappings;
``get("math.util.add")`` looks values up by dotted name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

__all__ = ["MethodNode", "MethodsRegistry", "PipelineResult", "PrefixNode", "dotted_name"]

_MISSING = object()


def dotted_name(prefix: Optional[str], name: str, sub_key: Optional[str] = None) -> str:
    return ".".join(part for part in (prefix, name, sub_key) if part)


@dataclass
class MethodNode:
    name: str
    value: Any = _MISSING
    members: Dict[str, Any] = field(default_factory=dict)

    def set_member(self, sub_key: Optional[str], value: Any) -> None:
        if sub_key is None:
            self.value = value
        else:
            self.members[sub_key] = value

    @property
    def has_value(self) -> bool:
        return self.value is not _MISSING

    def render(self) -> Any:
        if self.has_value and not self.members:
            return self.value
        return dict(self.members)

    def lookup(self, sub_key: Optional[str]) -> Any:
        if sub_key is None:
            if self.has_value:
                return self.value
            raise KeyError(self.name)
        return self.members[sub_key]


@dataclass
class PrefixNode:
    prefix: Optional[str]
    nodes: Dict[str, MethodNode] = field(default_factory=dict)

    def render(self) -> Dict[str, Any]:
        return {name: node.render() for name, node in self.nodes.items()}


class MethodsRegistry:
    """Prefix → base name → sub key tree of registered methods."""

    def __init__(self) -> None:
        self._prefixes: Dict[Optional[str], PrefixNode] = {}

    def attach(self, prefix: Optional[str], node: MethodNode) -> None:
        bucket = self._prefixes.get(prefix)
        if bucket is None:
            bucket = PrefixNode(prefix)
            self._prefixes[prefix] = bucket
        bucket.nodes[node.name] = node

    def prefixes(self) -> Tuple[Optional[str], ...]:
        return tuple(self._prefixes)

    def node(self, prefix: Optional[str], name: str) -> MethodNode:
        return self._prefixes[prefix].nodes[name]

    def get(self, dotted: str) -> Any:
        """Return the value registered under ``dotted`` or raise ``KeyError``."""
        parts = dotted.split(".")
        attempts: List[Tuple[Optional[str], str, Optional[str]]] = []
        if len(parts) == 1:
            attempts.append((None, parts[0], None))
        elif len(parts) == 2:
            attempts.append((parts[0], parts[1], None))
            attempts.append((None, parts[0], parts[1]))
        elif len(parts) == 3:
            attempts.append((parts[0], parts[1], parts[2]))
        for prefix, name, sub_key in attempts:
            try:
                return self.node(prefix, name).lookup(sub_key)
            except KeyError:
                continue
        raise KeyError(dotted)

    def names(self) -> List[str]:
        """Dotted names of every registered method, in registration order."""
        found: List[str] = []
        for prefix, bucket in self._prefixes.items():
            for name, node in bucket.nodes.items():
                if node.has_value:
                    found.append(dotted_name(prefix, name))
                for sub_key in node.members:
                    found.append(dotted_name(prefix, name, sub_key))
        return found

    def as_dict(self) -> Dict[str, Any]:
        tree: Dict[str, Any] = {}
        for prefix, bucket in self._prefixes.items():
            if prefix is None:
                tree.update(bucket.render())
            else:
                tree[prefix] = bucket.render()
        return tree

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self.names())

    def __contains__(self, dotted: object) -> bool:
        if not isinstance(dotted, str):
            return False
        try:
            self.get(dotted)
        except KeyError:
            return False
        return True


@dataclass
class PipelineResult:
    """Everything one registration pass handed to the host."""

    apps: Dict[str, Any] = field(default_factory=dict)
    binds: Dict[str, Any] = field(default_factory=dict)
    methods: MethodsRegistry = field(default_factory=MethodsRegistry)
    handlers: Dict[str, Any] = field(default_factory=dict)
    routes: List[Any] = field(default_factory=list)

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view, convenient for comparing two runs."""
        return {
            "apps": dict(self.apps),
            "binds": dict(self.binds),
            "methods": self.methods.as_dict(),
            "handlers": dict(self.handlers),
            "routes": list(self.routes),
        }
