"""Item classification and naming (source of truth).

Every resolved item is classified exactly once into a tagged variant; the
phases dispatch on the variant and never probe runtime types again.

Variants
--------
``PathRef(reference)``
    A root-relative reference string still to be loaded. Only exists between
    pattern expansion and loading.
``CallableItem(fn)``
    A callable that is not a mapping.
``MethodDescriptor(fn, options)``
    A mapping with a callable ``"method"`` entry, or an object with a callable
    ``method`` attribute; ``options`` comes from the matching
    ``"options"``/``options`` field (``None`` when missing).
``KeyedCollection(members)``
    Any other mapping; each key becomes a ``sub_key``.
``Value(obj)``
    Anything else.

Naming
------
``derive_name(item, base_name)`` applies, in order: an explicit string
``name`` attribute (or ``"name"`` entry for descriptors), the path base name
(final segment, extension stripped), then ``__name__`` of the underlying
function unless it is ``"<lambda>"``. Collections swap the first two: the
path wins over a ``"name"`` entry. No candidate means ``NamingError``.

``ModuleResolver(loader).resolve(item)`` loads path references, derives the
base name from the path and returns a :class:`ResolvedModule` carrying the
classified variant and that provisional base name. ``named_modules(resolved)``
expands it into ``NamedModule`` records: one per key for mappings, a single
one otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from smartinject.errors import NamingError

__all__ = [
    "PathRef",
    "CallableItem",
    "MethodDescriptor",
    "KeyedCollection",
    "Value",
    "Item",
    "NamedModule",
    "ResolvedModule",
    "ModuleResolver",
    "base_name_of",
    "classify",
    "as_collection",
    "classify_loaded",
    "derive_name",
    "named_modules",
    "raw_value",
    "NAME_KEY",
]

NAME_KEY = "name"


@dataclass(frozen=True)
class PathRef:
    reference: str


@dataclass(frozen=True)
class CallableItem:
    fn: Callable[..., Any]


@dataclass(frozen=True)
class MethodDescriptor:
    fn: Callable[..., Any]
    options: Optional[Dict[str, Any]] = None
    source: Any = None


@dataclass(frozen=True)
class KeyedCollection:
    members: Mapping[str, Any]


@dataclass(frozen=True)
class Value:
    value: Any


Item = Union[PathRef, CallableItem, MethodDescriptor, KeyedCollection, Value]


@dataclass
class NamedModule:
    """A value ready for registration under ``name`` (plus optional ``sub_key``)."""

    name: Optional[str]
    value: Any
    sub_key: Optional[str] = None
    item: Optional[Item] = None

    @property
    def key(self) -> Optional[str]:
        """Flat registry key: the collection key when fanned out, else the name."""
        return self.sub_key if self.sub_key is not None else self.name


@dataclass
class ResolvedModule:
    """A loaded/given item with its variant and provisional base name."""

    item: Item
    base_name: Optional[str]
    reference: Optional[str] = None


def base_name_of(reference: str) -> str:
    """Return the final path segment of ``reference`` without its extension."""
    return PurePosixPath(reference).stem


def classify(value: Any) -> Item:
    if isinstance(value, str):
        return PathRef(value)
    if isinstance(value, Mapping):
        method = value.get("method")
        if callable(method):
            options = value.get("options")
            return MethodDescriptor(method, dict(options) if options else None, value)
        return KeyedCollection(value)
    method = getattr(value, "method", None)
    if callable(method) and not callable(value):
        options = getattr(value, "options", None)
        return MethodDescriptor(method, dict(options) if options else None, value)
    if callable(value):
        return CallableItem(value)
    return Value(value)


def raw_value(item: Item) -> Any:
    if isinstance(item, PathRef):
        return item.reference
    if isinstance(item, CallableItem):
        return item.fn
    if isinstance(item, MethodDescriptor):
        return item.source if item.source is not None else item.fn
    if isinstance(item, KeyedCollection):
        return item.members
    return item.value


def _explicit_name(obj: Any) -> Optional[str]:
    if isinstance(obj, Mapping):
        name = obj.get(NAME_KEY)
    else:
        name = getattr(obj, NAME_KEY, None)
    return name if isinstance(name, str) and name else None


def _function_name(fn: Any) -> Optional[str]:
    name = getattr(fn, "__name__", None)
    if not isinstance(name, str) or not name or name == "<lambda>":
        return None
    return name


def derive_name(item: Item, base_name: Optional[str] = None) -> str:
    """Return the registration base name for ``item`` or raise ``NamingError``.

    Collections prefer the path base name over a ``"name"`` entry, since a
    loaded module may well define a ``name`` of its own.
    """
    explicit = _explicit_name(raw_value(item))
    if isinstance(item, KeyedCollection):
        candidates: List[Optional[str]] = [base_name, explicit]
    else:
        candidates = [explicit, base_name]
    if isinstance(item, (CallableItem, MethodDescriptor)):
        candidates.append(_function_name(item.fn))
    for candidate in candidates:
        if candidate:
            return candidate
    raise NamingError(
        f"Unable to identify a registration name for {raw_value(item)!r}: "
        "give it a 'name' or load it from a file"
    )


def as_collection(item: Item) -> Optional[KeyedCollection]:
    """Return ``item`` viewed as a keyed collection, if it is a mapping."""
    if isinstance(item, KeyedCollection):
        return item
    if isinstance(item, MethodDescriptor) and isinstance(item.source, Mapping):
        return KeyedCollection(item.source)
    return None


class ModuleResolver:
    """Load path references and classify the resulting values."""

    def __init__(self, loader: Any) -> None:
        self._loader = loader

    def resolve(self, item: Any) -> ResolvedModule:
        if isinstance(item, str):
            value = self._loader.load(item)
            return ResolvedModule(classify_loaded(value), base_name_of(item), reference=item)
        return ResolvedModule(classify(item), None)


def named_modules(resolved: ResolvedModule) -> List[NamedModule]:
    """Fan out ``resolved`` into one record per registration.

    Mappings produce one record per key (``sub_key``) carrying the provisional
    base name; any other variant produces a single record named by
    :func:`derive_name`.
    """
    collection = as_collection(resolved.item)
    if collection is not None:
        return [
            NamedModule(name=resolved.base_name, value=value, sub_key=str(key), item=collection)
            for key, value in collection.members.items()
        ]
    item = resolved.item
    return [NamedModule(name=derive_name(item, resolved.base_name), value=raw_value(item), item=item)]


def classify_loaded(value: Any) -> Item:
    """Classify a loaded value; strings from files are values, not references."""
    if isinstance(value, str):
        return Value(value)
    return classify(value)
