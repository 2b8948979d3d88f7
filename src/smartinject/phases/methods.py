"""Methods phase (source of truth).

Rebuild behaviour exactly as described; no hidden defaults beyond this text.

Responsibilities
----------------
- Register every resolved callable with ``host.register_method(dotted, fn,
  options)`` where ``dotted`` is ``prefix.base.sub_key`` (absent parts
  omitted) and ``options`` is ``merge_options(group.options, item options)``.
- Mirror each registration into ``result.methods`` at
  ``[prefix][base][sub_key]``. The stored value is what the sink returned,
  or the function itself when the sink returned ``None``.

Item shapes
-----------
- callable → one registration, no item options;
- method descriptor (``{"method": fn, "options": {...}}`` or an object with
  ``method``/``options`` attributes) → one registration with item options;
- mapping → one registration per key whose value is a callable or a
  descriptor. A string ``"name"`` entry names the collection when it has no
  path; other non-callable entries are skipped with a debug log;
- anything else → nothing registered (debug log), but it still needs a name.

Base names come from ``derive_name``; an inline item without a usable name
raises ``NamingError`` from ``collect``.

Commit
------
Before the first sink call ``check`` rejects the phase with ``NamingError``
when one dotted name is also the namespace of another (``util`` and
``util.add``).

All registrations of one resolved item form one ``MethodNode``, built fully
before it is attached; a later item with the same prefix/base name replaces
the earlier node as a whole.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from smartinject.core.injector import Injector
from smartinject.core.items import (
    NAME_KEY,
    CallableItem,
    MethodDescriptor,
    ResolvedModule,
    as_collection,
    classify_loaded,
    derive_name,
)
from smartinject.core.options import merge_options
from smartinject.core.registry import MethodNode, dotted_name
from smartinject.errors import NamingError
from smartinject.phases._base_phase import BasePhase, Registration


class MethodsPhase(BasePhase):
    """Register invocable methods under dotted names."""

    phase_code = "methods"
    phase_description = "Invocable server methods with merged options"

    def collect(self, group: Any, resolved: ResolvedModule) -> List[Registration]:
        group_options = group.option_dict()
        item = resolved.item

        if isinstance(item, (CallableItem, MethodDescriptor)):
            base_name = derive_name(item, resolved.base_name)
            return [self._registration(base_name, None, item, group_options)]

        collection = as_collection(item)
        if collection is None:
            base_name = derive_name(item, resolved.base_name)
            self._logger.debug("methods: %s exposes no callable, skipped", base_name)
            return []

        base_name = derive_name(collection, resolved.base_name)
        registrations: List[Registration] = []
        for key, member in collection.members.items():
            if key == NAME_KEY and isinstance(member, str):
                continue
            member_item = classify_loaded(member)
            if not isinstance(member_item, (CallableItem, MethodDescriptor)):
                self._logger.debug("methods: %s.%s is not callable, skipped", base_name, key)
                continue
            registrations.append(self._registration(base_name, str(key), member_item, group_options))
        return registrations

    def _registration(
        self,
        base_name: str,
        sub_key: Optional[str],
        item: Any,
        group_options: Any,
    ) -> Registration:
        item_options = item.options if isinstance(item, MethodDescriptor) else None
        return Registration(
            name=base_name,
            value=item.fn,
            sub_key=sub_key,
            options=merge_options(group_options, item_options),
        )

    def check(self, batches: List[Tuple[Any, List[Registration]]]) -> None:
        names = {
            dotted_name(group.prefix or None, registration.name, registration.sub_key)
            for group, registrations in batches
            for registration in registrations
        }
        for dotted in sorted(names):
            segments = dotted.split(".")
            for size in range(1, len(segments)):
                parent = ".".join(segments[:size])
                if parent in names:
                    raise NamingError(
                        f"Method name conflict: {parent!r} is both a method and "
                        f"the namespace of {dotted!r}"
                    )

    def commit(self, group: Any, registrations: List[Registration], result: Any) -> None:
        if not registrations:
            return
        prefix = group.prefix or None
        node = MethodNode(registrations[0].name)
        for registration in registrations:
            dotted = dotted_name(prefix, registration.name, registration.sub_key)
            registered = self._host.register_method(dotted, registration.value, registration.options)
            node.set_member(
                registration.sub_key,
                registration.value if registered is None else registered,
            )
        result.methods.attach(prefix, node)


Injector.register_phase(MethodsPhase)
