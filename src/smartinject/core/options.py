"""Effective option computation for method registrations (source of truth).

``merge_options(group_options, item_options)`` evaluates exactly four cases,
in this order:

1. no group options → the item options (or ``{}``);
2. group options and (no item options, or ``override`` without ``merge``)
   → a copy of the group options without the control keys;
3. both present and ``merge`` → key union (item keys first, then group keys,
   control keys skipped), first assignment wins; a key takes the group value
   when the item value is absent, or when ``override`` is set and the group
   value is present, else the item value;
4. both present, no ``merge`` → the item options verbatim.

A value is absent when its key is missing or maps to ``None``. An empty
mapping counts as no options at all, on either side: an item carrying ``{}``
gets the group options even when ``merge`` is off. A merge that treats any
provided options object as present, empty or not, would return ``{}`` for
that item instead. Inputs are never mutated.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

__all__ = ["CONTROL_KEYS", "merge_options"]

CONTROL_KEYS = frozenset({"override", "merge"})


def _strip_control(options: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in options.items() if key not in CONTROL_KEYS}


def merge_options(
    group_options: Optional[Mapping[str, Any]],
    item_options: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    if not group_options:
        return dict(item_options or {})

    override = bool(group_options.get("override", False))
    merge = bool(group_options.get("merge", False))

    if not item_options or (override and not merge):
        return _strip_control(group_options)

    if not merge:
        return dict(item_options)

    effective: Dict[str, Any] = {}
    for key in [*item_options, *group_options]:
        if key in CONTROL_KEYS or key in effective:
            continue
        from_item = item_options.get(key)
        from_group = group_options.get(key)
        if from_item is None or (override and from_group is not None):
            effective[key] = from_group
        else:
            effective[key] = from_item
    return effective
