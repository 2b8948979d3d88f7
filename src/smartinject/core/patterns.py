"""Include pattern expansion (source of truth).

``expand_pattern(pattern, ignores, root)``
    Default expansion primitive. Globs ``pattern`` under ``root`` with
    ``pathlib`` (``**`` recurses), keeps regular files only, skips files under
    or named by a dot-segment unless the pattern spells that segment with a
    leading dot itself (``.env``, ``.config/*``), drops every path
    whose root-relative POSIX form matches one of ``ignores`` under
    ``fnmatchcase`` and returns the remaining relative paths sorted. Empty or
    absolute patterns raise ``PatternResolutionError``. An empty result is
    returned as-is; deciding whether that is an error belongs to the resolver.

``PatternResolver(root, *, expander=expand_pattern, allow_empty=False)``
    ``resolve(group)`` walks ``group.includes`` in declaration order:

    - non-string entries are appended unchanged (no expansion attempted);
    - string entries are expanded with ``group.ignores`` and the matches are
      appended in the order the expander returned them;
    - a pattern with no matches raises
      ``PatternResolutionError("No files for pattern '<p>'")`` unless
      ``allow_empty`` is set, in which case a warning is logged and the
      pattern contributes nothing.

    ``resolve_async(group)`` runs the same walk with each expansion pushed to
    a worker thread via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import logging
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Any, Callable, List, Optional, Sequence

from smartinject.errors import PatternResolutionError

__all__ = ["PatternResolver", "expand_pattern"]

Expander = Callable[[str, Sequence[str], str], List[str]]


def _hidden(relative: str, dotted_parts: Sequence[str]) -> bool:
    """True when a dot-segment of ``relative`` is not named by the pattern."""
    for segment in relative.split("/"):
        if segment.startswith(".") and not any(
            fnmatchcase(segment, part) for part in dotted_parts
        ):
            return True
    return False


def expand_pattern(pattern: str, ignores: Sequence[str], root: str) -> List[str]:
    """Return root-relative files matching ``pattern`` minus ``ignores``."""
    pattern = pattern.strip()
    if not pattern:
        raise PatternResolutionError("Empty include pattern", pattern=pattern)
    if PurePosixPath(pattern).is_absolute():
        raise PatternResolutionError(
            f"Include pattern must be relative to the search root: {pattern!r}",
            pattern=pattern,
        )
    base = Path(root)
    matches: List[str] = []
    try:
        candidates = list(base.glob(pattern))
    except ValueError as exc:
        raise PatternResolutionError(
            f"Invalid include pattern {pattern!r}: {exc}", pattern=pattern
        ) from exc
    dotted_parts = [part for part in PurePosixPath(pattern).parts if part.startswith(".")]
    for path in candidates:
        if not path.is_file():
            continue
        relative = path.relative_to(base).as_posix()
        if _hidden(relative, dotted_parts):
            continue
        if any(fnmatchcase(relative, ignore) for ignore in ignores):
            continue
        matches.append(relative)
    return sorted(matches)


class PatternResolver:
    """Expand the includes of one group into concrete items."""

    def __init__(
        self,
        root: str,
        *,
        expander: Optional[Expander] = None,
        allow_empty: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.root = root
        self.allow_empty = bool(allow_empty)
        self._expander = expander or expand_pattern
        self._logger = logger or logging.getLogger("smartinject")

    def resolve(self, group: Any) -> List[Any]:
        items: List[Any] = []
        for include in group.includes:
            if not isinstance(include, str):
                items.append(include)
                continue
            files = self._expander(include, list(group.ignores), self.root)
            items.extend(self._checked(include, files))
        return items

    async def resolve_async(self, group: Any) -> List[Any]:
        items: List[Any] = []
        for include in group.includes:
            if not isinstance(include, str):
                items.append(include)
                continue
            files = await asyncio.to_thread(
                self._expander, include, list(group.ignores), self.root
            )
            items.extend(self._checked(include, files))
        return items

    def _checked(self, pattern: str, files: List[str]) -> List[str]:
        if files:
            return list(files)
        if self.allow_empty:
            self._logger.warning("No files for pattern %r under %s", pattern, self.root)
            return []
        raise PatternResolutionError(f"No files for pattern {pattern!r}", pattern=pattern)
