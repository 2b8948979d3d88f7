"""Load referenced files into values.

``ModuleLoader(root)`` turns a root-relative reference returned by pattern
expansion into a value:

- ``.py`` files are executed as modules through ``importlib.util`` and cached
  per absolute path for the lifetime of the loader. The value of a module is
  its ``exports`` attribute when defined, else a mapping of the names listed
  in ``__all__``, else a mapping of the public attributes the module defines
  itself (imported modules and callables from other modules are skipped).
- ``.json`` files are parsed with :mod:`json`.

A missing file or an unsupported extension raises ``LoadError``. Errors
raised while executing module code propagate unchanged.
"""

from __future__ import annotations

import hashlib
import importlib.util
import json
import sys
import types
from pathlib import Path
from typing import Any, Dict

from smartinject.errors import LoadError

__all__ = ["ModuleLoader", "module_value"]

EXPORTS_ATTR_NAME = "exports"
_MODULE_NAMESPACE = "smartinject_loaded"


def module_value(module: types.ModuleType) -> Any:
    """Return the value a loaded module contributes to registration."""
    namespace = vars(module)
    if EXPORTS_ATTR_NAME in namespace:
        return namespace[EXPORTS_ATTR_NAME]
    public = namespace.get("__all__")
    if public is not None:
        return {name: getattr(module, name) for name in public}
    value: Dict[str, Any] = {}
    for name, attr in namespace.items():
        if name.startswith("_") or isinstance(attr, types.ModuleType):
            continue
        if callable(attr) and getattr(attr, "__module__", module.__name__) != module.__name__:
            continue
        value[name] = attr
    return value


class ModuleLoader:
    """Resolve root-relative references to loaded values."""

    def __init__(self, root: str) -> None:
        self.root = Path(root)
        self._cache: Dict[Path, Any] = {}

    def load(self, reference: str) -> Any:
        path = (self.root / reference).resolve()
        if path in self._cache:
            return self._cache[path]
        if not path.is_file():
            raise LoadError(f"Cannot load {reference!r}: no such file under {self.root}")
        suffix = path.suffix.lower()
        if suffix == ".py":
            value = module_value(self._exec_module(path))
        elif suffix == ".json":
            with path.open("r", encoding="utf-8") as handle:
                try:
                    value = json.load(handle)
                except json.JSONDecodeError as exc:
                    raise LoadError(f"Cannot parse {reference!r}: {exc}") from exc
        else:
            raise LoadError(f"Cannot load {reference!r}: unsupported file type {suffix!r}")
        self._cache[path] = value
        return value

    def _exec_module(self, path: Path) -> types.ModuleType:
        digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
        module_name = f"{_MODULE_NAMESPACE}.{path.stem}_{digest}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise LoadError(f"Cannot build an import spec for {path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module
