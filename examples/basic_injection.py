"""
Example showing a full registration pass against the in-memory host.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from smartinject import Injector, MemoryHost

MATH_MODULE = '''
def add(a, b):
    return a + b


def subtract(a, b):
    return a - b


exports = {"add": add, "subtract": subtract}
'''

ROUTES_JSON = '[{"method": "GET", "path": "/health"}]'


def _write_tree(root: Path) -> None:
    (root / "methods").mkdir()
    (root / "methods" / "util.py").write_text(MATH_MODULE)
    (root / "routes").mkdir()
    (root / "routes" / "health.json").write_text(ROUTES_JSON)


def main():
    logging.basicConfig(level=logging.DEBUG)
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        _write_tree(root)
        host = MemoryHost()
        injector = Injector(host, relative_to=str(root))
        result = injector.run(
            {
                "apps": [{"includes": [{"db": "sqlite:///:memory:", "debug": True}]}],
                "binds": [{"includes": [{"greet": lambda who: f"hello {who}"}]}],
                "methods": [
                    {
                        "prefix": "math",
                        "includes": ["methods/*.py"],
                        "options": {"cache": {"expires_in": 60}},
                    }
                ],
                "routes": [{"includes": ["routes/*.json"]}],
            }
        )
        print("methods:", result.methods.names())
        print("math.util.add(2, 3) =", host.call("math.util.add", 2, 3))
        print("routes:", host.routes)
        print("context:", sorted(host.context))


if __name__ == "__main__":
    main()
