"""Tests for include pattern expansion."""

import asyncio
import logging

import pytest

from smartinject.core.config import InjectionGroup
from smartinject.core.patterns import PatternResolver, expand_pattern
from smartinject.errors import PatternResolutionError


def _touch(root, *names):
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")


def test_expand_returns_sorted_relative_files(tmp_path):
    _touch(tmp_path, "b.py", "a.py", "notes.txt")
    assert expand_pattern("*.py", [], str(tmp_path)) == ["a.py", "b.py"]


def test_expand_skips_directories(tmp_path):
    _touch(tmp_path, "pkg.py/inner.py", "real.py")
    assert expand_pattern("*.py", [], str(tmp_path)) == ["real.py"]


def test_expand_applies_ignores_on_relative_paths(tmp_path):
    _touch(tmp_path, "methods/add.py", "methods/sub.py", "methods/test_add.py")
    files = expand_pattern("methods/*.py", ["methods/test_*"], str(tmp_path))
    assert files == ["methods/add.py", "methods/sub.py"]


def test_expand_recursive_glob(tmp_path):
    _touch(tmp_path, "routes/a.py", "routes/admin/b.py")
    assert expand_pattern("routes/**/*.py", [], str(tmp_path)) == [
        "routes/a.py",
        "routes/admin/b.py",
    ]


def test_expand_is_case_sensitive_for_ignores(tmp_path):
    _touch(tmp_path, "Keep.py", "drop.py")
    assert expand_pattern("*.py", ["drop.py", "keep.py"], str(tmp_path)) == ["Keep.py"]


def test_expand_skips_dotfiles_and_dot_directories(tmp_path):
    _touch(tmp_path, "methods/util.py", "methods/.#util.py", ".cache/methods/old.py")
    assert expand_pattern("methods/*.py", [], str(tmp_path)) == ["methods/util.py"]
    assert expand_pattern("**/*.py", [], str(tmp_path)) == ["methods/util.py"]


def test_expand_keeps_dot_segments_named_by_the_pattern(tmp_path):
    _touch(tmp_path, ".config/app.json", "methods/.#util.py", ".config/.hidden.json")
    assert expand_pattern(".config/*.json", [], str(tmp_path)) == [".config/app.json"]
    assert expand_pattern("methods/.#*.py", [], str(tmp_path)) == ["methods/.#util.py"]


@pytest.mark.parametrize("pattern", ["", "   ", "/etc/*.py"])
def test_expand_rejects_invalid_patterns(tmp_path, pattern):
    with pytest.raises(PatternResolutionError):
        expand_pattern(pattern, [], str(tmp_path))


def test_resolver_count_is_matches_minus_ignored(tmp_path):
    _touch(tmp_path, "a.py", "b.py", "c.py", "skip_me.py")
    group = InjectionGroup(includes=["*.py"], ignores=["skip_*"])
    items = PatternResolver(str(tmp_path)).resolve(group)
    assert len(items) == 3


def test_resolver_keeps_declaration_order_and_literals(tmp_path):
    _touch(tmp_path, "x/one.py", "y/two.py")
    literal = {"db": object()}

    def handler():
        return None

    group = InjectionGroup(includes=["y/*.py", literal, "x/*.py", handler])
    items = PatternResolver(str(tmp_path)).resolve(group)
    assert items == ["y/two.py", literal, "x/one.py", handler]
    assert items[1] is literal


def test_resolver_zero_matches_raises(tmp_path):
    group = InjectionGroup(includes=["missing/*.py"])
    with pytest.raises(PatternResolutionError, match="No files for pattern") as info:
        PatternResolver(str(tmp_path)).resolve(group)
    assert info.value.pattern == "missing/*.py"


def test_resolver_zero_matches_after_ignores_raises(tmp_path):
    _touch(tmp_path, "only.py")
    group = InjectionGroup(includes=["*.py"], ignores=["only.py"])
    with pytest.raises(PatternResolutionError):
        PatternResolver(str(tmp_path)).resolve(group)


def test_resolver_allow_empty_logs_warning(tmp_path, caplog):
    _touch(tmp_path, "a.py")
    group = InjectionGroup(includes=["missing/*.py", "*.py"])
    resolver = PatternResolver(str(tmp_path), allow_empty=True)
    with caplog.at_level(logging.WARNING, logger="smartinject"):
        items = resolver.resolve(group)
    assert items == ["a.py"]
    assert "missing/*.py" in caplog.text


def test_resolver_uses_custom_expander():
    calls = []

    def expander(pattern, ignores, root):
        calls.append((pattern, tuple(ignores), root))
        return [f"{pattern}-hit"]

    group = InjectionGroup(includes=["p"], ignores=["i"])
    resolver = PatternResolver("/srv", expander=expander)
    assert asyncio.run(resolver.resolve_async(group)) == ["p-hit"]
    assert calls == [("p", ("i",), "/srv")]
