"""Tests for the methods tree and PipelineResult."""

import pytest

from smartinject.core.registry import MethodNode, MethodsRegistry, PipelineResult, dotted_name


def add():
    return "add"


def sub():
    return "sub"


def test_dotted_name_skips_missing_parts():
    assert dotted_name("math", "util", "add") == "math.util.add"
    assert dotted_name(None, "util", "add") == "util.add"
    assert dotted_name("math", "util") == "math.util"
    assert dotted_name(None, "util") == "util"


def _node(name, **members):
    node = MethodNode(name)
    for key, value in members.items():
        node.set_member(key, value)
    return node


def test_tree_shapes_for_all_prefix_and_subkey_combinations():
    registry = MethodsRegistry()
    registry.attach("math", _node("util", add=add, sub=sub))
    registry.attach(None, _node("tools", add=add))
    single = MethodNode("ping")
    single.set_member(None, add)
    registry.attach("net", single)
    plain = MethodNode("echo")
    plain.set_member(None, sub)
    registry.attach(None, plain)

    assert registry.as_dict() == {
        "math": {"util": {"add": add, "sub": sub}},
        "tools": {"add": add},
        "net": {"ping": add},
        "echo": sub,
    }
    assert registry.names() == ["math.util.add", "math.util.sub", "tools.add", "net.ping", "echo"]
    assert len(registry) == 5
    assert registry.prefixes() == ("math", None, "net")


def test_get_resolves_dotted_names():
    registry = MethodsRegistry()
    registry.attach("math", _node("util", add=add))
    registry.attach(None, _node("tools", sub=sub))
    single = MethodNode("ping")
    single.set_member(None, add)
    registry.attach("net", single)

    assert registry.get("math.util.add") is add
    assert registry.get("tools.sub") is sub
    assert registry.get("net.ping") is add
    assert "math.util.add" in registry
    assert "math.util.mul" not in registry
    assert 3 not in registry
    with pytest.raises(KeyError):
        registry.get("math.util")


def test_attach_replaces_whole_node():
    registry = MethodsRegistry()
    registry.attach("math", _node("util", add=add, sub=sub))
    registry.attach("math", _node("util", add=sub))
    assert registry.as_dict() == {"math": {"util": {"add": sub}}}


def test_pipeline_result_starts_empty_and_snapshots():
    result = PipelineResult()
    assert result.snapshot() == {
        "apps": {},
        "binds": {},
        "methods": {},
        "handlers": {},
        "routes": [],
    }
    result.apps["db"] = 1
    assert PipelineResult().apps == {}
