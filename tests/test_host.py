"""Tests for the in-memory reference host."""

import pytest

from smartinject import MemoryHost


def add(a, b):
    return a + b


def test_methods_are_nested_by_dotted_segments():
    host = MemoryHost()
    host.register_method("math.util.add", add, {"cache": {"expires_in": 1}})
    assert host.methods == {"math": {"util": {"add": add}}}
    assert host.get_method("math.util.add") is add
    assert host.call("math.util.add", 1, 2) == 3
    assert host.method_entries["math.util.add"].options == {"cache": {"expires_in": 1}}


def test_method_collisions():
    host = MemoryHost(replace=False)
    host.register_method("util.add", add)
    with pytest.raises(ValueError, match="collision"):
        host.register_method("util.add", add)
    with pytest.raises(ValueError, match="namespace"):
        host.register_method("util.add.deep", add)
    with pytest.raises(ValueError, match="namespace"):
        host.register_method("util", add)


def test_default_host_keeps_the_last_registration():
    host = MemoryHost()
    host.register_method("ping", add)
    host.register_method("ping", len)
    host.register_handler("h", 1)
    host.register_handler("h", 2)
    assert host.get_method("ping") is len
    assert host.handlers == {"h": 2}


def test_non_callable_method_is_rejected():
    with pytest.raises(TypeError):
        MemoryHost().register_method("x", 3)


def test_missing_methods_raise_key_error():
    host = MemoryHost()
    host.register_method("math.util.add", add)
    with pytest.raises(KeyError):
        host.get_method("math.util")
    with pytest.raises(KeyError):
        host.get_method("math.nope")


def test_handlers_routes_app_and_context():
    host = MemoryHost()
    host.set_app_value("db", "conn")
    host.bind_context({"helper": 1})
    host.register_handler("proxy", add)
    host.register_route({"path": "/"})
    host.register_route([{"path": "/a"}, ({"path": "/b"},)])
    strict = MemoryHost(replace=False)
    strict.register_handler("proxy", add)
    with pytest.raises(ValueError, match="Handler name collision"):
        strict.register_handler("proxy", add)
    assert host.app == {"db": "conn"}
    assert host.context == {"helper": 1}
    assert host.bind_calls == 1
    assert [route["path"] for route in host.routes] == ["/", "/a", "/b"]
