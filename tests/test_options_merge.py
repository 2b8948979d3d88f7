"""Tests for the four-case option merge."""

import pytest

from smartinject import merge_options


@pytest.mark.parametrize(
    "group, item, expected",
    [
        (None, {"a": 1}, {"a": 1}),
        ({"a": 1, "override": True, "merge": False}, {"a": 2}, {"a": 1}),
        ({"a": 1, "b": 2, "override": False, "merge": True}, {"a": 9}, {"a": 9, "b": 2}),
        ({"a": 1, "override": True, "merge": True}, {"a": 9}, {"a": 1}),
        ({"a": 1, "merge": False}, {"b": 2}, {"b": 2}),
    ],
)
def test_merge_truth_table(group, item, expected):
    assert merge_options(group, item) == expected


def test_no_options_at_all_is_empty():
    assert merge_options(None, None) == {}


def test_group_only_strips_control_keys():
    group = {"cache": {"expires_in": 1000}, "override": False, "merge": True}
    assert merge_options(group, None) == {"cache": {"expires_in": 1000}}


def test_override_without_merge_discards_item_only_keys():
    group = {"cache": {"expires_in": 10}, "override": True}
    assert merge_options(group, {"bind": "ctx", "cache": {"expires_in": 99}}) == {
        "cache": {"expires_in": 10}
    }


def test_merge_takes_group_value_when_item_value_is_none():
    group = {"cache": {"expires_in": 10}, "merge": True}
    assert merge_options(group, {"cache": None, "callback": False}) == {
        "cache": {"expires_in": 10},
        "callback": False,
    }


def test_merge_with_override_keeps_item_value_when_group_value_is_none():
    group = {"bind": None, "callback": True, "override": True, "merge": True}
    assert merge_options(group, {"bind": "ctx"}) == {"bind": "ctx", "callback": True}


def test_merge_key_order_follows_item_then_group():
    group = {"z": 1, "a": 2, "merge": True}
    merged = merge_options(group, {"m": 3, "a": 4})
    assert list(merged) == ["m", "a", "z"]


def test_empty_item_options_count_as_absent():
    group = {"cache": {"expires_in": 5}}
    assert merge_options(group, {}) == {"cache": {"expires_in": 5}}
    assert merge_options({**group, "merge": False}, {}) == {"cache": {"expires_in": 5}}


def test_inputs_are_not_mutated_and_result_is_fresh():
    group = {"a": 1, "override": True, "merge": True}
    item = {"b": 2}
    merged = merge_options(group, item)
    assert merged == {"b": 2, "a": 1}
    assert group == {"a": 1, "override": True, "merge": True}
    assert item == {"b": 2}
    assert merge_options(None, item) is not item
    assert merge_options({"merge": False}, item) is not item
