"""Tests for dotted path resolution."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from eligibility import UNDEFINED, EvaluationDepthError, resolve_by_path
from eligibility.paths import split_path


@pytest.fixture
def cart():
    return {
        "customer": {"address": {"city": "Berlin"}, "nickname": None},
        "products": [
            {"sku": "A-1", "quantity": 1, "variants": [{"size": "S"}, {"size": "M"}]},
            {"sku": "B-2", "quantity": 5, "variants": [{"size": "L"}]},
            {"sku": "C-3"},
        ],
        "coupons": ["WELCOME", "SPRING"],
    }


class TestSplitPath:

    def test_segments(self):
        assert split_path("a.b.c") == ["a", "b", "c"]

    def test_single_segment(self):
        assert split_path("total") == ["total"]


class TestResolveByPath:
    """Mapping descent and short-circuiting."""

    def test_nested_mapping(self, cart):
        assert resolve_by_path(cart, "customer.address.city") == "Berlin"

    def test_missing_key_is_undefined(self, cart):
        assert resolve_by_path(cart, "customer.email") is UNDEFINED

    def test_explicit_null_is_none(self, cart):
        assert resolve_by_path(cart, "customer.nickname") is None

    def test_descent_through_null_is_undefined(self, cart):
        assert resolve_by_path(cart, "customer.nickname.first") is UNDEFINED

    def test_descent_through_primitive_is_undefined(self, cart):
        assert resolve_by_path(cart, "customer.address.city.length") is UNDEFINED

    def test_whole_subtree(self, cart):
        assert resolve_by_path(cart, "customer.address") == {"city": "Berlin"}

    def test_undefined_is_falsy(self):
        assert not UNDEFINED
        assert repr(UNDEFINED) == "UNDEFINED"


class TestBroadcast:
    """Paths through sequences map over elements and flatten one level."""

    def test_broadcast_over_array(self, cart):
        assert resolve_by_path(cart, "products.quantity") == [1, 5, UNDEFINED]

    def test_nested_broadcast_flattens(self, cart):
        assert resolve_by_path(cart, "products.variants.size") == ["S", "M", "L", UNDEFINED]

    def test_broadcast_over_primitives(self, cart):
        assert resolve_by_path(cart, "coupons.code") == [UNDEFINED, UNDEFINED]

    def test_sequence_value_returned_as_is(self, cart):
        assert resolve_by_path(cart, "coupons") == ["WELCOME", "SPRING"]

    def test_tuple_sequences(self):
        record = {"items": ({"qty": 2}, {"qty": 3})}

        assert resolve_by_path(record, "items.qty") == [2, 3]

    def test_nested_arrays_flatten_one_level_per_segment(self):
        record = {"groups": [[{"id": 1}, {"id": 2}], [{"id": 3}]]}

        assert resolve_by_path(record, "groups.id") == [1, 2, 3]

    def test_cycle_raises(self):
        items = []
        items.append(items)

        with pytest.raises(EvaluationDepthError):
            resolve_by_path({"items": items}, "items.qty", max_depth=20)
