import pytest
import torch

from neural_convert.nn.keyed_map import TwoDimensionalMap, transform_2d_map, transform_map


def test_two_dimensional_map_iterates_in_sorted_order():
    m = TwoDimensionalMap()
    m.put("b", "a", 1)
    m.put("a", "z", 2)
    m.put("a", "b", 3)
    m.put("", "c", 4)
    assert list(m) == [("", "c"), ("a", "b"), ("a", "z"), ("b", "a")]
    assert list(m.values()) == [4, 3, 2, 1]
    assert m.first_keys() == ["", "a", "b"]
    assert len(m) == 4


def test_two_dimensional_map_lookup():
    m = TwoDimensionalMap([(("a", "b"), 1)])
    assert m["a", "b"] == 1
    assert m.get_value("a", "b") == 1
    assert m.contains("a", "b")
    assert ("a", "b") in m
    assert ("a", "c") not in m
    assert "a" not in m
    assert m.get(("x", "y")) is None
    with pytest.raises(KeyError):
        m["a", "c"]


def test_two_dimensional_map_put_replaces():
    m = TwoDimensionalMap()
    m.put("a", "b", 1)
    m.put("a", "b", 2)
    assert len(m) == 1
    assert m["a", "b"] == 2


def test_two_dimensional_map_nested_dict_round_trip():
    nested = {"b": {"y": 1, "x": 2}, "a": {"z": 3}}
    m = TwoDimensionalMap.from_nested_dict(nested)
    out = m.to_nested_dict()
    assert out == nested
    assert list(out) == ["a", "b"]
    assert list(out["b"]) == ["x", "y"]


def test_two_dimensional_map_equality_with_tensors():
    a = TwoDimensionalMap([(("a", "b"), torch.ones(2, 2))])
    assert a == TwoDimensionalMap([(("a", "b"), torch.ones(2, 2))])
    assert a != TwoDimensionalMap([(("a", "b"), torch.zeros(2, 2))])
    assert a != TwoDimensionalMap([(("a", "c"), torch.ones(2, 2))])


def test_transform_map_sorts_keys_and_converts_values():
    out = transform_map({"c": 1, "a": 2, "b": 3}, lambda x: x * 10)
    assert list(out.items()) == [("a", 20), ("b", 30), ("c", 10)]


def test_transform_2d_map_keeps_keys():
    m = TwoDimensionalMap()
    m.put("s", "t", 1)
    m.put("q", "r", 2)
    out = transform_2d_map(m, str)
    assert list(out) == list(m)
    assert out["s", "t"] == "1"


@pytest.mark.parametrize("two_key", [False, True])
def test_transforms_compose_without_changing_keys(two_key):
    entries = [(("x", "b"), 1), (("a", "y"), 2), (("a", "b"), 3)]
    m = TwoDimensionalMap(entries) if two_key else {k1 + k2: v for (k1, k2), v in entries}
    transform = transform_2d_map if two_key else transform_map
    out = transform(transform(m, lambda v: [v]), lambda v: v[0] + 1)
    assert list(out.keys()) == sorted(m.keys())
    assert all(out[k] == m[k] + 1 for k in m)


def test_transform_errors_propagate():
    def fail_on_b(v):
        if v == "b":
            raise ValueError("bad value")
        return v

    with pytest.raises(ValueError, match="bad value"):
        transform_map({"1": "a", "2": "b"}, fail_on_b)
    with pytest.raises(ValueError, match="bad value"):
        transform_2d_map(TwoDimensionalMap([(("1", "2"), "b")]), fail_on_b)


def test_transform_empty_maps():
    assert transform_map({}, str) == {}
    assert len(transform_2d_map(TwoDimensionalMap(), str)) == 0
