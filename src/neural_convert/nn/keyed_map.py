from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
)

import torch

__all__ = ["TwoDimensionalMap", "transform_map", "transform_2d_map"]

K = TypeVar("K")
K1 = TypeVar("K1")
K2 = TypeVar("K2")
V = TypeVar("V")
V2 = TypeVar("V2")


class TwoDimensionalMap(Mapping[Tuple[K1, K2], V], Generic[K1, K2, V]):
    """
    A mapping keyed by ``(outer, inner)`` pairs.

    Iteration is always in sorted order, first by outer key and then by inner key, no matter
    what order entries were added in. The portable form of a model depends on this order, so
    keys must be mutually comparable.
    """

    def __init__(self, entries: Optional[Iterable[Tuple[Tuple[K1, K2], V]]] = None):
        self._data: Dict[K1, Dict[K2, V]] = {}
        if entries is not None:
            for (k1, k2), value in entries:
                self.put(k1, k2, value)

    def put(self, k1: K1, k2: K2, value: V) -> None:
        self._data.setdefault(k1, {})[k2] = value

    def get_value(self, k1: K1, k2: K2) -> V:
        return self._data[k1][k2]

    def contains(self, k1: K1, k2: K2) -> bool:
        return k1 in self._data and k2 in self._data[k1]

    def first_keys(self) -> List[K1]:
        return sorted(self._data)  # type: ignore[type-var]

    def add_all(self, other: "TwoDimensionalMap[K1, K2, Any]", function: Callable[[Any], V]):
        """
        Add every entry of ``other`` to ``self``, with values passed through ``function``.
        """
        for (k1, k2), value in other.items():
            self.put(k1, k2, function(value))

    def to_nested_dict(self) -> Dict[K1, Dict[K2, V]]:
        """
        A plain ``{outer: {inner: value}}`` dictionary, built in sorted key order.
        """
        out: Dict[K1, Dict[K2, V]] = {}
        for (k1, k2), value in self.items():
            out.setdefault(k1, {})[k2] = value
        return out

    @classmethod
    def from_nested_dict(
        cls, nested: Mapping[K1, Mapping[K2, V]]
    ) -> "TwoDimensionalMap[K1, K2, V]":
        out: "TwoDimensionalMap[K1, K2, V]" = cls()
        for k1, inner in nested.items():
            for k2, value in inner.items():
                out.put(k1, k2, value)
        return out

    def __getitem__(self, key: Tuple[K1, K2]) -> V:
        k1, k2 = key
        return self._data[k1][k2]

    def __iter__(self) -> Iterator[Tuple[K1, K2]]:
        for k1 in sorted(self._data):  # type: ignore[type-var]
            for k2 in sorted(self._data[k1]):  # type: ignore[type-var]
                yield (k1, k2)

    def __len__(self) -> int:
        return sum(len(inner) for inner in self._data.values())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        return self.contains(key[0], key[1])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TwoDimensionalMap):
            return NotImplemented
        if list(self) != list(other):
            return False
        return all(_values_equal(self[k], other[k]) for k in self)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self)})"


def _values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, torch.Tensor) or isinstance(b, torch.Tensor):
        return (
            isinstance(a, torch.Tensor)
            and isinstance(b, torch.Tensor)
            and a.dtype == b.dtype
            and torch.equal(a, b)
        )
    return a == b


def transform_map(mapping: Mapping[K, V], function: Callable[[V], V2]) -> Dict[K, V2]:
    """
    Apply ``function`` to every value of a single-key map.

    The result has exactly the same keys, inserted in sorted key order. Any error raised
    by ``function`` propagates and no partial map is returned.
    """
    return {k: function(mapping[k]) for k in sorted(mapping)}  # type: ignore[type-var]


def transform_2d_map(
    mapping: TwoDimensionalMap[K1, K2, V], function: Callable[[V], V2]
) -> TwoDimensionalMap[K1, K2, V2]:
    """
    Apply ``function`` to every value of a two-key map.

    The result has exactly the same key pairs, and like every :class:`TwoDimensionalMap`
    it iterates sorted by outer key and then inner key. Any error raised by ``function``
    propagates and no partial map is returned.
    """
    out: TwoDimensionalMap[K1, K2, V2] = TwoDimensionalMap()
    out.add_all(mapping, function)
    return out
