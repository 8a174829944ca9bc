from typing import Mapping

import torch

from neural_convert.nn.tensor import SimpleTensor


def assert_values_identical(expected, actual):
    if isinstance(expected, SimpleTensor):
        assert isinstance(actual, SimpleTensor)
        assert actual.num_slices == expected.num_slices
        for e, a in zip(expected, actual):
            assert_values_identical(e, a)
    else:
        assert isinstance(actual, torch.Tensor)
        assert actual.dtype == expected.dtype
        assert actual.shape == expected.shape
        # Compare bit patterns, not just values.
        assert torch.equal(actual.view(torch.int64), expected.view(torch.int64))


def assert_maps_identical(expected: Mapping, actual: Mapping):
    assert set(actual.keys()) == set(expected.keys())
    assert list(actual.keys()) == sorted(actual.keys())
    for key in expected:
        assert_values_identical(expected[key], actual[key])
