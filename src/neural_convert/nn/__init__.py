"""
Native matrices and tensors, their portable form, and the keyed parameter maps that hold them.
"""

from .codec import (
    PortableMatrix,
    PortableTensor,
    matrix_from_portable,
    matrix_to_portable,
    tensor_from_portable,
    tensor_to_portable,
)
from .keyed_map import TwoDimensionalMap, transform_2d_map, transform_map
from .tensor import SimpleTensor

__all__ = [
    "PortableMatrix",
    "PortableTensor",
    "SimpleTensor",
    "TwoDimensionalMap",
    "matrix_from_portable",
    "matrix_to_portable",
    "tensor_from_portable",
    "tensor_to_portable",
    "transform_2d_map",
    "transform_map",
]
