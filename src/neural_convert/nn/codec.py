"""
Conversion of native matrices and tensors to and from their portable form, which is made
only of nested Python lists of floats.
"""

from typing import Any, List, Sequence

import torch

from ..exceptions import ShapeError
from .tensor import SimpleTensor, check_matrix

__all__ = [
    "PortableMatrix",
    "PortableTensor",
    "matrix_to_portable",
    "matrix_from_portable",
    "tensor_to_portable",
    "tensor_from_portable",
]

PortableMatrix = List[List[float]]
PortableTensor = List[PortableMatrix]

NATIVE_DTYPE = torch.float64


def _is_sequence(x: Any) -> bool:
    return isinstance(x, Sequence) and not isinstance(x, (str, bytes))


def matrix_to_portable(matrix: torch.Tensor) -> PortableMatrix:
    """
    Convert a 2D matrix into a list of rows, each row a list of floats in column order.

    :param matrix: The native matrix.
    """
    check_matrix(matrix)
    return matrix.detach().to(device="cpu", dtype=NATIVE_DTYPE).tolist()


def matrix_from_portable(rows: Sequence[Sequence[float]]) -> torch.Tensor:
    """
    Convert a list of rows back into a native ``float64`` matrix.

    :param rows: The portable matrix.

    :raises ShapeError: If there are no rows, the first row is empty, or the rows don't all
        have the same length.
    """
    if not _is_sequence(rows):
        raise ShapeError(f"Expected a sequence of rows, got {type(rows).__name__}")
    if len(rows) == 0:
        raise ShapeError("Input array with 0 rows")
    if not _is_sequence(rows[0]):
        raise ShapeError(f"Expected each row to be a sequence, got {type(rows[0]).__name__}")
    num_cols = len(rows[0])
    if num_cols == 0:
        raise ShapeError("Input array with 0 columns")
    for row in rows[1:]:
        if not _is_sequence(row) or len(row) != num_cols:
            raise ShapeError("Input array with uneven columns")

    try:
        out = torch.tensor([list(row) for row in rows], dtype=NATIVE_DTYPE)
    except (TypeError, ValueError, RuntimeError) as e:
        raise ShapeError(f"Input array has non-numeric entries: {e}") from e
    if out.ndim != 2:
        raise ShapeError(f"Input array has too many dimensions: {tuple(out.shape)}")
    return out


def tensor_to_portable(tensor: SimpleTensor) -> PortableTensor:
    """
    Convert each slice of ``tensor`` with :func:`matrix_to_portable()`, keeping slice order.
    """
    return [matrix_to_portable(tensor.get_slice(i)) for i in range(tensor.num_slices)]


def tensor_from_portable(slices: Sequence[Sequence[Sequence[float]]]) -> SimpleTensor:
    """
    Inverse of :func:`tensor_to_portable()`.

    :raises ShapeError: If there are no slices, or if any slice isn't a valid portable matrix.
        The error of the first bad slice is raised.
    """
    if not _is_sequence(slices):
        raise ShapeError(f"Expected a sequence of slices, got {type(slices).__name__}")
    if len(slices) == 0:
        raise ShapeError("Input tensor with 0 slices")
    out = []
    for i, s in enumerate(slices):
        try:
            out.append(matrix_from_portable(s))
        except ShapeError as e:
            raise ShapeError(f"Slice {i}: {e}") from e
    return SimpleTensor(out)
