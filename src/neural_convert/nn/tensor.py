from typing import Iterator, Sequence, Tuple

import torch

from ..exceptions import ShapeError

__all__ = ["SimpleTensor", "check_matrix"]


def check_matrix(matrix: torch.Tensor, what: str = "matrix") -> torch.Tensor:
    """
    Check that ``matrix`` is a valid native matrix, i.e. a 2D tensor with at least one row
    and one column.

    :raises ShapeError: If it isn't.
    """
    if not isinstance(matrix, torch.Tensor):
        raise ShapeError(f"Expected a {what} as a torch.Tensor, got {type(matrix).__name__}")
    if matrix.ndim != 2:
        raise ShapeError(f"Expected a 2D {what}, got shape {tuple(matrix.shape)}")
    if matrix.shape[0] == 0:
        raise ShapeError(f"The {what} has 0 rows")
    if matrix.shape[1] == 0:
        raise ShapeError(f"The {what} has 0 columns")
    return matrix


class SimpleTensor:
    """
    An ordered stack of matrices ("slices"). Each slice is a valid 2D matrix on its own,
    but slices don't have to share a shape.
    """

    def __init__(self, slices: Sequence[torch.Tensor]):
        if len(slices) == 0:
            raise ShapeError("A tensor needs at least 1 slice")
        self._slices: Tuple[torch.Tensor, ...] = tuple(
            check_matrix(s, what=f"slice {i}") for i, s in enumerate(slices)
        )

    @classmethod
    def from_stacked(cls, stacked: torch.Tensor) -> "SimpleTensor":
        """
        Build from a 3D tensor, where the first dimension indexes the slices.
        """
        if stacked.ndim != 3:
            raise ShapeError(f"Expected a 3D tensor, got shape {tuple(stacked.shape)}")
        return cls(list(stacked.unbind(0)))

    def stacked(self) -> torch.Tensor:
        """
        Stack the slices into a single 3D tensor.

        :raises ShapeError: If the slices don't all have the same shape.
        """
        shapes = {tuple(s.shape) for s in self._slices}
        if len(shapes) > 1:
            raise ShapeError(f"Can't stack slices with different shapes: {sorted(shapes)}")
        return torch.stack(self._slices, dim=0)

    @property
    def num_slices(self) -> int:
        return len(self._slices)

    @property
    def slices(self) -> Tuple[torch.Tensor, ...]:
        return self._slices

    def get_slice(self, index: int) -> torch.Tensor:
        return self._slices[index]

    def __iter__(self) -> Iterator[torch.Tensor]:
        return iter(self._slices)

    def __len__(self) -> int:
        return len(self._slices)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SimpleTensor):
            return NotImplemented
        return self.num_slices == other.num_slices and all(
            a.dtype == b.dtype and torch.equal(a, b) for a, b in zip(self._slices, other._slices)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        shapes = ", ".join(str(tuple(s.shape)) for s in self._slices)
        return f"{self.__class__.__name__}(num_slices={self.num_slices}, shapes=[{shapes}])"
