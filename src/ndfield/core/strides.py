from __future__ import annotations

import functools
import itertools
import operator
from typing import Iterator, Sequence, Tuple

from .exceptions import NDIndexError, ShapeError

Shape = Tuple[int, ...]
Index = Tuple[int, ...]


def normalize_shape(shape: Sequence[int]) -> Shape:
    try:
        raw = tuple(shape)
    except TypeError as exc:
        raise ShapeError(f"Shape must be a sequence of ints; received {shape!r}") from exc
    dims = []
    for dim in raw:
        if isinstance(dim, bool):
            raise ShapeError(f"Shape entries must be integers; received {dim!r}")
        try:
            dims.append(operator.index(dim))
        except TypeError as exc:
            raise ShapeError(f"Shape entries must be integers; received {dim!r}") from exc
    if any(dim <= 0 for dim in dims):
        raise ShapeError("Shape entries must be positive", shape=dims)
    return tuple(dims)


def strides_for_shape(shape: Shape) -> Tuple[int, ...]:
    if not shape:
        return ()
    return tuple(itertools.accumulate(reversed(shape[1:]), operator.mul, initial=1))[::-1]


class Strides:
    """Bijection between multi-indices of a fixed shape and linear buffer offsets."""

    shape: Shape
    strides: Tuple[int, ...]
    linear_size: int

    def offset(self, index: Sequence[int]) -> int:
        raise NotImplementedError

    def index(self, offset: int) -> Index:
        raise NotImplementedError

    def indices(self) -> Iterator[Index]:
        return (self.index(offset) for offset in range(self.linear_size))

    @property
    def ndim(self) -> int:
        return len(self.shape)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Strides):
            return NotImplemented
        return self.shape == other.shape and self.strides == other.strides

    def __hash__(self) -> int:
        return hash((self.shape, self.strides))


class DefaultStrides(Strides):
    """Row-major strides: the last axis varies fastest."""

    def __init__(self, shape: Sequence[int]):
        self.shape = normalize_shape(shape)
        self.strides = strides_for_shape(self.shape)
        self.linear_size = functools.reduce(operator.mul, self.shape, 1)

    @staticmethod
    @functools.lru_cache(maxsize=None)
    def _cached(shape: Shape) -> "DefaultStrides":
        return DefaultStrides(shape)

    @staticmethod
    def create(shape: Sequence[int] = ()) -> "DefaultStrides":
        return DefaultStrides._cached(normalize_shape(shape))

    def offset(self, index: Sequence[int]) -> int:
        coords = tuple(operator.index(coord) for coord in index)
        if len(coords) != len(self.shape):
            raise NDIndexError(
                f"Index has {len(coords)} coordinates but structure has rank {len(self.shape)}",
                index=coords,
                shape=self.shape,
            )
        result = 0
        for coord, dim, stride in zip(coords, self.shape, self.strides):
            if not 0 <= coord < dim:
                raise NDIndexError("Index out of bounds", index=coords, shape=self.shape)
            result += coord * stride
        return result

    def index(self, offset: int) -> Index:
        offset = operator.index(offset)
        if not 0 <= offset < self.linear_size:
            raise NDIndexError(
                f"Offset {offset} outside [0, {self.linear_size})",
                index=offset,
                shape=self.shape,
            )
        coords = []
        remainder = offset
        for stride in self.strides:
            coord, remainder = divmod(remainder, stride)
            coords.append(coord)
        return tuple(coords)

    def indices(self) -> Iterator[Index]:
        # itertools.product over ranges walks row-major order, matching offsets 0..n-1.
        return itertools.product(*(range(dim) for dim in self.shape))

    def __repr__(self) -> str:
        return f"DefaultStrides(shape={self.shape}, strides={self.strides})"
