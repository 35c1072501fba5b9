from __future__ import annotations

from typing import Any, Callable, Iterator, Optional, Sequence, Tuple

import numpy as np

from .buffers import Buffer, BufferFactory, boxing
from .exceptions import NDIndexError, ShapeMismatchError
from .strides import DefaultStrides, Index, Shape, Strides, normalize_shape

__all__ = [
    "NDStructure",
    "NDBuffer",
    "ArrayStructure",
    "nd_structure",
    "content_equals",
    "to_numpy",
]


class NDStructure:
    """Read-only N-dimensional structure: a shape plus indexed access."""

    @property
    def shape(self) -> Shape:
        raise NotImplementedError

    def get(self, index: Sequence[int]) -> Any:
        raise NotImplementedError

    def elements(self) -> Iterator[Tuple[Index, Any]]:
        for index in DefaultStrides.create(self.shape).indices():
            yield index, self.get(index)

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        return DefaultStrides.create(self.shape).linear_size

    def __getitem__(self, index: Any) -> Any:
        if not isinstance(index, tuple):
            index = (index,)
        return self.get(index)

    def __iter__(self):
        raise TypeError(f"{type(self).__name__} is not iterable; use elements()")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shape={self.shape})"


class NDBuffer(NDStructure):
    """Structure stored in exactly one flat buffer laid out by ``strides``."""

    def __init__(self, buffer: Buffer, strides: Strides):
        if len(buffer) != strides.linear_size:
            raise ShapeMismatchError(
                f"Buffer of size {len(buffer)} cannot back strides of size {strides.linear_size}",
                expected=strides.shape,
            )
        self._buffer = buffer
        self._strides = strides

    @property
    def buffer(self) -> Buffer:
        return self._buffer

    @property
    def strides(self) -> Strides:
        return self._strides

    @property
    def shape(self) -> Shape:
        return self.strides.shape

    def get(self, index: Sequence[int]) -> Any:
        return self.buffer[self.strides.offset(index)]

    def elements(self) -> Iterator[Tuple[Index, Any]]:
        strides = self.strides
        buffer = self.buffer
        for offset, index in enumerate(strides.indices()):
            yield index, buffer[offset]


class ArrayStructure(NDStructure):
    """Foreign structure over an arbitrary numpy array (any memory order)."""

    def __init__(self, array: Any):
        self.array = np.asarray(array)

    @property
    def shape(self) -> Shape:
        return tuple(int(dim) for dim in self.array.shape)

    def get(self, index: Sequence[int]) -> Any:
        coords = tuple(index)
        shape = self.shape
        if len(coords) != len(shape) or any(
            not 0 <= coord < dim for coord, dim in zip(coords, shape)
        ):
            raise NDIndexError("Index out of bounds", index=coords, shape=shape)
        value = self.array[coords]
        return value.item() if isinstance(value, np.generic) else value


def nd_structure(
    shape: Sequence[int],
    initializer: Callable[[Index], Any],
    factory: Optional[BufferFactory] = None,
) -> NDBuffer:
    strides = DefaultStrides.create(normalize_shape(shape))
    build = factory or boxing
    buffer = build(strides.linear_size, lambda offset: initializer(strides.index(offset)))
    return NDBuffer(buffer, strides)


def content_equals(a: NDStructure, b: NDStructure) -> bool:
    if tuple(a.shape) != tuple(b.shape):
        return False
    if isinstance(a, NDBuffer) and isinstance(b, NDBuffer) and a.strides == b.strides:
        return a.buffer.content_equals(b.buffer)
    return all(value == b.get(index) for index, value in a.elements())


def to_numpy(structure: NDStructure, dtype: Any = None) -> np.ndarray:
    if isinstance(structure, ArrayStructure):
        return np.array(structure.array, dtype=dtype)
    values = [value for _, value in structure.elements()]
    if dtype is None:
        dtype = getattr(getattr(structure, "buffer", None), "dtype", None)
    flat = np.array(values, dtype=dtype)
    return flat.reshape(structure.shape)
