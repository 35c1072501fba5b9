from __future__ import annotations

import logging
import operator
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterator, Optional, Sequence, TypeVar

import numpy as np

from .exceptions import NDIndexError

if TYPE_CHECKING:
    from .algebra import Field

T = TypeVar("T")

logger = logging.getLogger(__name__)

Initializer = Callable[[int], Any]
BufferFactory = Callable[[int, Initializer], "Buffer"]


class Buffer(Generic[T]):
    """Fixed-size, read-only flat store addressed by linear offset."""

    def __len__(self) -> int:
        raise NotImplementedError

    def _get(self, offset: int) -> T:
        raise NotImplementedError

    def __getitem__(self, offset: int) -> T:
        offset = operator.index(offset)
        if not 0 <= offset < len(self):
            raise NDIndexError(
                f"Buffer offset {offset} outside [0, {len(self)})",
                index=offset,
            )
        return self._get(offset)

    def __iter__(self) -> Iterator[T]:
        for offset in range(len(self)):
            yield self._get(offset)

    def content_equals(self, other: "Buffer") -> bool:
        if len(self) != len(other):
            return False
        return all(a == b for a, b in zip(self, other))

    @property
    def size(self) -> int:
        return len(self)


class ListBuffer(Buffer[T]):
    """Boxing buffer holding arbitrary Python objects."""

    __slots__ = ("_items",)

    def __init__(self, items: Sequence[T]):
        self._items = tuple(items)

    def __len__(self) -> int:
        return len(self._items)

    def _get(self, offset: int) -> T:
        return self._items[offset]

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"ListBuffer({list(self._items)!r})"


class ArrayBuffer(Buffer[Any]):
    """Dense buffer over a one-dimensional numpy array.

    The wrapped array is flagged read-only; numpy scalars are read back as
    Python scalars, object-dtype elements are returned as stored.
    """

    __slots__ = ("array",)

    def __init__(self, array: np.ndarray):
        array = np.asarray(array)
        if array.ndim != 1:
            raise ValueError(f"ArrayBuffer requires a 1-d array; received ndim={array.ndim}")
        if array.flags.writeable:
            array = array.copy()
            array.setflags(write=False)
        self.array = array

    def __len__(self) -> int:
        return int(self.array.shape[0])

    def _get(self, offset: int) -> Any:
        value = self.array[offset]
        return value.item() if isinstance(value, np.generic) else value

    def __iter__(self) -> Iterator[Any]:
        return iter(self.array.tolist())

    def content_equals(self, other: Buffer) -> bool:
        if isinstance(other, ArrayBuffer):
            return bool(np.array_equal(self.array, other.array))
        return super().content_equals(other)

    @property
    def dtype(self) -> np.dtype:
        return self.array.dtype

    def __repr__(self) -> str:
        return f"ArrayBuffer({self.array!r})"


def boxing(size: int, initializer: Initializer) -> ListBuffer:
    return ListBuffer([initializer(offset) for offset in range(size)])


def numpy_factory(dtype: Any = np.float64) -> BufferFactory:
    resolved = np.dtype(dtype)

    def factory(size: int, initializer: Initializer) -> ArrayBuffer:
        values = np.fromiter(
            (initializer(offset) for offset in range(size)),
            dtype=resolved,
            count=size,
        )
        values.setflags(write=False)
        return ArrayBuffer(values)

    factory.__name__ = f"numpy_factory[{resolved.name}]"
    return factory


def auto_factory(field: "Field", dtype: Optional[Any] = None) -> BufferFactory:
    target = dtype if dtype is not None else getattr(field, "dtype", None)
    if target is None:
        logger.debug("Using boxing buffers for %r", field)
        return boxing
    logger.debug("Using numpy buffers (dtype=%s) for %r", np.dtype(target), field)
    return numpy_factory(target)


def as_buffer(values: Any) -> Buffer:
    if isinstance(values, Buffer):
        return values
    if isinstance(values, np.ndarray):
        return ArrayBuffer(values.reshape(-1))
    return ListBuffer(list(values))
