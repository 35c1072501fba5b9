"""
Element-wise field algebra over buffer-backed N-dimensional arrays.

A :class:`BufferNDField` is the algebraic context for one shape and one element
field. It owns the canonical :class:`~ndfield.core.strides.DefaultStrides` for
that shape and a buffer factory, and produces :class:`BufferNDElement` values
that keep a back-reference to it so arithmetic can be written with ordinary
operators::

    ctx = nd_field((2, 2), RealField())
    a = ctx.produce(lambda idx: idx[0] + idx[1])
    b = (a + 10) * 2
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

import numpy as np

from .algebra import Field
from .buffers import Buffer, BufferFactory
from .config import BufferConfig, resolve_factory
from .exceptions import ShapeMismatchError
from .strides import DefaultStrides, Index, Shape, Strides, normalize_shape
from .structures import NDBuffer, NDStructure, content_equals, to_numpy

T = TypeVar("T")

logger = logging.getLogger(__name__)

__all__ = [
    "StridedNDField",
    "BufferNDField",
    "BufferNDElement",
    "nd_field",
    "elementwise",
]


class StridedNDField(Generic[T]):
    """Context over a fixed shape whose arrays share one strides layout."""

    def __init__(self, shape: Sequence[int], element_field: Field[T]):
        self.shape: Shape = normalize_shape(shape)
        self.element_field = element_field
        self.strides: Strides = DefaultStrides.create(self.shape)

    def build_buffer(self, size: int, initializer: Callable[[int], T]) -> Buffer:
        raise NotImplementedError

    def check(self, *elements: NDStructure) -> None:
        raise NotImplementedError

    def produce(self, generator: Callable[[Index], T]) -> NDBuffer:
        raise NotImplementedError

    def map(self, arg: NDBuffer, transform: Callable[[T], T]) -> NDBuffer:
        raise NotImplementedError

    def map_indexed(self, arg: NDBuffer, transform: Callable[[Index, T], T]) -> NDBuffer:
        raise NotImplementedError

    def combine(self, a: NDBuffer, b: NDBuffer, transform: Callable[[T, T], T]) -> NDBuffer:
        raise NotImplementedError

    def to_buffer(self, structure: NDStructure) -> NDBuffer:
        """Return ``structure`` laid out with this context's strides.

        Conversion is free when ``structure`` already is an :class:`NDBuffer`
        with compatible strides. Anything else is re-materialized by reading
        every index, which costs one ``get`` per element.
        """
        if isinstance(structure, NDBuffer) and structure.strides == self.strides:
            return structure
        if tuple(structure.shape) != self.shape:
            raise ShapeMismatchError(
                "Structure shape does not match context shape",
                expected=self.shape,
                actual=structure.shape,
            )
        logger.debug(
            "Materializing %s of shape %s into context buffer",
            type(structure).__name__,
            self.shape,
        )
        return self.produce(structure.get)

    @property
    def linear_size(self) -> int:
        return self.strides.linear_size

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shape={self.shape}, field={self.element_field!r})"


class BufferNDField(StridedNDField[T]):
    def __init__(
        self,
        shape: Sequence[int],
        element_field: Field[T],
        buffer_factory: BufferFactory,
    ):
        super().__init__(shape, element_field)
        self.buffer_factory = buffer_factory
        self._lock = threading.Lock()
        self._zero: Optional[BufferNDElement[T]] = None
        self._one: Optional[BufferNDElement[T]] = None
        logger.debug("Created %r", self)

    def build_buffer(self, size: int, initializer: Callable[[int], T]) -> Buffer:
        return self.buffer_factory(size, initializer)

    def check(self, *elements: NDStructure) -> None:
        for element in elements:
            strides = getattr(element, "strides", None)
            if strides != self.strides:
                raise ShapeMismatchError(
                    "Element strides are not the same as context strides",
                    expected=self.shape,
                    actual=getattr(element, "shape", None),
                )

    # Cached constants ------------------------------------------------------

    @property
    def zero(self) -> "BufferNDElement[T]":
        cached = self._zero
        if cached is None:
            with self._lock:
                if self._zero is None:
                    logger.debug("Computing zero array for %r", self)
                    value = self.element_field.zero
                    self._zero = self.produce(lambda _: value)
                cached = self._zero
        return cached

    @property
    def one(self) -> "BufferNDElement[T]":
        cached = self._one
        if cached is None:
            with self._lock:
                if self._one is None:
                    logger.debug("Computing one array for %r", self)
                    value = self.element_field.one
                    self._one = self.produce(lambda _: value)
                cached = self._one
        return cached

    # Element-wise primitives -----------------------------------------------

    def produce(self, generator: Callable[[Index], T]) -> "BufferNDElement[T]":
        strides = self.strides
        return BufferNDElement(
            self,
            self.build_buffer(strides.linear_size, lambda offset: generator(strides.index(offset))),
        )

    def map(self, arg: NDBuffer, transform: Callable[[T], T]) -> "BufferNDElement[T]":
        self.check(arg)
        source = arg.buffer
        return BufferNDElement(
            self,
            self.build_buffer(self.strides.linear_size, lambda offset: transform(source[offset])),
        )

    def map_indexed(
        self,
        arg: NDBuffer,
        transform: Callable[[Index, T], T],
    ) -> "BufferNDElement[T]":
        self.check(arg)
        source = arg.buffer
        strides = arg.strides
        return BufferNDElement(
            self,
            self.build_buffer(
                strides.linear_size,
                lambda offset: transform(strides.index(offset), source[offset]),
            ),
        )

    def combine(
        self,
        a: NDBuffer,
        b: NDBuffer,
        transform: Callable[[T, T], T],
    ) -> "BufferNDElement[T]":
        self.check(a, b)
        left = a.buffer
        right = b.buffer
        return BufferNDElement(
            self,
            self.build_buffer(
                self.strides.linear_size,
                lambda offset: transform(left[offset], right[offset]),
            ),
        )

    # Whole-array field algebra ---------------------------------------------

    def add(self, a: NDStructure, b: NDStructure) -> "BufferNDElement[T]":
        return self.combine(self.to_buffer(a), self.to_buffer(b), self.element_field.add)

    def subtract(self, a: NDStructure, b: NDStructure) -> "BufferNDElement[T]":
        return self.combine(self.to_buffer(a), self.to_buffer(b), self.element_field.subtract)

    def multiply(self, a: NDStructure, b: NDStructure) -> "BufferNDElement[T]":
        return self.combine(self.to_buffer(a), self.to_buffer(b), self.element_field.multiply)

    def divide(self, a: NDStructure, b: NDStructure) -> "BufferNDElement[T]":
        return self.combine(self.to_buffer(a), self.to_buffer(b), self.element_field.divide)

    def negate(self, a: NDStructure) -> "BufferNDElement[T]":
        return self.map(self.to_buffer(a), self.element_field.negate)

    def scale(self, a: NDStructure, k: Any) -> "BufferNDElement[T]":
        field = self.element_field
        return self.map(self.to_buffer(a), lambda value: field.scale(value, k))

    def content_equals(self, a: NDStructure, b: NDStructure) -> bool:
        return content_equals(self.to_buffer(a), self.to_buffer(b))


class BufferNDElement(NDBuffer, Generic[T]):
    """Array produced by a :class:`StridedNDField`; arithmetic delegates to it."""

    def __init__(self, context: StridedNDField[T], buffer: Buffer):
        super().__init__(buffer, context.strides)
        self.context = context

    @property
    def strides(self) -> Strides:
        return self.context.strides

    @property
    def shape(self) -> Shape:
        return self.context.shape

    @property
    def element_field(self) -> Field[T]:
        return self.context.element_field

    def _wrap(self, result: NDBuffer) -> "BufferNDElement[T]":
        if isinstance(result, BufferNDElement) and result.context is self.context:
            return result
        return BufferNDElement(self.context, result.buffer)

    def map(self, transform: Callable[[T], T]) -> "BufferNDElement[T]":
        return self._wrap(self.context.map(self, transform))

    def map_indexed(self, transform: Callable[[Index, T], T]) -> "BufferNDElement[T]":
        return self._wrap(self.context.map_indexed(self, transform))

    def apply(self, fn: Callable[[T], T]) -> "BufferNDElement[T]":
        return self.map(fn)

    def to_numpy(self, dtype: Any = None) -> np.ndarray:
        return to_numpy(self, dtype=dtype)

    def content_equals(self, other: NDStructure) -> bool:
        return content_equals(self, other)

    # Operators ---------------------------------------------------------------
    # Another NDStructure is combined element by element; anything else is
    # coerced to a single field element and applied at every position.

    def _binary(self, other: Any, op: Callable[[T, T], T], array_op) -> "BufferNDElement[T]":
        if isinstance(other, NDStructure):
            return self._wrap(array_op(self, other))
        scalar = self.element_field.coerce(other)
        return self.map(lambda value: op(value, scalar))

    def _reflected(self, other: Any, op: Callable[[T, T], T], array_op) -> "BufferNDElement[T]":
        if isinstance(other, NDStructure):
            return self._wrap(array_op(other, self))
        scalar = self.element_field.coerce(other)
        return self.map(lambda value: op(scalar, value))

    def __add__(self, other: Any) -> "BufferNDElement[T]":
        return self._binary(other, self.element_field.add, self.context.add)

    def __sub__(self, other: Any) -> "BufferNDElement[T]":
        return self._binary(other, self.element_field.subtract, self.context.subtract)

    def __mul__(self, other: Any) -> "BufferNDElement[T]":
        return self._binary(other, self.element_field.multiply, self.context.multiply)

    def __truediv__(self, other: Any) -> "BufferNDElement[T]":
        return self._binary(other, self.element_field.divide, self.context.divide)

    def __radd__(self, other: Any) -> "BufferNDElement[T]":
        return self._reflected(other, self.element_field.add, self.context.add)

    def __rsub__(self, other: Any) -> "BufferNDElement[T]":
        return self._reflected(other, self.element_field.subtract, self.context.subtract)

    def __rmul__(self, other: Any) -> "BufferNDElement[T]":
        return self._reflected(other, self.element_field.multiply, self.context.multiply)

    def __rtruediv__(self, other: Any) -> "BufferNDElement[T]":
        return self._reflected(other, self.element_field.divide, self.context.divide)

    def __neg__(self) -> "BufferNDElement[T]":
        return self._wrap(self.context.negate(self))

    def __pos__(self) -> "BufferNDElement[T]":
        return self

    def __repr__(self) -> str:
        return (
            f"BufferNDElement(shape={self.shape}, field={self.element_field!r}, "
            f"buffer={self.buffer!r})"
        )


def nd_field(
    shape: Sequence[int],
    element_field: Field[T],
    factory: Optional[BufferFactory] = None,
    config: Optional[BufferConfig] = None,
) -> BufferNDField[T]:
    """Build a :class:`BufferNDField`; an explicit ``factory`` wins over ``config``."""
    buffer_factory = factory if factory is not None else resolve_factory(config, element_field)
    return BufferNDField(shape, element_field, buffer_factory)


def elementwise(fn: Callable[[T], T]) -> Callable[[BufferNDElement[T]], BufferNDElement[T]]:
    """Lift a scalar function so it applies to every element of an array."""

    @functools.wraps(fn)
    def lifted(element: BufferNDElement[T]) -> BufferNDElement[T]:
        return element.map(fn)

    return lifted
