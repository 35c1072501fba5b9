from fractions import Fraction

import numpy as np
import pytest

from ndfield import (
    ArrayBuffer,
    ListBuffer,
    NDIndexError,
    RationalField,
    RealField,
    as_buffer,
    auto_factory,
    boxing,
    numpy_factory,
)


def test_boxing_factory_calls_initializer_per_offset():
    buffer = boxing(4, lambda offset: Fraction(offset, 2))
    assert isinstance(buffer, ListBuffer)
    assert len(buffer) == 4
    assert list(buffer) == [Fraction(0), Fraction(1, 2), Fraction(1), Fraction(3, 2)]


def test_numpy_factory_builds_read_only_array():
    factory = numpy_factory("float32")
    buffer = factory(3, lambda offset: offset * 0.5)
    assert isinstance(buffer, ArrayBuffer)
    assert buffer.dtype == np.float32
    assert buffer[2] == 1.0
    assert isinstance(buffer[2], float)
    with pytest.raises(ValueError):
        buffer.array[0] = 5.0


def test_array_buffer_copies_writeable_input():
    source = np.arange(3, dtype=np.int64)
    buffer = ArrayBuffer(source)
    source[0] = 99
    assert buffer[0] == 0


def test_array_buffer_requires_one_dimension():
    with pytest.raises(ValueError, match="1-d"):
        ArrayBuffer(np.zeros((2, 2)))


@pytest.mark.parametrize("offset", [-1, 3])
def test_buffer_rejects_out_of_range_offsets(offset):
    buffer = boxing(3, lambda offset: offset)
    with pytest.raises(NDIndexError):
        buffer[offset]


def test_content_equals_across_buffer_kinds():
    boxed = boxing(3, float)
    dense = numpy_factory()(3, float)
    assert boxed.content_equals(dense)
    assert dense.content_equals(boxed)
    assert dense.content_equals(numpy_factory()(3, float))
    assert not boxed.content_equals(boxing(2, float))
    assert not boxed.content_equals(boxing(3, lambda offset: offset + 1.0))


def test_auto_factory_prefers_numpy_for_dtype_fields():
    assert auto_factory(RationalField()) is boxing
    buffer = auto_factory(RealField())(2, float)
    assert isinstance(buffer, ArrayBuffer)
    assert buffer.dtype == np.float64


def test_as_buffer_accepts_sequences_and_arrays():
    assert isinstance(as_buffer([1, 2]), ListBuffer)
    flat = as_buffer(np.ones((2, 3)))
    assert isinstance(flat, ArrayBuffer)
    assert len(flat) == 6
    existing = boxing(1, float)
    assert as_buffer(existing) is existing


def test_object_array_buffer_returns_stored_objects():
    buffer = as_buffer(np.array([Fraction(1, 3), Fraction(2, 3)], dtype=object))
    assert buffer[0] == Fraction(1, 3)
    assert isinstance(buffer[1], Fraction)
    assert list(buffer) == [Fraction(1, 3), Fraction(2, 3)]


def test_object_numpy_factory_keeps_exact_values():
    buffer = numpy_factory(object)(3, lambda offset: Fraction(offset, 3))
    assert buffer.dtype == np.dtype(object)
    assert buffer[2] == Fraction(2, 3)


def test_size_matches_length():
    assert boxing(4, float).size == 4
    assert numpy_factory()(2, float).size == 2
