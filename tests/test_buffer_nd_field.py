import threading
from fractions import Fraction

import numpy as np
import pytest

from ndfield import (
    ArrayBuffer,
    ArrayStructure,
    BufferNDElement,
    BufferNDField,
    DefaultStrides,
    ListBuffer,
    NDBuffer,
    PrimeField,
    RationalField,
    RealField,
    ShapeMismatchError,
    boxing,
    nd_field,
    nd_structure,
)


def _values(structure):
    return [value for _, value in structure.elements()]


def test_produce_evaluates_generator_at_every_index():
    ctx = nd_field((2, 2), RealField())
    a = ctx.produce(lambda idx: idx[0] + idx[1])
    assert isinstance(a, BufferNDElement)
    assert a.context is ctx
    assert a.get((0, 0)) == 0
    assert a.get((0, 1)) == 1
    assert a.get((1, 0)) == 1
    assert a.get((1, 1)) == 2


def test_zero_and_one_are_filled_and_cached():
    ctx = nd_field((2, 2), RealField())
    assert _values(ctx.zero) == [0.0] * 4
    assert _values(ctx.one) == [1.0] * 4
    assert ctx.zero is ctx.zero
    assert ctx.one is ctx.one


def test_zero_is_computed_once_under_concurrent_access():
    calls = []

    def counting_factory(size, initializer):
        calls.append(size)
        return boxing(size, initializer)

    ctx = BufferNDField((64,), RealField(), counting_factory)
    barrier = threading.Barrier(8)
    results = []

    def read_zero():
        barrier.wait()
        results.append(ctx.zero)

    threads = [threading.Thread(target=read_zero) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert all(result is results[0] for result in results)


def test_map_applies_transform_per_element():
    ctx = nd_field((3,), RationalField())
    a = ctx.produce(lambda idx: Fraction(idx[0], 3))
    doubled = ctx.map(a, lambda value: value * 2)
    assert _values(doubled) == [Fraction(0), Fraction(2, 3), Fraction(4, 3)]
    assert _values(a) == [Fraction(0), Fraction(1, 3), Fraction(2, 3)]


def test_map_indexed_passes_recovered_index():
    ctx = nd_field((2, 3), RealField())
    seen = []

    def transform(index, value):
        seen.append(index)
        return value + 100 * index[0] + index[1]

    result = ctx.map_indexed(ctx.zero, transform)
    assert seen == list(DefaultStrides((2, 3)).indices())
    assert result.get((1, 2)) == 102.0


def test_combine_matches_by_position():
    ctx = nd_field((2, 2), PrimeField(5))
    a = ctx.produce(lambda idx: 2 * idx[0] + idx[1])
    b = ctx.produce(lambda idx: 4)
    result = ctx.combine(a, b, ctx.element_field.add)
    assert _values(result) == [4, 0, 1, 2]


def test_combine_rejects_different_shapes():
    small = nd_field((3,), RealField())
    large = nd_field((4,), RealField())
    a = small.produce(lambda idx: 1.0)
    b = large.produce(lambda idx: 1.0)
    with pytest.raises(ShapeMismatchError, match="strides") as excinfo:
        small.combine(a, b, lambda x, y: x + y)
    assert excinfo.value.expected == (3,)
    assert excinfo.value.actual == (4,)


def test_check_rejects_foreign_structures_without_strides():
    ctx = nd_field((2,), RealField())
    with pytest.raises(ShapeMismatchError):
        ctx.check(ArrayStructure(np.zeros(2)))
    with pytest.raises(ShapeMismatchError):
        ctx.map(ArrayStructure(np.zeros(2)), lambda value: value)


def test_contexts_with_equal_shapes_share_layout():
    first = nd_field((2, 2), RealField())
    second = nd_field((2, 2), RealField())
    a = first.produce(lambda idx: 1.0)
    b = second.produce(lambda idx: 2.0)
    result = first.combine(a, b, lambda x, y: x + y)
    assert _values(result) == [3.0] * 4


def test_to_buffer_is_free_for_compatible_buffers():
    ctx = nd_field((2, 3), RealField())
    a = ctx.produce(lambda idx: 1.0)
    assert ctx.to_buffer(a) is a
    plain = nd_structure((2, 3), lambda idx: 5.0)
    assert ctx.to_buffer(plain) is plain


def test_to_buffer_materializes_foreign_structures():
    ctx = nd_field((2, 3), RealField())
    array = np.asfortranarray(np.arange(6, dtype=np.float64).reshape(2, 3))
    foreign = ArrayStructure(array)
    converted = ctx.to_buffer(foreign)
    assert isinstance(converted, BufferNDElement)
    assert converted.strides == ctx.strides
    for index in ctx.strides.indices():
        assert converted.get(index) == foreign.get(index)


def test_to_buffer_rejects_shape_mismatch():
    ctx = nd_field((2, 3), RealField())
    with pytest.raises(ShapeMismatchError, match="expected \\(2, 3\\), got \\(3, 2\\)"):
        ctx.to_buffer(ArrayStructure(np.zeros((3, 2))))


def test_operations_never_mutate_inputs():
    ctx = nd_field((4,), RealField())
    a = ctx.produce(lambda idx: float(idx[0]))
    before = _values(a)
    ctx.map(a, lambda value: value * 10)
    ctx.combine(a, a, lambda x, y: x - y)
    ctx.map_indexed(a, lambda index, value: -value)
    assert _values(a) == before


def test_whole_array_algebra_accepts_any_structure():
    ctx = nd_field((2,), RealField())
    a = ctx.produce(lambda idx: 6.0 + idx[0])
    foreign = ArrayStructure(np.array([2.0, 7.0]))
    assert _values(ctx.add(a, foreign)) == [8.0, 14.0]
    assert _values(ctx.subtract(a, foreign)) == [4.0, 0.0]
    assert _values(ctx.multiply(a, foreign)) == [12.0, 49.0]
    assert _values(ctx.divide(a, foreign)) == [3.0, 1.0]
    assert _values(ctx.negate(a)) == [-6.0, -7.0]
    assert _values(ctx.scale(a, 2)) == [12.0, 14.0]
    assert ctx.content_equals(ctx.add(a, ctx.zero), a)


def test_field_errors_propagate_unchanged():
    ctx = nd_field((2,), RationalField())
    a = ctx.produce(lambda idx: Fraction(1))
    with pytest.raises(ZeroDivisionError):
        ctx.divide(a, ctx.zero)


def test_factory_and_config_select_storage():
    assert isinstance(nd_field((2,), RealField()).one.buffer, ArrayBuffer)
    assert isinstance(nd_field((2,), RationalField()).one.buffer, ListBuffer)
    assert isinstance(nd_field((2,), RealField(), factory=boxing).one.buffer, ListBuffer)


def test_rank_zero_context_holds_single_value():
    ctx = nd_field((), RealField())
    a = ctx.produce(lambda idx: 4.0)
    assert a.get(()) == 4.0
    assert list(a.elements()) == [((), 4.0)]
    assert isinstance(ctx.to_buffer(a), NDBuffer)


def test_materialization_is_logged(caplog):
    ctx = nd_field((2,), RealField())
    with caplog.at_level("DEBUG", logger="ndfield.core.fields"):
        ctx.to_buffer(ArrayStructure(np.zeros(2)))
    assert any("Materializing ArrayStructure" in record.getMessage() for record in caplog.records)
