from __future__ import annotations

from typing import Optional, Sequence, Tuple


class NDFieldError(Exception):
    """Base class for ndfield-specific exceptions."""


class ShapeError(NDFieldError, ValueError):
    def __init__(
        self,
        message: str,
        *,
        shape: Optional[Sequence[int]] = None,
    ):
        detail = _format_shape("shape", shape)
        super().__init__(f"{message}{detail}")
        self.shape = tuple(shape) if shape is not None else None


class ShapeMismatchError(ShapeError):
    def __init__(
        self,
        message: str,
        *,
        expected: Optional[Sequence[int]] = None,
        actual: Optional[Sequence[int]] = None,
    ):
        detail = _format_pair(expected, actual)
        super(ShapeError, self).__init__(f"{message}{detail}")
        self.shape = tuple(expected) if expected is not None else None
        self.expected = self.shape
        self.actual = tuple(actual) if actual is not None else None


class NDIndexError(NDFieldError, IndexError):
    def __init__(
        self,
        message: str,
        *,
        index: Optional[object] = None,
        shape: Optional[Sequence[int]] = None,
    ):
        detail = _format_index(index, shape)
        super().__init__(f"{message}{detail}")
        self.index = index
        self.shape = tuple(shape) if shape is not None else None


class ConfigError(NDFieldError, ValueError):
    pass


def _shape_str(shape: Tuple[int, ...]) -> str:
    return "(" + ", ".join(str(dim) for dim in shape) + ")"


def _format_shape(label: str, shape: Optional[Sequence[int]]) -> str:
    if shape is None:
        return ""
    return f" ({label} {_shape_str(tuple(shape))})"


def _format_pair(
    expected: Optional[Sequence[int]],
    actual: Optional[Sequence[int]],
) -> str:
    parts = []
    if expected is not None:
        parts.append(f"expected {_shape_str(tuple(expected))}")
    if actual is not None:
        parts.append(f"got {_shape_str(tuple(actual))}")
    if not parts:
        return ""
    return f" ({', '.join(parts)})"


def _format_index(index: Optional[object], shape: Optional[Sequence[int]]) -> str:
    if index is None and shape is None:
        return ""
    location = []
    if index is not None:
        location.append(f"index {index!r}")
    if shape is not None:
        location.append(f"shape {_shape_str(tuple(shape))}")
    return f" ({', '.join(location)})"
