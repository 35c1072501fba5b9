"""
Element fields.

A :class:`Field` is a capability object: it carries the distinguished ``zero``
and ``one`` elements together with the four arithmetic operators over some
element type. Array contexts are generic over the field instance, not over a
concrete Python number type, so the same strided machinery works for floats,
exact rationals or modular integers alike.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Any, Generic, Optional, TypeVar

import numpy as np

T = TypeVar("T")

__all__ = [
    "Field",
    "RealField",
    "ComplexField",
    "RationalField",
    "PrimeField",
]


class Field(Generic[T]):
    """Abstract field over elements of type ``T``.

    Field axioms are assumed, never validated. Errors raised by the underlying
    operators (for example ``ZeroDivisionError``) propagate to the caller.
    """

    dtype: Optional[np.dtype] = None

    @property
    def zero(self) -> T:
        raise NotImplementedError

    @property
    def one(self) -> T:
        raise NotImplementedError

    def add(self, a: T, b: T) -> T:
        raise NotImplementedError

    def subtract(self, a: T, b: T) -> T:
        raise NotImplementedError

    def multiply(self, a: T, b: T) -> T:
        raise NotImplementedError

    def divide(self, a: T, b: T) -> T:
        raise NotImplementedError

    def negate(self, a: T) -> T:
        return self.subtract(self.zero, a)

    def coerce(self, value: Any) -> T:
        return value

    def scale(self, a: T, k: Any) -> T:
        return self.multiply(a, self.coerce(k))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class _NativeField(Field[T]):
    # Fields whose elements already implement the arithmetic dunders.

    def add(self, a: T, b: T) -> T:
        return a + b

    def subtract(self, a: T, b: T) -> T:
        return a - b

    def multiply(self, a: T, b: T) -> T:
        return a * b

    def divide(self, a: T, b: T) -> T:
        return a / b

    def negate(self, a: T) -> T:
        return -a


class RealField(_NativeField[float]):
    dtype = np.dtype(np.float64)

    @property
    def zero(self) -> float:
        return 0.0

    @property
    def one(self) -> float:
        return 1.0

    def coerce(self, value: Any) -> float:
        return float(value)


class ComplexField(_NativeField[complex]):
    dtype = np.dtype(np.complex128)

    @property
    def zero(self) -> complex:
        return 0j

    @property
    def one(self) -> complex:
        return 1 + 0j

    def coerce(self, value: Any) -> complex:
        return complex(value)


class RationalField(_NativeField[Fraction]):
    @property
    def zero(self) -> Fraction:
        return Fraction(0)

    @property
    def one(self) -> Fraction:
        return Fraction(1)

    def coerce(self, value: Any) -> Fraction:
        if isinstance(value, Fraction):
            return value
        return Fraction(value)


class PrimeField(Field[int]):
    """Integers modulo a prime ``p``."""

    def __init__(self, modulus: int):
        modulus = int(modulus)
        if modulus < 2 or not _is_prime(modulus):
            raise ValueError(f"PrimeField modulus must be prime; received {modulus}")
        self.modulus = modulus

    @property
    def zero(self) -> int:
        return 0

    @property
    def one(self) -> int:
        return 1

    def coerce(self, value: Any) -> int:
        return int(value) % self.modulus

    def add(self, a: int, b: int) -> int:
        return (a + b) % self.modulus

    def subtract(self, a: int, b: int) -> int:
        return (a - b) % self.modulus

    def multiply(self, a: int, b: int) -> int:
        return (a * b) % self.modulus

    def divide(self, a: int, b: int) -> int:
        if b % self.modulus == 0:
            raise ZeroDivisionError(f"division by zero in GF({self.modulus})")
        return (a * pow(b, -1, self.modulus)) % self.modulus

    def negate(self, a: int) -> int:
        return (-a) % self.modulus

    def __repr__(self) -> str:
        return f"PrimeField({self.modulus})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PrimeField) and other.modulus == self.modulus

    def __hash__(self) -> int:
        return hash(("PrimeField", self.modulus))


def _is_prime(n: int) -> bool:
    if n < 4:
        return n >= 2
    if n % 2 == 0:
        return False
    divisor = 3
    while divisor * divisor <= n:
        if n % divisor == 0:
            return False
        divisor += 2
    return True
