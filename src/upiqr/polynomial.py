# file: src/upiqr/polynomial.py

"""
Polynomials over GF(256).

Coefficients are stored highest degree first. Instances are immutable;
multiplication and reduction return new polynomials.
"""

from typing import Iterable, Iterator, Tuple

from .gf256 import gexp, glog


class Polynomial:
    """
    Immutable GF(256) polynomial.

    Leading zero coefficients are stripped on construction. A polynomial
    whose coefficients are all zero collapses to the single-zero polynomial.

    Args:
        coefficients: Coefficients, highest degree first (must be non-empty)
        shift: Number of zero coefficients appended (multiplies by x^shift)
    """

    __slots__ = ("_num",)

    def __init__(self, coefficients: Iterable[int], shift: int = 0):
        num = list(coefficients)
        if not num:
            raise ValueError("Polynomial requires at least one coefficient")

        offset = 0
        while offset < len(num) - 1 and num[offset] == 0:
            offset += 1
        num = num[offset:]

        if num != [0]:
            num.extend([0] * shift)

        self._num: Tuple[int, ...] = tuple(num)

    @property
    def coefficients(self) -> Tuple[int, ...]:
        return self._num

    @property
    def degree(self) -> int:
        return len(self._num) - 1

    def is_zero(self) -> bool:
        return self._num == (0,)

    def __getitem__(self, index: int) -> int:
        return self._num[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._num)

    def __len__(self) -> int:
        return len(self._num)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self._num == other._num

    def __hash__(self) -> int:
        return hash(self._num)

    def __repr__(self) -> str:
        return f"Polynomial({list(self._num)})"

    def __mul__(self, other: "Polynomial") -> "Polynomial":
        num = [0] * (len(self) + len(other) - 1)

        for i, item in enumerate(self):
            if item == 0:
                continue
            for j, other_item in enumerate(other):
                if other_item == 0:
                    continue
                num[i + j] ^= gexp(glog(item) + glog(other_item))

        return Polynomial(num)

    def __mod__(self, other: "Polynomial") -> "Polynomial":
        if other.is_zero():
            raise ZeroDivisionError("Polynomial division by zero")

        this = self
        while len(this) >= len(other) and not this.is_zero():
            ratio = glog(this[0]) - glog(other[0])

            num = list(this)
            for i, other_item in enumerate(other):
                if other_item != 0:
                    num[i] ^= gexp(glog(other_item) + ratio)

            this = Polynomial(num)

        return this
