# file: src/upiqr/gf256.py

"""
GF(256) arithmetic for QR Reed-Solomon coding.

The field is generated by alpha = 2 over the QR primitive polynomial
x^8 + x^4 + x^3 + x^2 + 1. Tables are built once at import and are
read-only afterwards.
"""

from typing import Tuple

from .errors import DomainError


def _build_tables() -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    exp = [0] * 256
    log = [0] * 256

    for i in range(8):
        exp[i] = 1 << i
    for i in range(8, 256):
        exp[i] = exp[i - 4] ^ exp[i - 5] ^ exp[i - 6] ^ exp[i - 8]
    for i in range(255):
        log[exp[i]] = i

    return tuple(exp), tuple(log)


EXP_TABLE, LOG_TABLE = _build_tables()


def gexp(n: int) -> int:
    """Return alpha^n for any integer n."""
    return EXP_TABLE[n % 255]


def glog(n: int) -> int:
    """
    Return the discrete log of n.

    Raises:
        DomainError: If n is not in [1, 255]
    """
    if n < 1 or n > 255:
        raise DomainError(f"glog({n}) is undefined in GF(256)")
    return LOG_TABLE[n]


def gmul(a: int, b: int) -> int:
    """Multiply two field elements."""
    if a == 0 or b == 0:
        return 0
    return gexp(LOG_TABLE[a] + LOG_TABLE[b])
