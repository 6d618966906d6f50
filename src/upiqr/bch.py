# file: src/upiqr/bch.py

"""
BCH codes protecting QR format and version information.

Format info is a BCH(15,5) codeword over (level, mask) XOR-ed with a fixed
mask; version info is a BCH(18,6) codeword over the version number.
"""

from typing import Tuple

from .rs_blocks import ErrorCorrectionLevel


G15 = (1 << 10) | (1 << 8) | (1 << 5) | (1 << 4) | (1 << 2) | (1 << 1) | (1 << 0)
G18 = (1 << 12) | (1 << 11) | (1 << 10) | (1 << 9) | (1 << 8) | (1 << 5) | (1 << 2) | (1 << 0)
G15_MASK = (1 << 14) | (1 << 12) | (1 << 10) | (1 << 4) | (1 << 1)


def bch_digit(data: int) -> int:
    """Number of significant bits in data."""
    digit = 0
    while data != 0:
        digit += 1
        data >>= 1
    return digit


def _remainder(data: int, generator: int) -> int:
    while bch_digit(data) - bch_digit(generator) >= 0:
        data ^= generator << (bch_digit(data) - bch_digit(generator))
    return data


def format_info_bits(level, mask_pattern: int) -> int:
    """Return the 15-bit masked format codeword for (level, mask)."""
    level = ErrorCorrectionLevel.parse(level)
    if not 0 <= mask_pattern <= 7:
        raise ValueError(f"mask_pattern must be 0-7, got {mask_pattern}")

    data = (level.format_bits << 3) | mask_pattern
    return ((data << 10) | _remainder(data << 10, G15)) ^ G15_MASK


def version_info_bits(version: int) -> int:
    """Return the 18-bit version codeword (only placed for versions >= 7)."""
    return (version << 12) | _remainder(version << 12, G18)


def format_syndrome(bits: int) -> int:
    """Zero when bits is a valid masked format codeword."""
    return _remainder(bits ^ G15_MASK, G15)


def decode_format_info(bits: int) -> Tuple[ErrorCorrectionLevel, int]:
    """
    Recover (level, mask) from a 15-bit format codeword.

    Raises:
        ValueError: If the syndrome check fails
    """
    if format_syndrome(bits) != 0:
        raise ValueError(f"Invalid format information: {bits:015b}")

    data = (bits ^ G15_MASK) >> 10
    return ErrorCorrectionLevel(data >> 3), data & 0b111
