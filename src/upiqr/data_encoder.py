# file: src/upiqr/data_encoder.py

"""
Data codeword construction for byte-mode QR symbols.

Builds the mode indicator, character count, payload, terminator and pad
codewords, sized exactly to a version's data capacity.
"""

from dataclasses import dataclass
from typing import Optional

from .bit_buffer import BitBuffer
from .errors import DataOverflowError
from .rs_blocks import check_version, data_codeword_count, ErrorCorrectionLevel


MODE_8BIT_BYTE = 0b0100
MODE_INDICATOR_BITS = 4
TERMINATOR_BITS = 4
PAD_CODEWORDS = (0xEC, 0x11)


@dataclass(frozen=True)
class DataEncodingResult:
    """Outcome of laying a payload into one version's data capacity."""
    version: int
    level: ErrorCorrectionLevel
    codewords: Optional[bytes]
    bits_needed: int
    capacity_bits: int

    @property
    def fits(self) -> bool:
        return self.codewords is not None


def length_in_bits(version: int) -> int:
    """Width of the byte-mode character count field."""
    return 8 if check_version(version) < 10 else 16


def byte_capacity(version: int, level) -> int:
    """Largest payload, in bytes, that fits the version at this level."""
    capacity_bits = data_codeword_count(version, level) * 8
    header_bits = MODE_INDICATOR_BITS + length_in_bits(version)
    return max((capacity_bits - header_bits) // 8, 0)


def encode_data(payload: bytes, version: int, level) -> DataEncodingResult:
    """
    Lay out payload as data codewords for one version.

    An overflowing payload is reported through the result rather than an
    exception, so callers can try the next version.

    Args:
        payload: Raw bytes to encode
        version: Symbol version (1-10)
        level: ErrorCorrectionLevel or its letter

    Returns:
        DataEncodingResult; `codewords` is None when the payload overflows
    """
    level = ErrorCorrectionLevel.parse(level)
    count_bits = length_in_bits(version)
    total_data_count = data_codeword_count(version, level)
    capacity_bits = total_data_count * 8

    bits_needed = MODE_INDICATOR_BITS + count_bits + len(payload) * 8
    if bits_needed > capacity_bits or len(payload) >= (1 << count_bits):
        return DataEncodingResult(version, level, None, bits_needed, capacity_bits)

    buffer = BitBuffer()
    buffer.append_bits(MODE_8BIT_BYTE, MODE_INDICATOR_BITS)
    buffer.append_bits(len(payload), count_bits)
    for byte in payload:
        buffer.append_bits(byte, 8)

    # Terminator, only when there is room for all four bits
    if buffer.bit_length() + TERMINATOR_BITS <= capacity_bits:
        buffer.append_bits(0, TERMINATOR_BITS)

    while buffer.bit_length() % 8 != 0:
        buffer.append_bit(0)

    pad_index = 0
    while buffer.byte_length() < total_data_count:
        buffer.append_bits(PAD_CODEWORDS[pad_index % 2], 8)
        pad_index += 1

    return DataEncodingResult(version, level, buffer.to_bytes(), bits_needed, capacity_bits)


def build_data_codewords(payload: bytes, version: int, level) -> bytes:
    """
    Build data codewords for one version.

    Raises:
        DataOverflowError: If the payload does not fit the version
        UnsupportedVersionError: If version is outside 1-10
    """
    result = encode_data(payload, version, level)
    if not result.fits:
        raise DataOverflowError(
            f"Payload needs {result.bits_needed} bits, version {version}-{result.level.name} "
            f"holds {result.capacity_bits}",
            bits_needed=result.bits_needed,
            capacity_bits=result.capacity_bits,
        )
    return result.codewords
