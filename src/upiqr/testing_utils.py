# file: src/upiqr/testing_utils.py

"""
Testing utilities for the QR encoder.

Provides a reference symbol reader that recovers the payload from a module
matrix, and module-error injection for robustness testing.
Used only in test/evaluation contexts.
"""

import random
from typing import List, Optional, Tuple

import numpy as np
from reedsolo import RSCodec, ReedSolomonError

from .bch import decode_format_info, format_info_bits
from .bit_buffer import BitBuffer
from .data_encoder import MODE_8BIT_BYTE, MODE_INDICATOR_BITS, length_in_bits
from .masking import mask_grid
from .matrix import MatrixBuilder, data_module_order, format_info_positions
from .rs_blocks import ErrorCorrectionLevel, RSBlock, get_rs_blocks, total_codeword_count


def _as_modules(symbol) -> np.ndarray:
    if isinstance(symbol, np.ndarray):
        return symbol.astype(bool)
    matrix = getattr(symbol, "matrix", symbol)
    return matrix.to_array()


def _version_of(modules: np.ndarray) -> int:
    module_count = modules.shape[0]
    if modules.shape != (module_count, module_count) or (module_count - 17) % 4 != 0:
        raise ValueError(f"Not a QR module grid: shape {modules.shape}")
    return (module_count - 17) // 4


def read_format_copies(symbol) -> List[int]:
    """Raw 15-bit values of both format-info copies."""
    modules = _as_modules(symbol)
    copies = []
    for positions in format_info_positions(modules.shape[0]):
        bits = 0
        for i, (row, col) in enumerate(positions):
            if modules[row, col]:
                bits |= 1 << i
        copies.append(bits)
    return copies


def _nearest_format(bits: int) -> Tuple[ErrorCorrectionLevel, int]:
    best = None
    best_distance = 16
    for level in ErrorCorrectionLevel:
        for mask_pattern in range(8):
            distance = bin(bits ^ format_info_bits(level, mask_pattern)).count("1")
            if distance < best_distance:
                best = (level, mask_pattern)
                best_distance = distance
    if best_distance > 3:
        raise ValueError(f"Format information unreadable: {bits:015b}")
    return best


def read_format_info(symbol) -> Tuple[ErrorCorrectionLevel, int]:
    """
    Recover (level, mask) from the format area.

    Each copy is validated by BCH syndrome; a copy that fails is corrected to
    the nearest valid codeword (up to 3 bit errors).
    """
    for bits in read_format_copies(symbol):
        try:
            return decode_format_info(bits)
        except ValueError:
            continue
    return _nearest_format(read_format_copies(symbol)[0])


def _deinterleave(codewords: bytes, rs_blocks: Tuple[RSBlock, ...]) -> List[bytearray]:
    blocks = [bytearray() for _ in rs_blocks]
    index = 0

    for i in range(max(b.data_codewords for b in rs_blocks)):
        for r, block in enumerate(rs_blocks):
            if i < block.data_codewords:
                blocks[r].append(codewords[index])
                index += 1
    for i in range(max(b.ec_codewords for b in rs_blocks)):
        for r, block in enumerate(rs_blocks):
            if i < block.ec_codewords:
                blocks[r].append(codewords[index])
                index += 1
    return blocks


def read_codewords(symbol) -> Tuple[bytes, ErrorCorrectionLevel, int]:
    """
    Unmask the data area and return (interleaved codewords, level, mask).
    """
    modules = _as_modules(symbol)
    version = _version_of(modules)
    level, mask_pattern = read_format_info(modules)

    builder = MatrixBuilder(version).place_function_patterns().reserve_format_area()
    flips = mask_grid(mask_pattern, modules.shape[0])

    buffer = BitBuffer()
    for row, col in data_module_order(builder.matrix.reserved):
        buffer.append_bit(bool(modules[row, col]) ^ bool(flips[row, col]))

    return buffer.to_bytes()[:total_codeword_count(version)], level, mask_pattern


def read_symbol(symbol) -> bytes:
    """
    Recover the byte-mode payload from a module matrix.

    Every block is checked (and corrected where possible) with an
    independent Reed-Solomon decoder.

    Args:
        symbol: QRSymbol, ModuleMatrix, or (N, N) boolean array (True = dark)

    Returns:
        payload: The encoded bytes

    Raises:
        ValueError: If the symbol cannot be read
    """
    modules = _as_modules(symbol)
    version = _version_of(modules)
    codewords, level, _ = read_codewords(modules)
    rs_blocks = get_rs_blocks(version, level)

    data = bytearray()
    for block, raw in zip(rs_blocks, _deinterleave(codewords, rs_blocks)):
        codec = RSCodec(block.ec_codewords)
        try:
            decoded = codec.decode(bytes(raw))
        except ReedSolomonError as e:
            raise ValueError(f"Reed-Solomon block unrecoverable: {e}") from e
        decoded_block = decoded[0] if isinstance(decoded, (tuple, list)) else decoded
        data.extend(decoded_block)

    return parse_byte_segment(bytes(data), version)


def parse_byte_segment(data: bytes, version: int) -> bytes:
    """Parse mode indicator, count and payload from data codewords."""
    buffer = BitBuffer()
    for byte in data:
        buffer.append_bits(byte, 8)

    def take(position: int, width: int) -> int:
        value = 0
        for i in range(position, position + width):
            value = (value << 1) | buffer.bit(i)
        return value

    mode = take(0, MODE_INDICATOR_BITS)
    if mode != MODE_8BIT_BYTE:
        raise ValueError(f"Unsupported mode indicator {mode:04b}")

    count_bits = length_in_bits(version)
    count = take(MODE_INDICATOR_BITS, count_bits)
    start = MODE_INDICATOR_BITS + count_bits
    if start + count * 8 > buffer.bit_length():
        raise ValueError(f"Character count {count} exceeds data length")

    return bytes(take(start + 8 * i, 8) for i in range(count))


def flip_modules(symbol, num_errors: int, seed: Optional[int] = None) -> np.ndarray:
    """
    Flip randomly chosen data modules for robustness testing.

    Function patterns and format cells are never touched.

    Returns:
        Corrupted (N, N) boolean module array
    """
    modules = _as_modules(symbol).copy()
    version = _version_of(modules)
    builder = MatrixBuilder(version).place_function_patterns().reserve_format_area()
    positions = data_module_order(builder.matrix.reserved)

    if num_errors > len(positions):
        raise ValueError("More errors requested than data modules")

    rng = random.Random(seed)
    for row, col in rng.sample(positions, num_errors):
        modules[row, col] = not modules[row, col]
    return modules
