# file: src/upiqr/rs_encoder.py

"""
Reed-Solomon error correction for QR codewords.

Computes per-block EC codewords with the QR generator polynomial and
interleaves data and EC codewords into final symbol order.
"""

from typing import List, Sequence

from .errors import InternalConsistencyError
from .gf256 import gexp
from .polynomial import Polynomial
from .rs_blocks import RSBlock


def generator_polynomial(ec_count: int) -> Polynomial:
    """
    Build the degree-ec_count generator: product of (x - alpha^i), i < ec_count.
    """
    if ec_count < 0:
        raise ValueError(f"ec_count must be >= 0, got {ec_count}")

    generator = Polynomial([1])
    for i in range(ec_count):
        generator = generator * Polynomial([1, gexp(i)])
    return generator


def compute_ec_codewords(data: bytes, ec_count: int) -> bytes:
    """
    Compute the EC codewords for one block of data.

    Args:
        data: Data codewords of the block
        ec_count: Number of EC codewords to produce

    Returns:
        Exactly ec_count bytes: remainder of data * x^ec_count mod generator
    """
    if ec_count == 0:
        return b""
    if len(data) == 0:
        return bytes(ec_count)

    generator = generator_polynomial(ec_count)
    remainder = Polynomial(data, ec_count) % generator

    # Left-pad a short remainder; keep only the low ec_count terms
    coefficients = list(remainder)
    if len(coefficients) < ec_count:
        coefficients = [0] * (ec_count - len(coefficients)) + coefficients
    return bytes(coefficients[-ec_count:])


def create_codewords(data_codewords: bytes, rs_blocks: Sequence[RSBlock]) -> bytes:
    """
    Split data across blocks, append EC codewords, and interleave.

    Data codewords are emitted column-major across blocks, followed by EC
    codewords in the same order.

    Raises:
        InternalConsistencyError: If codeword counts disagree with the blocks
    """
    expected_data = sum(block.data_codewords for block in rs_blocks)
    if len(data_codewords) != expected_data:
        raise InternalConsistencyError(
            f"Got {len(data_codewords)} data codewords, blocks expect {expected_data}"
        )

    data_blocks: List[bytes] = []
    ec_blocks: List[bytes] = []
    offset = 0
    for block in rs_blocks:
        chunk = data_codewords[offset:offset + block.data_codewords]
        offset += block.data_codewords
        data_blocks.append(chunk)
        ec_blocks.append(compute_ec_codewords(chunk, block.ec_codewords))

    output = bytearray()
    for blocks in (data_blocks, ec_blocks):
        width = max((len(b) for b in blocks), default=0)
        for i in range(width):
            for b in blocks:
                if i < len(b):
                    output.append(b[i])

    total = sum(block.total_codewords for block in rs_blocks)
    if len(output) != total:
        raise InternalConsistencyError(
            f"Interleaved {len(output)} codewords, blocks expect {total}"
        )
    return bytes(output)
