# file: tests/test_codewords.py

"""
Unit tests for data codeword construction and Reed-Solomon encoding.

Test coverage:
    - Mode/count headers, terminator and pad codewords
    - Overflow reporting (result and exception forms)
    - Generator polynomials against published exponent tables
    - EC codewords against the reedsolo library
    - Block interleaving and consistency checks
"""

import pytest
from reedsolo import RSCodec

from upiqr.data_encoder import (
    build_data_codewords,
    byte_capacity,
    encode_data,
    length_in_bits,
)
from upiqr.errors import DataOverflowError, InternalConsistencyError
from upiqr.gf256 import gexp, gmul
from upiqr.rs_blocks import ErrorCorrectionLevel, RSBlock, get_rs_blocks
from upiqr.rs_encoder import compute_ec_codewords, create_codewords, generator_polynomial


HELLO_WORLD = b"HELLO WORLD"

# Byte-mode capacities at level M (ISO/IEC 18004 Table 7)
M_CAPACITY = {1: 14, 2: 26, 3: 42, 4: 62, 5: 84, 6: 106, 7: 122, 8: 152, 9: 180, 10: 213}


def reference_data_codewords(payload: bytes, version: int, data_count: int) -> bytes:
    """Independent string-based construction of byte-mode data codewords."""
    bits = "0100" + format(len(payload), "0%db" % length_in_bits(version))
    bits += "".join(format(b, "08b") for b in payload)
    if len(bits) + 4 <= data_count * 8:
        bits += "0000"
    bits += "0" * (-len(bits) % 8)
    out = [int(bits[i:i + 8], 2) for i in range(0, len(bits), 8)]
    pads = [0xEC, 0x11]
    while len(out) < data_count:
        out.append(pads[(len(out) - len(bits) // 8) % 2])
    return bytes(out)


def poly_eval(codeword: bytes, x: int) -> int:
    """Evaluate a codeword polynomial (highest degree first) at x."""
    value = 0
    for c in codeword:
        value = gmul(value, x) ^ c
    return value


class TestDataEncoder:
    """Test data codeword construction."""

    def test_hello_world_header(self):
        """Mode 0100, count 11, then payload bytes MSB-first."""
        data = build_data_codewords(HELLO_WORLD, 1, "M")
        assert data[:5] == bytes([0x40, 0xB4, 0x84, 0x54, 0xC4])

    def test_hello_world_terminator_and_pads(self):
        data = build_data_codewords(HELLO_WORLD, 1, "M")
        assert len(data) == 16
        assert data[12] == 0x40  # last payload nibble + terminator
        assert data[13:] == bytes([0xEC, 0x11, 0xEC])

    def test_matches_reference_construction(self):
        for version in (1, 4, 9, 10):
            for level in ErrorCorrectionLevel:
                payload = bytes(range(byte_capacity(version, level) // 2))
                data = build_data_codewords(payload, version, level)
                expected = reference_data_codewords(payload, version, len(data))
                assert data == expected

    def test_empty_payload(self):
        data = build_data_codewords(b"", 1, "L")
        assert data[:2] == bytes([0x40, 0x00])
        assert data[2:4] == bytes([0xEC, 0x11])
        assert len(data) == 19

    def test_terminator_fills_last_nibble(self):
        """A payload at full capacity still leaves room for the terminator."""
        payload = b"A" * 14
        data = build_data_codewords(payload, 1, "M")
        # 12 header + 112 payload bits = 124, 4 bits left: full terminator fits
        assert len(data) == 16
        assert data[-1] & 0x0F == 0

    def test_count_field_width(self):
        assert length_in_bits(9) == 8
        assert length_in_bits(10) == 16

    def test_count_field_16_bits_at_version_10(self):
        data = build_data_codewords(b"xyz", 10, "M")
        assert data[:3] == bytes([0x40, 0x00, 0x37])

    @pytest.mark.parametrize("version,capacity", sorted(M_CAPACITY.items()))
    def test_byte_capacity(self, version, capacity):
        assert byte_capacity(version, "M") == capacity

    def test_overflow_reported_as_result(self):
        result = encode_data(b"x" * 15, 1, "M")
        assert not result.fits
        assert result.codewords is None
        assert result.bits_needed == 12 + 15 * 8
        assert result.capacity_bits == 128

    def test_overflow_raises(self):
        with pytest.raises(DataOverflowError) as excinfo:
            build_data_codewords(b"x" * 15, 1, "M")
        assert excinfo.value.bits_needed == 132
        assert excinfo.value.capacity_bits == 128

    def test_exact_capacity_fits(self):
        assert encode_data(b"x" * 14, 1, "M").fits


class TestGeneratorPolynomial:
    """Test generator polynomials against published exponent forms."""

    def test_degree_7(self):
        exponents = (0, 87, 229, 146, 149, 238, 102, 21)
        assert generator_polynomial(7).coefficients == tuple(gexp(e) for e in exponents)

    def test_degree_10(self):
        exponents = (0, 251, 67, 46, 61, 118, 70, 64, 94, 32, 45)
        assert generator_polynomial(10).coefficients == tuple(gexp(e) for e in exponents)

    def test_roots(self):
        """alpha^0 .. alpha^(n-1) are roots of g_n."""
        generator = bytes(generator_polynomial(18).coefficients)
        for i in range(18):
            assert poly_eval(generator, gexp(i)) == 0

    def test_degree_zero(self):
        assert generator_polynomial(0).coefficients == (1,)


class TestReedSolomonEncoder:
    """Test EC codewords and interleaving."""

    def test_hello_world_codewords(self):
        """Data + EC for HELLO WORLD at 1-M matches an independent RS encoder."""
        data = build_data_codewords(HELLO_WORLD, 1, "M")
        codewords = create_codewords(data, get_rs_blocks(1, "M"))

        reference = bytes(RSCodec(10).encode(data))
        assert codewords == reference
        assert len(codewords) == 26

    def test_codeword_is_multiple_of_generator(self):
        data = bytes(range(1, 44))
        codeword = data + compute_ec_codewords(data, 26)
        for i in range(26):
            assert poly_eval(codeword, gexp(i)) == 0

    def test_ec_matches_reedsolo(self):
        data = b"upi://pay?pa=merchant@okaxis&pn=Cafe"
        for ec_count in (7, 10, 18, 26, 30):
            expected = bytes(RSCodec(ec_count).encode(data))[-ec_count:]
            assert compute_ec_codewords(data, ec_count) == expected

    def test_leading_zero_data(self):
        """Leading zero data codewords do not shorten the EC output."""
        data = bytes([0, 0, 0, 17, 236])
        ec = compute_ec_codewords(data, 10)
        assert len(ec) == 10
        assert ec == bytes(RSCodec(10).encode(data))[-10:]

    def test_all_zero_data(self):
        assert compute_ec_codewords(bytes(16), 10) == bytes(10)

    def test_interleaving_multi_block(self):
        """Version 5-Q: data column-major over 4 blocks, then EC likewise."""
        blocks = get_rs_blocks(5, "Q")
        data = bytes(i % 256 for i in range(62))
        out = create_codewords(data, blocks)

        chunks = [data[0:15], data[15:30], data[30:46], data[46:62]]
        ecs = [bytes(RSCodec(18).encode(c))[-18:] for c in chunks]

        assert len(out) == 134
        assert out[:4] == bytes([chunks[0][0], chunks[1][0], chunks[2][0], chunks[3][0]])
        # Only the two longer blocks have a 16th data codeword
        assert out[60:62] == bytes([chunks[2][15], chunks[3][15]])
        assert out[62:66] == bytes([ecs[0][0], ecs[1][0], ecs[2][0], ecs[3][0]])
        assert out[-1] == ecs[3][17]

    def test_data_length_mismatch(self):
        with pytest.raises(InternalConsistencyError):
            create_codewords(bytes(15), get_rs_blocks(1, "M"))

    def test_unequal_ec_lengths(self):
        """Blocks with different EC lengths interleave to the summed total."""
        blocks = (RSBlock(10, 4), RSBlock(12, 4))
        out = create_codewords(bytes(range(8)), blocks)
        assert len(out) == 22
