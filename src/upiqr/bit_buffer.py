# file: src/upiqr/bit_buffer.py

"""
Append-only bit buffer.

Bits are accumulated MSB-first into byte-aligned storage, the order in
which QR codewords are laid out.
"""


class BitBuffer:
    """
    MSB-first bit accumulator backed by a bytearray.

    The buffer only grows; bits cannot be removed or overwritten.
    """

    def __init__(self):
        self._buffer = bytearray()
        self._length = 0

    def __repr__(self) -> str:
        bits = "".join(str(self.bit(i)) for i in range(self._length))
        return f"BitBuffer({bits!r})"

    def __len__(self) -> int:
        return self._length

    def bit_length(self) -> int:
        return self._length

    def byte_length(self) -> int:
        return len(self._buffer)

    def bit(self, index: int) -> int:
        """
        Return the bit at position index (0 = first appended).

        Raises:
            IndexError: If index is outside the written bits
        """
        if index < 0 or index >= self._length:
            raise IndexError(f"Bit index {index} out of range (length {self._length})")
        return (self._buffer[index // 8] >> (7 - index % 8)) & 1

    def append_bits(self, value: int, width: int) -> None:
        """Append the low `width` bits of value, high bit first."""
        if width < 0:
            raise ValueError(f"width must be >= 0, got {width}")
        for i in range(width):
            self.append_bit((value >> (width - i - 1)) & 1)

    def append_bit(self, bit) -> None:
        byte_index = self._length // 8
        if len(self._buffer) <= byte_index:
            self._buffer.append(0)
        if bit:
            self._buffer[byte_index] |= 0x80 >> (self._length % 8)
        self._length += 1

    def to_bytes(self) -> bytes:
        """Return the stored bytes; a partial final byte is zero-padded."""
        return bytes(self._buffer)
