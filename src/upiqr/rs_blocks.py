# file: src/upiqr/rs_blocks.py

"""
Static QR tables for versions 1-10.

Holds the Reed-Solomon block structure per (version, level), the
alignment pattern centres, and the error-correction level enumeration.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from .errors import UnsupportedVersionError, QRConfigurationError


MIN_VERSION = 1
MAX_VERSION = 10


class ErrorCorrectionLevel(Enum):
    """Error correction level; value is the 2-bit format indicator."""
    L = 0b01
    M = 0b00
    Q = 0b11
    H = 0b10

    @property
    def format_bits(self) -> int:
        return self.value

    @classmethod
    def parse(cls, level: Union[str, "ErrorCorrectionLevel", None]) -> "ErrorCorrectionLevel":
        """
        Resolve a level given as an enum member or a letter.

        None resolves to the default level M.

        Raises:
            QRConfigurationError: If the letter is not one of L, M, Q, H
        """
        if level is None:
            return cls.M
        if isinstance(level, cls):
            return level
        if isinstance(level, str):
            try:
                return cls[level.strip().upper()]
            except KeyError:
                pass
        raise QRConfigurationError(
            f"Unknown error correction level: {level!r} (expected L, M, Q or H)"
        )


@dataclass(frozen=True)
class RSBlock:
    """One Reed-Solomon block: total codewords and how many carry data."""
    total_codewords: int
    data_codewords: int

    def __post_init__(self):
        if not self.total_codewords >= self.data_codewords >= 0:
            raise ValueError(
                f"Invalid RS block: total={self.total_codewords}, data={self.data_codewords}"
            )

    @property
    def ec_codewords(self) -> int:
        return self.total_codewords - self.data_codewords


# (block count, total codewords, data codewords) groups, per level.
_L, _M, _Q, _H = (ErrorCorrectionLevel.L, ErrorCorrectionLevel.M,
                  ErrorCorrectionLevel.Q, ErrorCorrectionLevel.H)

RS_BLOCK_TABLE: Dict[int, Dict[ErrorCorrectionLevel, Tuple[Tuple[int, int, int], ...]]] = {
    1: {_L: ((1, 26, 19),), _M: ((1, 26, 16),), _Q: ((1, 26, 13),), _H: ((1, 26, 9),)},
    2: {_L: ((1, 44, 34),), _M: ((1, 44, 28),), _Q: ((1, 44, 22),), _H: ((1, 44, 16),)},
    3: {_L: ((1, 70, 55),), _M: ((1, 70, 44),), _Q: ((2, 35, 17),), _H: ((2, 35, 13),)},
    4: {_L: ((1, 100, 80),), _M: ((2, 50, 32),), _Q: ((2, 50, 24),), _H: ((4, 25, 9),)},
    5: {
        _L: ((1, 134, 108),),
        _M: ((2, 67, 43),),
        _Q: ((2, 33, 15), (2, 34, 16)),
        _H: ((2, 33, 11), (2, 34, 12)),
    },
    6: {_L: ((2, 86, 68),), _M: ((4, 43, 27),), _Q: ((4, 43, 19),), _H: ((4, 43, 15),)},
    7: {
        _L: ((2, 98, 78),),
        _M: ((4, 49, 31),),
        _Q: ((2, 32, 14), (4, 33, 15)),
        _H: ((4, 39, 13), (1, 40, 14)),
    },
    8: {
        _L: ((2, 121, 97),),
        _M: ((2, 60, 38), (2, 61, 39)),
        _Q: ((4, 40, 18), (2, 41, 19)),
        _H: ((4, 40, 14), (2, 41, 15)),
    },
    9: {
        _L: ((2, 146, 116),),
        _M: ((3, 58, 36), (2, 59, 37)),
        _Q: ((4, 36, 16), (4, 37, 17)),
        _H: ((4, 36, 12), (4, 37, 13)),
    },
    10: {
        _L: ((2, 86, 68), (2, 87, 69)),
        _M: ((4, 69, 43), (1, 70, 44)),
        _Q: ((6, 43, 19), (2, 44, 20)),
        _H: ((6, 43, 15), (2, 44, 16)),
    },
}

ALIGNMENT_POSITION_TABLE: Dict[int, Tuple[int, ...]] = {
    1: (),
    2: (6, 18),
    3: (6, 22),
    4: (6, 26),
    5: (6, 30),
    6: (6, 34),
    7: (6, 22, 38),
    8: (6, 24, 42),
    9: (6, 26, 46),
    10: (6, 28, 50),
}


def check_version(version: int) -> int:
    """
    Validate a symbol version.

    Raises:
        UnsupportedVersionError: If version is not an integer in 1-10
    """
    if isinstance(version, bool) or not isinstance(version, int):
        raise UnsupportedVersionError(f"Version must be an integer, got {version!r}")
    if version not in RS_BLOCK_TABLE:
        raise UnsupportedVersionError(
            f"Unsupported version {version} (expected {MIN_VERSION} to {MAX_VERSION})"
        )
    return version


def module_count_for(version: int) -> int:
    return check_version(version) * 4 + 17


def get_rs_blocks(version: int, level) -> Tuple[RSBlock, ...]:
    """
    Return the ordered RS blocks for a version and level.

    Args:
        version: Symbol version (1-10)
        level: ErrorCorrectionLevel or its letter

    Returns:
        Tuple of RSBlock, group 1 blocks before group 2 blocks

    Raises:
        UnsupportedVersionError: If no table row exists for version
    """
    check_version(version)
    level = ErrorCorrectionLevel.parse(level)

    blocks = []
    for count, total, data in RS_BLOCK_TABLE[version][level]:
        blocks.extend(RSBlock(total, data) for _ in range(count))
    return tuple(blocks)


def data_codeword_count(version: int, level) -> int:
    return sum(block.data_codewords for block in get_rs_blocks(version, level))


def total_codeword_count(version: int) -> int:
    """Total codewords are the same for every level of a version."""
    return sum(block.total_codewords for block in get_rs_blocks(version, ErrorCorrectionLevel.M))


def alignment_positions(version: int) -> Tuple[int, ...]:
    return ALIGNMENT_POSITION_TABLE[check_version(version)]
