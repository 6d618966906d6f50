# file: src/upiqr/matrix.py

"""
QR module matrix construction.

A MatrixBuilder walks one symbol through its build stages:

    UNINITIALIZED
    → FUNCTION_PATTERNS_PLACED  (finders, separators, alignment, timing,
                                 dark module, version info)
    → FORMAT_RESERVED           (format cells held as light placeholders)
    → DATA_MAPPED               (codeword bits in zig-zag order)
    → MASKED                    (mask XOR on data cells)
    → FINAL                     (format info written)

Each step checks the current stage, so a symbol can never be finalised
with a stage skipped.
"""

from enum import IntEnum
from typing import List, Optional, Tuple

import numpy as np

from .bch import format_info_bits, version_info_bits
from .errors import InternalConsistencyError
from .masking import mask_grid
from .rs_blocks import alignment_positions, check_version, module_count_for, ErrorCorrectionLevel


UNSET = -1
LIGHT = 0
DARK = 1

Position = Tuple[int, int]


class BuildStage(IntEnum):
    UNINITIALIZED = 0
    FUNCTION_PATTERNS_PLACED = 1
    FORMAT_RESERVED = 2
    DATA_MAPPED = 3
    MASKED = 4
    FINAL = 5


class ModuleMatrix:
    """
    Square grid of modules, each UNSET, LIGHT or DARK.

    `reserved` marks function-pattern and format cells; every other cell
    carries data once mapped.
    """

    def __init__(self, module_count: int):
        self.modules = np.full((module_count, module_count), UNSET, dtype=np.int8)
        self.reserved = np.zeros((module_count, module_count), dtype=bool)

    def __repr__(self) -> str:
        return f"ModuleMatrix(module_count={self.module_count}, resolved={self.is_resolved()})"

    @property
    def module_count(self) -> int:
        return self.modules.shape[0]

    def is_dark(self, row: int, col: int) -> bool:
        return bool(self.modules[row, col] == DARK)

    def is_resolved(self) -> bool:
        """True when no module is UNSET."""
        return not bool(np.any(self.modules == UNSET))

    def to_array(self) -> np.ndarray:
        """
        Return a boolean copy of the grid (True = dark).

        Raises:
            InternalConsistencyError: If any module is still unset
        """
        if not self.is_resolved():
            raise InternalConsistencyError("Module matrix has unset cells")
        return self.modules == DARK

    def copy(self) -> "ModuleMatrix":
        clone = ModuleMatrix.__new__(ModuleMatrix)
        clone.modules = self.modules.copy()
        clone.reserved = self.reserved.copy()
        return clone

    def set_function(self, row: int, col: int, dark: bool) -> None:
        self.modules[row, col] = DARK if dark else LIGHT
        self.reserved[row, col] = True


def format_info_positions(module_count: int) -> Tuple[List[Position], List[Position]]:
    """
    Cell positions of the two format-info copies, indexed by bit (LSB first).

    The first copy runs along column 8 (top then bottom-left), the second
    along row 8 (top-right then top-left).
    """
    vertical = []
    horizontal = []
    for i in range(15):
        if i < 6:
            vertical.append((i, 8))
        elif i < 8:
            vertical.append((i + 1, 8))
        else:
            vertical.append((module_count - 15 + i, 8))

        if i < 8:
            horizontal.append((8, module_count - i - 1))
        elif i < 9:
            horizontal.append((8, 15 - i - 1 + 1))
        else:
            horizontal.append((8, 15 - i - 1))
    return vertical, horizontal


def version_info_positions(module_count: int) -> Tuple[List[Position], List[Position]]:
    """Cell positions of the two 6x3 version-info blocks, indexed by bit."""
    top_right = [(i // 3, i % 3 + module_count - 11) for i in range(18)]
    bottom_left = [(i % 3 + module_count - 11, i // 3) for i in range(18)]
    return top_right, bottom_left


def data_module_order(reserved: np.ndarray) -> List[Position]:
    """
    Non-reserved cells in zig-zag placement order.

    Column pairs are swept right to left starting bottom-right, alternating
    upward and downward, with the vertical timing column skipped.
    """
    module_count = reserved.shape[0]
    order = []
    inc = -1
    row = module_count - 1

    for col in range(module_count - 1, 0, -2):
        if col <= 6:
            col -= 1

        while True:
            for c in (col, col - 1):
                if not reserved[row, c]:
                    order.append((row, c))

            row += inc
            if row < 0 or module_count <= row:
                row -= inc
                inc = -inc
                break

    return order


class MatrixBuilder:
    """
    Builds the module matrix of one symbol version.

    Args:
        version: Symbol version (1-10)
    """

    def __init__(self, version: int):
        self.version = check_version(version)
        self.matrix = ModuleMatrix(module_count_for(version))
        self.stage = BuildStage.UNINITIALIZED
        self.mask_pattern: Optional[int] = None

    @property
    def module_count(self) -> int:
        return self.matrix.module_count

    def copy(self) -> "MatrixBuilder":
        clone = MatrixBuilder.__new__(MatrixBuilder)
        clone.version = self.version
        clone.matrix = self.matrix.copy()
        clone.stage = self.stage
        clone.mask_pattern = self.mask_pattern
        return clone

    def _advance(self, expected: BuildStage, new: BuildStage) -> None:
        if self.stage != expected:
            raise InternalConsistencyError(
                f"Cannot move to {new.name}: matrix is {self.stage.name}, expected {expected.name}"
            )
        self.stage = new

    # ------------------------------------------------------------------
    # FUNCTION PATTERNS
    # ------------------------------------------------------------------
    def place_function_patterns(self) -> "MatrixBuilder":
        self._advance(BuildStage.UNINITIALIZED, BuildStage.FUNCTION_PATTERNS_PLACED)

        n = self.module_count
        self._place_finder(0, 0)
        self._place_finder(n - 7, 0)
        self._place_finder(0, n - 7)
        self._place_alignment_patterns()
        self._place_timing_patterns()
        self.matrix.set_function(n - 8, 8, True)

        if self.version >= 7:
            self._place_version_info()
        return self

    def _place_finder(self, row: int, col: int) -> None:
        n = self.module_count
        for r in range(-1, 8):
            if row + r <= -1 or n <= row + r:
                continue
            for c in range(-1, 8):
                if col + c <= -1 or n <= col + c:
                    continue
                dark = (
                    (0 <= r <= 6 and (c == 0 or c == 6))
                    or (0 <= c <= 6 and (r == 0 or r == 6))
                    or (2 <= r <= 4 and 2 <= c <= 4)
                )
                self.matrix.set_function(row + r, col + c, dark)

    def _place_alignment_patterns(self) -> None:
        positions = alignment_positions(self.version)
        modules = self.matrix.modules

        for row in positions:
            for col in positions:
                # Centres inside a finder are skipped
                if modules[row, col] != UNSET:
                    continue
                for r in range(-2, 3):
                    for c in range(-2, 3):
                        dark = r in (-2, 2) or c in (-2, 2) or (r == 0 and c == 0)
                        self.matrix.set_function(row + r, col + c, dark)

    def _place_timing_patterns(self) -> None:
        modules = self.matrix.modules
        for i in range(8, self.module_count - 8):
            if modules[i, 6] == UNSET:
                self.matrix.set_function(i, 6, i % 2 == 0)
            if modules[6, i] == UNSET:
                self.matrix.set_function(6, i, i % 2 == 0)

    def _place_version_info(self) -> None:
        bits = version_info_bits(self.version)
        for copy in version_info_positions(self.module_count):
            for i, (row, col) in enumerate(copy):
                self.matrix.set_function(row, col, (bits >> i) & 1 == 1)

    # ------------------------------------------------------------------
    # FORMAT INFO
    # ------------------------------------------------------------------
    def reserve_format_area(self) -> "MatrixBuilder":
        self._advance(BuildStage.FUNCTION_PATTERNS_PLACED, BuildStage.FORMAT_RESERVED)
        for copy in format_info_positions(self.module_count):
            for row, col in copy:
                self.matrix.set_function(row, col, False)
        return self

    def write_format_info(self, level) -> "MatrixBuilder":
        """Write the BCH format bits for (level, chosen mask)."""
        self._advance(BuildStage.MASKED, BuildStage.FINAL)
        bits = format_info_bits(ErrorCorrectionLevel.parse(level), self.mask_pattern)
        for copy in format_info_positions(self.module_count):
            for i, (row, col) in enumerate(copy):
                self.matrix.set_function(row, col, (bits >> i) & 1 == 1)
        return self

    # ------------------------------------------------------------------
    # DATA
    # ------------------------------------------------------------------
    def map_data(self, codewords: bytes) -> "MatrixBuilder":
        """
        Place codeword bits MSB-first into the free cells.

        Cells left over after the last codeword (remainder bits) are light.

        Raises:
            InternalConsistencyError: If the codewords exceed the free cells
        """
        self._advance(BuildStage.FORMAT_RESERVED, BuildStage.DATA_MAPPED)

        order = data_module_order(self.matrix.reserved)
        if len(codewords) * 8 > len(order):
            raise InternalConsistencyError(
                f"{len(codewords)} codewords do not fit {len(order)} data modules "
                f"of version {self.version}"
            )

        modules = self.matrix.modules
        for index, (row, col) in enumerate(order):
            byte_index, bit_index = divmod(index, 8)
            dark = False
            if byte_index < len(codewords):
                dark = (codewords[byte_index] >> (7 - bit_index)) & 1 == 1
            modules[row, col] = DARK if dark else LIGHT
        return self

    def apply_mask(self, mask_pattern: int) -> "MatrixBuilder":
        """XOR mask pattern onto the data cells."""
        self._advance(BuildStage.DATA_MAPPED, BuildStage.MASKED)

        flip = mask_grid(mask_pattern, self.module_count) & ~self.matrix.reserved
        self.matrix.modules[flip] ^= 1
        self.mask_pattern = mask_pattern
        return self
