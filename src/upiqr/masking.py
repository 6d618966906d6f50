# file: src/upiqr/masking.py

"""
Data mask patterns and penalty scoring.

The eight QR mask predicates are a closed tuple indexed by mask number.
Penalty rules follow the four-rule heuristic; the mask with the lowest
total score wins, earliest mask on ties.
"""

import logging
from typing import Callable, List, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .errors import InternalConsistencyError, QRConfigurationError

logger = logging.getLogger(__name__)


MaskPredicate = Callable[[np.ndarray, np.ndarray], np.ndarray]

MASK_PATTERNS: Tuple[MaskPredicate, ...] = (
    lambda i, j: (i + j) % 2 == 0,
    lambda i, j: i % 2 == 0,
    lambda i, j: j % 3 == 0,
    lambda i, j: (i + j) % 3 == 0,
    lambda i, j: (i // 2 + j // 3) % 2 == 0,
    lambda i, j: (i * j) % 2 + (i * j) % 3 == 0,
    lambda i, j: ((i * j) % 2 + (i * j) % 3) % 2 == 0,
    lambda i, j: ((i + j) % 2 + (i * j) % 3) % 2 == 0,
)

N1 = 3
N2 = 3
N3 = 40
N4 = 10

FINDER_LIKE = np.array([1, 0, 1, 1, 1, 0, 1], dtype=bool)


def check_mask_pattern(mask_pattern) -> int:
    if isinstance(mask_pattern, bool) or not isinstance(mask_pattern, int) \
            or not 0 <= mask_pattern < len(MASK_PATTERNS):
        raise QRConfigurationError(f"Mask pattern must be an integer 0-7, got {mask_pattern!r}")
    return mask_pattern


def mask_grid(mask_pattern: int, module_count: int) -> np.ndarray:
    """Boolean grid, True where the mask flips a module (row i, column j)."""
    predicate = MASK_PATTERNS[check_mask_pattern(mask_pattern)]
    i, j = np.indices((module_count, module_count))
    return predicate(i, j)


# ----------------------------------------------------------------------
# PENALTY RULES
# ----------------------------------------------------------------------
def _run_lengths(line: np.ndarray) -> np.ndarray:
    boundaries = np.flatnonzero(line[1:] != line[:-1]) + 1
    edges = np.concatenate(([0], boundaries, [len(line)]))
    return np.diff(edges)


def penalty_runs(modules: np.ndarray) -> int:
    """Rule 1: each same-colour run of 5+ in a row or column scores 3 + (run - 5)."""
    score = 0
    for lines in (modules, modules.T):
        for line in lines:
            runs = _run_lengths(line)
            long_runs = runs[runs >= 5]
            score += int(np.sum(N1 + (long_runs - 5)))
    return score


def penalty_blocks(modules: np.ndarray) -> int:
    """Rule 2: each 2x2 same-colour block scores 3."""
    dark = modules.astype(np.int8)
    total = dark[:-1, :-1] + dark[1:, :-1] + dark[:-1, 1:] + dark[1:, 1:]
    return N2 * int(np.count_nonzero((total == 0) | (total == 4)))


def penalty_finder_like(modules: np.ndarray) -> int:
    """Rule 3: each dark-light-dark-dark-dark-light-dark sequence scores 40."""
    count = 0
    for lines in (modules, modules.T):
        if lines.shape[1] < FINDER_LIKE.size:
            continue
        windows = sliding_window_view(lines, FINDER_LIKE.size, axis=1)
        count += int(np.count_nonzero(np.all(windows == FINDER_LIKE, axis=-1)))
    return N3 * count


def penalty_balance(modules: np.ndarray) -> int:
    """Rule 4: 10 points per started 5% step of dark-module deviation from 50%."""
    total = modules.size
    dark = int(np.count_nonzero(modules))
    # ceil(|100 * dark / total - 50| / 5), in integers
    deviation = abs(100 * dark - 50 * total)
    steps = -(-deviation // (5 * total))
    return N4 * steps


def penalty_score(matrix) -> int:
    """
    Total penalty of a fully resolved module matrix.

    Raises:
        InternalConsistencyError: If the matrix still has unset cells
    """
    if not matrix.is_resolved():
        raise InternalConsistencyError("Cannot score a matrix with unset cells")

    modules = matrix.to_array()
    return (
        penalty_runs(modules)
        + penalty_blocks(modules)
        + penalty_finder_like(modules)
        + penalty_balance(modules)
    )


# ----------------------------------------------------------------------
# SELECTION
# ----------------------------------------------------------------------
def score_masks(builder) -> List[int]:
    """
    Penalty of every mask applied to the same pre-mask matrix.

    Args:
        builder: MatrixBuilder in the DATA_MAPPED stage (left untouched)

    Returns:
        Eight scores indexed by mask pattern
    """
    scores = []
    for mask_pattern in range(len(MASK_PATTERNS)):
        candidate = builder.copy().apply_mask(mask_pattern)
        scores.append(penalty_score(candidate.matrix))
    return scores


def select_mask(builder) -> int:
    """
    Choose the mask with the lowest penalty; the first one seen wins ties.
    """
    scores = score_masks(builder)

    best_pattern = 0
    best_score = scores[0]
    for mask_pattern, score in enumerate(scores):
        if score < best_score:
            best_pattern = mask_pattern
            best_score = score

    logger.debug(f"Mask scores for version {builder.version}: {scores} -> mask {best_pattern}")
    return best_pattern
