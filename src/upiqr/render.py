# file: src/upiqr/render.py

"""
Rendering of finalised QR symbols.

Produces a grayscale raster (one filled square per dark module, surrounded
by a quiet zone), writes it as PNG, or draws it as terminal text.
"""

import os

import cv2
import numpy as np

DEFAULT_CELL_SIZE = 8
DEFAULT_QUIET_ZONE = 2

DARK_PIXEL = 0
LIGHT_PIXEL = 255


def _modules_of(symbol) -> np.ndarray:
    """Accept a QRSymbol or a ModuleMatrix."""
    matrix = getattr(symbol, "matrix", symbol)
    return matrix.to_array()


def to_bitmap(
    symbol,
    cell_size: int = DEFAULT_CELL_SIZE,
    quiet_zone: int = DEFAULT_QUIET_ZONE,
) -> np.ndarray:
    """
    Rasterise a symbol.

    Args:
        symbol: QRSymbol or finalised ModuleMatrix
        cell_size: Pixels per module side
        quiet_zone: Light margin in modules

    Returns:
        image: (S, S) uint8 array, 0 = dark, 255 = light,
               S = (module_count + 2 * quiet_zone) * cell_size
    """
    if cell_size < 1:
        raise ValueError(f"Invalid cell_size: {cell_size}. Must be >= 1.")
    if quiet_zone < 0:
        raise ValueError(f"Invalid quiet_zone: {quiet_zone}. Must be >= 0.")

    modules = _modules_of(symbol)
    padded = np.pad(modules, quiet_zone, mode="constant", constant_values=False)

    image = np.where(padded, DARK_PIXEL, LIGHT_PIXEL).astype(np.uint8)
    return np.kron(image, np.ones((cell_size, cell_size), dtype=np.uint8))


def save_png(
    symbol,
    path: str,
    cell_size: int = DEFAULT_CELL_SIZE,
    quiet_zone: int = DEFAULT_QUIET_ZONE,
) -> str:
    """
    Write the symbol as a grayscale PNG.

    Raises:
        IOError: If the image cannot be written
    """
    image = to_bitmap(symbol, cell_size, quiet_zone)

    output_dir = os.path.dirname(path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    if not cv2.imwrite(path, image):
        raise IOError(f"Failed to write PNG: {path}")
    return path


def to_text(symbol, quiet_zone: int = DEFAULT_QUIET_ZONE, dark: str = "██", light: str = "  ") -> str:
    """Draw the symbol with two characters per module, one line per row."""
    modules = _modules_of(symbol)
    padded = np.pad(modules, quiet_zone, mode="constant", constant_values=False)
    return "\n".join("".join(dark if cell else light for cell in row) for row in padded)
