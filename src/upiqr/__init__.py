# file: src/upiqr/__init__.py

"""
upiqr: QR Code symbol encoder for payment URIs

Encodes a text payload in QR byte mode, auto-selecting the smallest symbol
version (1-10) and the lowest-penalty data mask. The result is a finalised
module matrix for any renderer to paint.

Public API:
    - encode(payload, level="M", version=None, mask_pattern=None) -> QRSymbol
    - QREncoder(config_path=None).encode(payload, ...) -> QRSymbol
    - build_upi_uri(upi_id, payee_name, amount, note) -> str
    - to_bitmap(symbol, cell_size, quiet_zone) -> np.ndarray
    - save_png(symbol, path, ...) / to_text(symbol)

Example:
    >>> from upiqr import encode, build_upi_uri
    >>> symbol = encode(build_upi_uri("shop@upi", "Cafe Blue", 120))
    >>> symbol.is_dark(0, 0)
    True
"""

from .encoder import QREncoder, QRSymbol, encode
from .errors import (
    QRError,
    DomainError,
    DataOverflowError,
    PayloadTooLargeError,
    UnsupportedVersionError,
    InternalConsistencyError,
    QRConfigurationError,
)
from .matrix import ModuleMatrix
from .payload import build_upi_uri
from .render import save_png, to_bitmap, to_text
from .rs_blocks import ErrorCorrectionLevel

__version__ = "1.0.0"

__all__ = [
    "encode",
    "QREncoder",
    "QRSymbol",
    "ModuleMatrix",
    "ErrorCorrectionLevel",
    "build_upi_uri",
    "to_bitmap",
    "save_png",
    "to_text",
    "QRError",
    "DomainError",
    "DataOverflowError",
    "PayloadTooLargeError",
    "UnsupportedVersionError",
    "InternalConsistencyError",
    "QRConfigurationError",
]
