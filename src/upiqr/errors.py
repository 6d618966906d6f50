# file: src/upiqr/errors.py

"""
QR encoder exception hierarchy.

All exceptions inherit from QRError for unified handling.
"""


class QRError(Exception):
    """Base exception for all QR encoding errors."""
    pass


class DomainError(QRError):
    """Raised when a GF(256) operation is applied outside its domain (log of zero)."""
    pass


class DataOverflowError(QRError):
    """Raised when the payload does not fit the symbol version under trial."""

    def __init__(self, message: str, bits_needed: int = None, capacity_bits: int = None):
        super().__init__(message)
        self.bits_needed = bits_needed
        self.capacity_bits = capacity_bits


class PayloadTooLargeError(QRError):
    """Raised when no supported symbol version can hold the payload."""

    def __init__(self, message: str, payload_length: int = None, max_length: int = None):
        super().__init__(message)
        self.payload_length = payload_length
        self.max_length = max_length


class UnsupportedVersionError(QRError):
    """Raised when a symbol version outside 1-10 is requested."""
    pass


class InternalConsistencyError(QRError):
    """Raised when codeword counts or build stages disagree with the tables."""
    pass


class QRConfigurationError(QRError):
    """Raised when encoder configuration is invalid."""
    pass
