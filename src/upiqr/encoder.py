# file: src/upiqr/encoder.py

"""
QR symbol encoder: version selection and the public encode entry points.

Pipeline:
    Payload bytes
    → Version selection (smallest version whose data capacity fits)
    → Data codewords
    → Reed-Solomon EC + interleaving
    → Function patterns, reserved format area, data mapping
    → Mask selection (penalty scoring)
    → Format info → finalised ModuleMatrix
"""

import copy
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import yaml

from .data_encoder import DataEncodingResult, encode_data, byte_capacity
from .errors import (
    InternalConsistencyError,
    PayloadTooLargeError,
    QRConfigurationError,
    UnsupportedVersionError,
)
from .masking import check_mask_pattern, select_mask
from .matrix import BuildStage, MatrixBuilder, ModuleMatrix
from .rs_blocks import (
    MAX_VERSION,
    MIN_VERSION,
    ErrorCorrectionLevel,
    check_version,
    get_rs_blocks,
)
from .rs_encoder import create_codewords

logger = logging.getLogger(__name__)

Payload = Union[str, bytes, bytearray]

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "default_config.yaml")


@dataclass(frozen=True)
class QRSymbol:
    """A finalised QR symbol and the parameters it was built with."""
    matrix: ModuleMatrix
    version: int
    level: ErrorCorrectionLevel
    mask_pattern: int

    @property
    def module_count(self) -> int:
        return self.matrix.module_count

    def is_dark(self, row: int, col: int) -> bool:
        return self.matrix.is_dark(row, col)


def to_payload_bytes(payload: Payload) -> bytes:
    """str payloads are UTF-8 encoded; bytes are used as-is."""
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    raise TypeError(f"Payload must be str or bytes, got {type(payload)}")


def select_version(
    payload: bytes,
    level,
    min_version: int = MIN_VERSION,
    max_version: int = MAX_VERSION,
) -> DataEncodingResult:
    """
    Find the smallest version in [min_version, max_version] that fits payload.

    Returns:
        The successful DataEncodingResult

    Raises:
        PayloadTooLargeError: If no version in range fits
        UnsupportedVersionError: If the range leaves 1-10
    """
    check_version(min_version)
    check_version(max_version)
    level = ErrorCorrectionLevel.parse(level)

    for version in range(min_version, max_version + 1):
        result = encode_data(payload, version, level)
        if result.fits:
            return result
        logger.debug(
            f"Version {version}-{level.name} too small: "
            f"{result.bits_needed} bits > {result.capacity_bits}"
        )

    raise PayloadTooLargeError(
        f"Payload of {len(payload)} bytes exceeds version {max_version}-{level.name} "
        f"capacity of {byte_capacity(max_version, level)} bytes",
        payload_length=len(payload),
        max_length=byte_capacity(max_version, level),
    )


def build_symbol(
    data: DataEncodingResult,
    mask_pattern: Optional[int] = None,
) -> QRSymbol:
    """
    Build the final symbol from fitted data codewords.

    Args:
        data: Successful DataEncodingResult for one version
        mask_pattern: Force a mask (0-7); None selects by penalty score
    """
    if not data.fits:
        raise InternalConsistencyError("build_symbol called with overflowing data")

    codewords = create_codewords(data.codewords, get_rs_blocks(data.version, data.level))

    builder = MatrixBuilder(data.version)
    builder.place_function_patterns().reserve_format_area().map_data(codewords)

    if mask_pattern is None:
        mask_pattern = select_mask(builder)
    else:
        check_mask_pattern(mask_pattern)

    builder.apply_mask(mask_pattern).write_format_info(data.level)

    if builder.stage != BuildStage.FINAL or not builder.matrix.is_resolved():
        raise InternalConsistencyError("Symbol was not fully resolved")

    return QRSymbol(
        matrix=builder.matrix,
        version=data.version,
        level=data.level,
        mask_pattern=mask_pattern,
    )


class QREncoder:
    """
    Configurable QR encoder.

    Args:
        config_path: Path to configuration YAML file.
                     If None, uses the packaged default configuration.
        config: Configuration dictionary (takes precedence over config_path)
    """

    def __init__(self, config_path: Optional[str] = None, config: Optional[Dict[str, Any]] = None):
        if config is not None:
            self.config = _merge(self._get_default_config(), config)
        else:
            self.config = self._load_config(config_path)
        self._validate_config()

    def _load_config(self, config_path: Optional[str]) -> dict:
        """
        Load configuration from file or use defaults.

        Raises:
            QRConfigurationError: If an explicit config file cannot be read
        """
        if config_path is None:
            if not os.path.exists(DEFAULT_CONFIG_PATH):
                return self._get_default_config()
            config_path = DEFAULT_CONFIG_PATH

        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise QRConfigurationError(f"Cannot load config {config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise QRConfigurationError(f"Config {config_path} must be a mapping")
        return _merge(self._get_default_config(), loaded)

    def _get_default_config(self) -> dict:
        """
        Get hardcoded default configuration.
        """
        return {
            "qr": {
                "error_correction": "M",
                "min_version": MIN_VERSION,
                "max_version": MAX_VERSION,
                "mask_pattern": None,
            },
            "render": {
                "cell_size": 8,
                "quiet_zone": 2,
            },
            "system": {
                "verbose": False,
            },
        }

    def _validate_config(self) -> None:
        qr = self.config["qr"]
        ErrorCorrectionLevel.parse(qr["error_correction"])

        try:
            check_version(qr["min_version"])
            check_version(qr["max_version"])
        except UnsupportedVersionError as e:
            raise QRConfigurationError(f"Invalid version range: {e}") from e
        if qr["min_version"] > qr["max_version"]:
            raise QRConfigurationError(
                f"min_version {qr['min_version']} > max_version {qr['max_version']}"
            )

        if qr["mask_pattern"] is not None:
            check_mask_pattern(qr["mask_pattern"])

        render = self.config["render"]
        if not isinstance(render["cell_size"], int) or render["cell_size"] < 1:
            raise QRConfigurationError(f"cell_size must be >= 1, got {render['cell_size']!r}")
        if not isinstance(render["quiet_zone"], int) or render["quiet_zone"] < 0:
            raise QRConfigurationError(f"quiet_zone must be >= 0, got {render['quiet_zone']!r}")

    def encode(
        self,
        payload: Payload,
        level=None,
        version: Optional[int] = None,
        mask_pattern: Optional[int] = None,
    ) -> QRSymbol:
        """
        Encode payload into a finalised QR symbol.

        Args:
            payload: Text (UTF-8 encoded) or raw bytes
            level: Error correction level; None uses the configured level
            version: Fixed version (1-10); None auto-selects
            mask_pattern: Fixed mask (0-7); None uses config, then penalty selection

        Returns:
            QRSymbol

        Raises:
            PayloadTooLargeError: If the payload fits no allowed version
            UnsupportedVersionError: If version is outside 1-10
        """
        qr = self.config["qr"]
        data_bytes = to_payload_bytes(payload)
        level = ErrorCorrectionLevel.parse(level if level is not None else qr["error_correction"])
        if mask_pattern is None:
            mask_pattern = qr["mask_pattern"]

        if version is not None:
            check_version(version)
            data = select_version(data_bytes, level, version, version)
        else:
            data = select_version(data_bytes, level, qr["min_version"], qr["max_version"])

        symbol = build_symbol(data, mask_pattern)
        logger.info(
            f"Encoded {len(data_bytes)} bytes as version {symbol.version}-{level.name} "
            f"({symbol.module_count}x{symbol.module_count}), mask {symbol.mask_pattern}"
        )
        return symbol


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def encode(
    payload: Payload,
    level="M",
    version: Optional[int] = None,
    mask_pattern: Optional[int] = None,
) -> QRSymbol:
    """
    Encode payload with default settings.

    Example:
        >>> symbol = encode("upi://pay?pa=shop@upi&cu=INR")
        >>> symbol.module_count
        29
    """
    data_bytes = to_payload_bytes(payload)
    if version is not None:
        data = select_version(data_bytes, level, check_version(version), version)
    else:
        data = select_version(data_bytes, level)
    return build_symbol(data, mask_pattern)
