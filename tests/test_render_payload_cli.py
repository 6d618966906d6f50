# file: tests/test_render_payload_cli.py

"""
Tests for rendering, UPI URI construction and the command-line tool.
"""

import cv2
import numpy as np
import pytest

from upiqr import build_upi_uri, encode, save_png, to_bitmap, to_text
from upiqr.cli import main, parse_arguments
from upiqr.payload import format_amount
from upiqr.testing_utils import read_symbol


@pytest.fixture
def symbol():
    return encode(b"abc")


class TestBitmap:
    """Test raster rendering."""

    def test_shape_and_dtype(self, symbol):
        image = to_bitmap(symbol, cell_size=3, quiet_zone=2)
        assert image.dtype == np.uint8
        assert image.shape == ((21 + 4) * 3, (21 + 4) * 3)

    def test_quiet_zone_is_light(self, symbol):
        image = to_bitmap(symbol, cell_size=3, quiet_zone=2)
        assert np.all(image[:6, :] == 255)
        assert np.all(image[:, -6:] == 255)

    def test_modules_scaled(self, symbol):
        image = to_bitmap(symbol, cell_size=4, quiet_zone=0)
        modules = symbol.matrix.to_array()
        assert np.array_equal(image[::4, ::4] == 0, modules)
        assert np.all(image[0:4, 0:4] == 0)

    def test_bitmap_is_readable(self, symbol):
        """Sampling the raster back gives a readable symbol."""
        image = to_bitmap(symbol, cell_size=2, quiet_zone=1)
        modules = image[2:-2:2, 2:-2:2] == 0
        assert read_symbol(modules) == b"abc"

    @pytest.mark.parametrize("cell_size,quiet_zone", [(0, 2), (4, -1)])
    def test_invalid_sizes(self, symbol, cell_size, quiet_zone):
        with pytest.raises(ValueError):
            to_bitmap(symbol, cell_size, quiet_zone)


class TestPng:
    """Test PNG output through OpenCV."""

    def test_save_and_read_back(self, symbol, tmp_path):
        path = str(tmp_path / "out" / "symbol.png")
        assert save_png(symbol, path, cell_size=5) == path

        loaded = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
        assert loaded is not None
        assert np.array_equal(loaded, to_bitmap(symbol, cell_size=5))


class TestText:
    """Test terminal rendering."""

    def test_dimensions(self, symbol):
        lines = to_text(symbol).split("\n")
        assert len(lines) == 25
        assert all(len(line) == 50 for line in lines)
        assert lines[0].strip() == ""

    def test_finder_row(self, symbol):
        first = to_text(symbol, quiet_zone=0).split("\n")[0]
        assert first.startswith("██" * 7 + "  ")

    def test_custom_characters(self, symbol):
        text = to_text(symbol, quiet_zone=0, dark="#", light=".")
        assert text.split("\n")[1].startswith("#.....#.")


class TestUpiUri:
    """Test UPI payment URI construction."""

    def test_full_uri(self):
        assert build_upi_uri("shop@upi", "Cafe Blue", 120, "Table 4") == (
            "upi://pay?pa=shop%40upi&pn=Cafe+Blue&am=120.00&cu=INR&tn=Table+4"
        )

    def test_empty_fields_omitted(self):
        assert build_upi_uri("shop@upi", "", None, "") == "upi://pay?pa=shop%40upi&cu=INR"
        assert build_upi_uri(None) == "upi://pay?cu=INR"

    def test_reserved_characters_escaped(self):
        uri = build_upi_uri("a@b", "Tea & Snacks", "5", "50% off")
        assert "pn=Tea+%26+Snacks" in uri
        assert "tn=50%25+off" in uri

    def test_currency_override(self):
        assert build_upi_uri("a@b", currency="USD").endswith("cu=USD")

    @pytest.mark.parametrize("amount,expected", [
        (120, "120.00"),
        (99.5, "99.50"),
        ("1249.5", "1249.50"),
        ("abc", "0.00"),
        (float("nan"), "0.00"),
        (None, "0.00"),
    ])
    def test_format_amount(self, amount, expected):
        assert format_amount(amount) == expected


class TestCli:
    """Test the upiqr command."""

    def test_text_output(self, capsys):
        assert main(["hello"]) == 0
        out = capsys.readouterr().out
        assert "██" in out
        assert len(out.rstrip("\n").split("\n")) == 25

    def test_upi_fields_to_png(self, tmp_path, capsys):
        path = tmp_path / "pay.png"
        code = main([
            "--pa", "shop@upi", "--pn", "Cafe Blue", "--am", "120",
            "--png", str(path), "--cell-size", "4", "--quiet-zone", "1",
        ])
        assert code == 0
        assert "Saved" in capsys.readouterr().out

        expected = encode(build_upi_uri("shop@upi", "Cafe Blue", "120"))
        loaded = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        assert loaded.shape == ((expected.module_count + 2) * 4,) * 2

    def test_level_and_mask_options(self, tmp_path):
        path = tmp_path / "q.png"
        assert main(["hello", "--level", "H", "--mask", "3", "--png", str(path)]) == 0
        assert path.exists()

    def test_payload_too_large(self, capsys):
        assert main(["x" * 300]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_unsupported_version(self, capsys):
        assert main(["hello", "--version", "11"]) == 1
        assert "Unsupported version" in capsys.readouterr().err

    def test_bad_config(self, tmp_path, capsys):
        assert main(["hello", "--config", str(tmp_path / "nope.yaml")]) == 1
        assert "Cannot load config" in capsys.readouterr().err

    def test_requires_payload_or_upi_id(self):
        with pytest.raises(SystemExit) as excinfo:
            parse_arguments([])
        assert excinfo.value.code == 2

    def test_parse_defaults(self):
        args = parse_arguments(["text"])
        assert args.payload == "text"
        assert args.level is None
        assert args.png is None
