# file: src/upiqr/cli.py

"""
Command-line interface for the QR encoder.

Examples:
  # Encode raw text and print it in the terminal
  upiqr "upi://pay?pa=shop@upi&cu=INR"

  # Build a UPI payment URI and write a PNG
  upiqr --pa shop@upi --pn "Cafe Blue" --am 120 --tn "Table 4" --png pay.png
"""

import argparse
import logging
import sys
from typing import List, Optional

from .encoder import QREncoder
from .errors import QRError
from .payload import build_upi_uri
from .render import save_png, to_text

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = True):
    """Configure logging for the command-line tool."""
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='upiqr',
        description='Encode text or a UPI payment request as a QR code',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split('Examples:', 1)[1] if __doc__ else None,
    )

    parser.add_argument(
        'payload',
        nargs='?',
        default=None,
        help='Text to encode (omit to build a UPI URI from --pa/--pn/--am/--tn)'
    )

    upi = parser.add_argument_group('UPI payment URI')
    upi.add_argument('--pa', dest='upi_id', help='Payee UPI ID')
    upi.add_argument('--pn', dest='payee_name', help='Payee name')
    upi.add_argument('--am', dest='amount', help='Amount')
    upi.add_argument('--tn', dest='note', help='Transaction note')

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration YAML file (default: packaged default_config.yaml)'
    )
    parser.add_argument(
        '--level',
        choices=['L', 'M', 'Q', 'H'],
        default=None,
        help='Error correction level (default: from config, M)'
    )
    parser.add_argument('--version', type=int, default=None, help='Force symbol version (1-10)')
    parser.add_argument('--mask', type=int, default=None, help='Force mask pattern (0-7)')
    parser.add_argument('--png', type=str, default=None, help='Write a PNG image to this path')
    parser.add_argument('--cell-size', type=int, default=None, help='Pixels per module')
    parser.add_argument('--quiet-zone', type=int, default=None, help='Quiet zone in modules')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging')

    args = parser.parse_args(argv)
    if args.payload is None and not args.upi_id:
        parser.error('either a payload or --pa is required')
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)

    try:
        encoder = QREncoder(config_path=args.config)
        setup_logging(args.verbose or encoder.config['system']['verbose'])

        payload = args.payload
        if payload is None:
            payload = build_upi_uri(args.upi_id, args.payee_name, args.amount, args.note)
            logger.info(f"UPI URI: {payload}")

        symbol = encoder.encode(payload, level=args.level, version=args.version, mask_pattern=args.mask)

        render = encoder.config['render']
        cell_size = args.cell_size if args.cell_size is not None else render['cell_size']
        quiet_zone = args.quiet_zone if args.quiet_zone is not None else render['quiet_zone']

        if args.png:
            save_png(symbol, args.png, cell_size=cell_size, quiet_zone=quiet_zone)
            print(f"Saved {symbol.module_count}x{symbol.module_count} QR code to {args.png}")
        else:
            print(to_text(symbol, quiet_zone=quiet_zone))
    except (QRError, ValueError, IOError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
