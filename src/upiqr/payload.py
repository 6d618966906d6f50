# file: src/upiqr/payload.py

"""
UPI payment URI construction.

Builds the `upi://pay` deep link that a billing counter encodes into its
payment QR symbol.
"""

from typing import Optional, Union
from urllib.parse import urlencode

UPI_SCHEME = "upi://pay"
DEFAULT_CURRENCY = "INR"


def format_amount(amount: Union[int, float, str, None]) -> str:
    """Two-decimal amount; unparsable values become 0.00."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        value = 0.0
    if value != value or value in (float("inf"), float("-inf")):
        value = 0.0
    return f"{value:.2f}"


def build_upi_uri(
    upi_id: Optional[str],
    payee_name: Optional[str] = None,
    amount: Union[int, float, str, None] = None,
    note: Optional[str] = None,
    currency: str = DEFAULT_CURRENCY,
) -> str:
    """
    Build a UPI payment URI.

    Empty fields are omitted, except the currency which is always present.
    Values are form-encoded (spaces become '+').

    Example:
        >>> build_upi_uri("shop@upi", "Cafe Blue", 120, "Table 4")
        'upi://pay?pa=shop%40upi&pn=Cafe+Blue&am=120.00&cu=INR&tn=Table+4'
    """
    params = []
    if upi_id:
        params.append(("pa", upi_id))
    if payee_name:
        params.append(("pn", payee_name))
    if amount is not None:
        params.append(("am", format_amount(amount)))
    params.append(("cu", currency))
    if note:
        params.append(("tn", note))
    return f"{UPI_SCHEME}?{urlencode(params)}"
