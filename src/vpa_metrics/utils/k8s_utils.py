import re
from decimal import Decimal
from typing import Union

from ..core.exceptions import InvalidQuantityError

# Binary SI suffixes must be checked before the single-letter decimal ones.
_BINARY_SUFFIXES = {
    "Ki": Decimal(1024),
    "Mi": Decimal(1024) ** 2,
    "Gi": Decimal(1024) ** 3,
    "Ti": Decimal(1024) ** 4,
    "Pi": Decimal(1024) ** 5,
    "Ei": Decimal(1024) ** 6,
}

_DECIMAL_SUFFIXES = {
    "n": Decimal("0.000000001"),
    "u": Decimal("0.000001"),
    "m": Decimal("0.001"),
    "k": Decimal(1000),
    "M": Decimal(1000) ** 2,
    "G": Decimal(1000) ** 3,
    "T": Decimal(1000) ** 4,
    "P": Decimal(1000) ** 5,
    "E": Decimal(1000) ** 6,
}

# Number part of a quantity: optional sign, digits with an optional fraction, optional exponent.
_NUMBER_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_quantity(quantity: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Parse a Kubernetes quantity ("100m", "256Mi", "1.5", "2k") to Decimal.

    Raises:
        InvalidQuantityError: If the string is not a valid quantity.
    """
    if quantity is None:
        return Decimal(0)
    if isinstance(quantity, bool):
        raise InvalidQuantityError(f"Invalid quantity: {quantity!r}")
    if isinstance(quantity, Decimal):
        return quantity
    if isinstance(quantity, (int, float)):
        return Decimal(str(quantity))

    text = str(quantity)
    if not text:
        raise InvalidQuantityError("Invalid quantity: empty string")

    number, multiplier = text, Decimal(1)
    if text[-2:] in _BINARY_SUFFIXES:
        number, multiplier = text[:-2], _BINARY_SUFFIXES[text[-2:]]
    elif text[-1] in _DECIMAL_SUFFIXES:
        number, multiplier = text[:-1], _DECIMAL_SUFFIXES[text[-1]]

    if not _NUMBER_RE.fullmatch(number):
        raise InvalidQuantityError(f"Invalid quantity: {quantity!r}")

    return Decimal(number) * multiplier
