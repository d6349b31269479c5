# src/vpa_metrics/models/quantity.py
"""
Arbitrary-precision resource amounts, as used for CPU and memory
recommendations. Amounts are kept as Decimal so that whole-unit and
milli-unit views can be taken without floating-point drift.
"""

from decimal import ROUND_CEILING, Decimal
from functools import total_ordering
from typing import Any, Union

from pydantic_core import core_schema

from ..utils.k8s_utils import parse_quantity


@total_ordering
class Quantity:
    """A Kubernetes resource quantity such as ``100m`` or ``256Mi``."""

    __slots__ = ("_amount", "_text")

    def __init__(self, quantity: Union[str, int, float, Decimal, None] = 0):
        self._amount = parse_quantity(quantity)
        self._text = quantity if isinstance(quantity, str) else None

    @property
    def amount(self) -> Decimal:
        return self._amount

    def value(self) -> int:
        """Whole-unit value, rounded up."""
        return int(self._amount.to_integral_value(rounding=ROUND_CEILING))

    def milli_value(self) -> int:
        """Value in thousandths of a unit, rounded up."""
        return int((self._amount * 1000).to_integral_value(rounding=ROUND_CEILING))

    def is_zero(self) -> bool:
        return self._amount == 0

    def __eq__(self, other):
        if isinstance(other, Quantity):
            return self._amount == other._amount
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, Quantity):
            return self._amount < other._amount
        return NotImplemented

    def __hash__(self):
        return hash(self._amount)

    def __str__(self):
        return self._text if self._text is not None else str(self._amount)

    def __repr__(self):
        return f"Quantity({str(self)!r})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler) -> core_schema.CoreSchema:
        # Accept Quantity instances as-is and parse anything else.
        return core_schema.no_info_plain_validator_function(
            lambda v: v if isinstance(v, cls) else cls(v),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )
