"""Price estimates for list records.

Prices and quantities are free-form strings; a leading number with a
comma or dot decimal separator is used, the rest is ignored.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .codec import ListRecord

_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+))")
_CENTS = Decimal("0.01")


def parse_amount(text: str | None) -> Decimal | None:
    """Parse "3,50", "3.50" or "3.50 EUR" to a Decimal; None if no number leads."""
    if not text:
        return None
    match = _NUMBER.match(text)
    if match is None:
        return None
    try:
        return Decimal(match.group(1).replace(",", "."))
    except InvalidOperation:
        return None


@dataclass
class PriceEstimate:
    total: Decimal
    priced_count: int
    unpriced_count: int

    @property
    def item_count(self) -> int:
        return self.priced_count + self.unpriced_count


def estimate_total(
    records: Iterable[ListRecord],
    selected_ids: Collection[str] | None = None,
) -> PriceEstimate:
    """Sum price * quantity over records (or only the selected ids).

    Quantity falls back to 1 when missing, zero or unparsable. Records
    without a positive price are counted as unpriced.
    """
    total = Decimal("0")
    priced = 0
    unpriced = 0

    for record in records:
        if selected_ids is not None and record.id not in selected_ids:
            continue

        price = parse_amount(record.price)
        quantity = parse_amount(record.quantity) or Decimal("1")

        if price is not None and price > 0:
            total += price * quantity
            priced += 1
        else:
            unpriced += 1

    return PriceEstimate(total=total, priced_count=priced, unpriced_count=unpriced)


def format_amount(amount: Decimal) -> str:
    """Render with two decimals and a comma separator: 12.5 -> "12,50"."""
    return str(amount.quantize(_CENTS, rounding=ROUND_HALF_UP)).replace(".", ",")
