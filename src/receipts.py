"""Plain-text receipt rendering.

Transactions build a list of :class:`ReceiptLine` rows and hand them to
:func:`create_receipt`; monetary values arrive in integer cents and are
only turned into dollars here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

WIDTH = 48
HEADINGS = ("Item", "Qty", "Price (ea.)", "Subtotal")
# widths of every column but the last
COLUMN_WIDTHS = (11, 10, 17)
TOTAL_LABEL_WIDTH = 24

_shop_name = "The Farm Shop"
_shop_address = "12 Paddock Road, Gatton"


@dataclass(frozen=True)
class ReceiptLine:
    item: str
    quantity: int
    unit_price: int
    subtotal: int
    # discount percentage applied to this row, 0 for none
    discount: int = 0


def set_shop_details(name: str, address: str) -> None:
    """Change the shop name and address printed in receipt headers."""
    global _shop_name, _shop_address
    _shop_name = name
    _shop_address = address


def format_cents(cents: int) -> str:
    return f"${cents / 100:.2f}"


def _rule(char: str) -> str:
    return char * WIDTH


def _centred(text: str) -> str:
    return text.center(WIDTH).rstrip()


def _columns(values: Sequence[str]) -> str:
    padded = [value.ljust(width) for value, width in zip(values, COLUMN_WIDTHS)]
    return "".join(padded) + values[-1]


def _header() -> List[str]:
    return [_rule("="), _centred(_shop_name), _centred(_shop_address), "", _rule("=")]


def create_active_receipt() -> str:
    """Placeholder shown while a transaction is still open."""
    lines = [
        _rule("="),
        _centred("This transaction is still active."),
        _centred("Check out to see the final receipt."),
        _rule("="),
    ]
    return "\n".join(lines)


def create_receipt(
    lines: Sequence[ReceiptLine],
    total: int,
    customer_name: str,
    total_saved: Optional[int] = None,
) -> str:
    """Render a finalised receipt.

    Args:
        lines: One row per product type, already in display order.
        total: Amount charged, in cents.
        customer_name: Name used in the closing thank-you line.
        total_saved: Cents saved through discounts.  A savings line is only
            printed when this is positive.
    """
    out = _header()
    out.append(_columns(HEADINGS))
    out.append(_rule("-"))
    for line in lines:
        out.append(
            _columns(
                (
                    line.item,
                    str(line.quantity),
                    format_cents(line.unit_price),
                    format_cents(line.subtotal),
                )
            )
        )
        if line.discount:
            out.append(f"Discount applied! {line.discount}% off {line.item}")
    out.append(_rule("-"))
    out.append("Total:".ljust(TOTAL_LABEL_WIDTH) + format_cents(total))
    out.append(_rule("-"))
    if total_saved is not None and total_saved > 0:
        out.append(_centred(f"***** TOTAL SAVINGS: {format_cents(total_saved)} *****"))
    out.append(_centred(f"Thank you for shopping with us, {customer_name}!"))
    out.append(_rule("="))
    return "\n".join(out)
