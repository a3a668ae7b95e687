"""Transactions: a customer's purchases, priced and frozen at checkout.

A transaction is *active* from construction until :meth:`Transaction.finalise`.
While active it reads straight from the customer's cart so the customer
can keep shopping.  Finalising copies the cart into an immutable snapshot
and empties the cart; from then on purchases and totals never change.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Set, Tuple

import receipts
from customers import Customer
from products import Barcode, Product, sort_by_catalogue
from receipts import ReceiptLine

logger = logging.getLogger(__name__)


class Transaction:
    """Purchases made by one customer during one visit."""

    def __init__(self, customer: Customer) -> None:
        self._customer = customer
        self._snapshot: Optional[Tuple[Product, ...]] = None

    @property
    def associated_customer(self) -> Customer:
        return self._customer

    def is_finalised(self) -> bool:
        return self._snapshot is not None

    def finalise(self) -> None:
        """Freeze the cart contents as this transaction's purchases.

        Calling this on a finalised transaction does nothing, so the
        snapshot is taken exactly once.
        """
        if self.is_finalised():
            logger.debug("Transaction already finalised", extra={"extra": {"customer": self._customer.name}})
            return
        cart = self._customer.cart
        self._snapshot = tuple(cart.get_contents())
        cart.set_empty()
        logger.info(
            "Transaction finalised",
            extra={"extra": {"customer": self._customer.name, "items": len(self._snapshot), "total": self.get_total()}},
        )

    def get_purchases(self) -> List[Product]:
        if self._snapshot is None:
            return self._customer.cart.get_contents()
        return list(self._snapshot)

    def get_total(self) -> int:
        """Amount due in cents."""
        return sum(product.base_price for product in self.get_purchases())

    def _group_by_type(self) -> Dict[Barcode, List[Product]]:
        grouped: Dict[Barcode, List[Product]] = {}
        for product in self.get_purchases():
            grouped.setdefault(product.barcode, []).append(product)
        return {barcode: grouped[barcode] for barcode in sort_by_catalogue(grouped)}

    def _receipt_lines(self) -> List[ReceiptLine]:
        return [
            ReceiptLine(
                item=barcode.display_name.lower(),
                quantity=len(products),
                unit_price=barcode.base_price,
                subtotal=len(products) * barcode.base_price,
            )
            for barcode, products in self._group_by_type().items()
        ]

    def get_receipt(self) -> str:
        if not self.is_finalised():
            return receipts.create_active_receipt()
        return receipts.create_receipt(self._receipt_lines(), self.get_total(), self._customer.name)

    def _status(self) -> str:
        return "Finalised" if self.is_finalised() else "Active"

    def __str__(self) -> str:
        products = ", ".join(str(product) for product in self.get_purchases())
        return (
            f"Transaction {{Customer: {self._customer.name} | Phone Number: {self._customer.phone_number}"
            f" | Address: {self._customer.address}, Status: {self._status()},"
            f" Associated Products: [{products}]}}"
        )


class CategorisedTransaction(Transaction):
    """Transaction whose purchases are grouped and priced per product type.

    The grouping is rebuilt from :meth:`get_purchases` on every call, and
    subclasses price each type through :meth:`get_purchase_subtotal`.
    """

    def get_purchased_types(self) -> Set[Barcode]:
        return set(self._group_by_type())

    def get_purchases_by_type(self) -> Dict[Barcode, List[Product]]:
        """Purchases keyed by barcode, in catalogue order."""
        return self._group_by_type()

    def get_purchase_quantity(self, barcode: Barcode) -> int:
        return len(self.get_purchases_by_type().get(barcode, []))

    def get_purchase_subtotal(self, barcode: Barcode) -> int:
        return self.get_purchase_quantity(barcode) * barcode.base_price

    def get_total(self) -> int:
        return sum(self.get_purchase_subtotal(barcode) for barcode in self.get_purchased_types())

    def _discount_for(self, barcode: Barcode) -> int:
        return 0

    def _receipt_lines(self) -> List[ReceiptLine]:
        return [
            ReceiptLine(
                item=barcode.display_name.lower(),
                quantity=len(products),
                unit_price=barcode.base_price,
                subtotal=self.get_purchase_subtotal(barcode),
                discount=self._discount_for(barcode),
            )
            for barcode, products in self.get_purchases_by_type().items()
        ]


class SpecialSaleTransaction(CategorisedTransaction):
    """Categorised transaction with a percentage discount per product type.

    Each type's subtotal is discounted on its own and rounded down to a
    whole cent, so rounding never carries between types.
    """

    def __init__(self, customer: Customer, discounts: Optional[Mapping[Barcode, int]] = None) -> None:
        super().__init__(customer)
        self._discounts: Dict[Barcode, int] = {}
        for barcode, percentage in (discounts or {}).items():
            if not 0 <= percentage <= 100:
                raise ValueError(f"Discount for {barcode.display_name} must be between 0 and 100, got {percentage}.")
            self._discounts[barcode] = percentage

    def get_discount_amount(self, barcode: Barcode) -> int:
        """Discount percentage for ``barcode`` (0 when none applies)."""
        return self._discounts.get(barcode, 0)

    def get_discounts(self) -> Dict[Barcode, int]:
        return dict(self._discounts)

    def _full_subtotal(self, barcode: Barcode) -> int:
        return super().get_purchase_subtotal(barcode)

    def get_purchase_subtotal(self, barcode: Barcode) -> int:
        return self._full_subtotal(barcode) * (100 - self.get_discount_amount(barcode)) // 100

    def get_purchase_saving(self, barcode: Barcode) -> int:
        """Cents taken off the subtotal of ``barcode`` by its discount."""
        return self._full_subtotal(barcode) - self.get_purchase_subtotal(barcode)

    def get_total_saved(self) -> int:
        return sum(self.get_purchase_saving(barcode) for barcode in self.get_purchased_types())

    def _discount_for(self, barcode: Barcode) -> int:
        return self.get_discount_amount(barcode)

    def get_receipt(self) -> str:
        if not self.is_finalised():
            return receipts.create_active_receipt()
        return receipts.create_receipt(
            self._receipt_lines(),
            self.get_total(),
            self.associated_customer.name,
            total_saved=self.get_total_saved(),
        )

    def __str__(self) -> str:
        discounts = ", ".join(f"{barcode.name}={pct}%" for barcode, pct in self._discounts.items())
        return super().__str__()[:-1] + f", Discounts: {{{discounts}}}}}"
