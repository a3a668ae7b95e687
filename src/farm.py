"""Business logic for the farm shop.

:class:`Farm` composes the inventory, address book, transaction manager
and sales history into the operations the CLI calls.  It holds no I/O:
every rejected request is raised to the caller as a :class:`FarmError`
(or a :class:`ValueError` for bad arguments).
"""

from __future__ import annotations

import logging
from typing import List

from customers import AddressBook, Customer
from exceptions import (
    CustomerNotFoundError,
    FailedTransactionError,
    FarmError,
    InvalidStockRequestError,
)
from inventory import Inventory
from metrics import (
    CHECKOUT_TOTAL_CENTS,
    CHECKOUTS_TOTAL,
    PRODUCTS_SOLD_TOTAL,
    PRODUCTS_STOCKED_TOTAL,
    REJECTED_OPERATIONS_TOTAL,
    STOCK_LEVEL,
)
from products import Barcode, Product, Quality
from sales import TransactionHistory, TransactionManager
from transactions import CategorisedTransaction, Transaction

logger = logging.getLogger(__name__)

NO_TRANSACTIONS_MESSAGE = "No transactions available."


def _rejected(error: FarmError) -> FarmError:
    REJECTED_OPERATIONS_TOTAL.inc(type=type(error).__name__)
    logger.warning(str(error), extra={"extra": {"error": type(error).__name__}})
    return error


class Farm:
    """The farm: stock, customers, the ongoing sale and sales history."""

    def __init__(self, inventory: Inventory, address_book: AddressBook | None = None) -> None:
        self._inventory = inventory
        self._address_book = address_book if address_book is not None else AddressBook()
        self._transaction_manager = TransactionManager()
        self._transaction_history = TransactionHistory()

    # ---- Accessors ----

    @property
    def transaction_manager(self) -> TransactionManager:
        return self._transaction_manager

    @property
    def transaction_history(self) -> TransactionHistory:
        return self._transaction_history

    @property
    def supports_bulk(self) -> bool:
        return self._inventory.supports_bulk

    def get_all_customers(self) -> List[Customer]:
        return self._address_book.get_all_records()

    def get_all_stock(self) -> List[Product]:
        return self._inventory.get_all_products()

    # ---- Customers ----

    def save_customer(self, customer: Customer) -> None:
        """Raises :class:`DuplicateCustomerError` for a known customer."""
        try:
            self._address_book.add_customer(customer)
        except FarmError as ex:
            _rejected(ex)
            raise

    def get_customer(self, name: str, phone_number: int) -> Customer:
        """Raises :class:`CustomerNotFoundError` if nobody matches."""
        try:
            return self._address_book.get_customer(name, phone_number)
        except CustomerNotFoundError as ex:
            _rejected(ex)
            raise

    # ---- Stock ----

    def stock_product(self, barcode: Barcode, quality: Quality = Quality.REGULAR, quantity: int = 1) -> None:
        """Add ``quantity`` units to the inventory.

        Raises:
            InvalidStockRequestError: If ``quantity`` is below one, or above
                one while the farm runs an inventory without bulk support.
        """
        if quantity < 1:
            raise _rejected(InvalidStockRequestError("Quantity must be at least 1."))
        if quantity > 1 and not self._inventory.supports_bulk:
            raise _rejected(
                InvalidStockRequestError("Basic inventory does not support adding more than one product at a time.")
            )
        self._inventory.add_product(barcode, quality, quantity)
        PRODUCTS_STOCKED_TOTAL.inc(quantity, barcode=barcode.name)
        STOCK_LEVEL.inc(quantity, barcode=barcode.name)
        logger.info(
            "Product stocked",
            extra={"extra": {"barcode": barcode.name, "quality": quality.name, "quantity": quantity}},
        )

    # ---- Sales ----

    def start_transaction(self, transaction: Transaction) -> None:
        """Make ``transaction`` the ongoing one.

        Raises:
            FailedTransactionError: If the customer is not in the address
                book, the transaction is already finalised or another
                transaction is ongoing.
        """
        if not self._address_book.contains_customer(transaction.associated_customer):
            raise _rejected(FailedTransactionError("The transaction's customer is not in the address book."))
        if transaction.is_finalised():
            raise _rejected(FailedTransactionError("The transaction is already finalised."))
        try:
            self._transaction_manager.set_ongoing_transaction(transaction)
        except FailedTransactionError as ex:
            _rejected(ex)
            raise

    def add_to_cart(self, barcode: Barcode, quantity: int = 1) -> int:
        """Move up to ``quantity`` units from stock into the ongoing cart.

        Returns the number of units actually added, which is lower than
        requested when stock runs out.

        Raises:
            ValueError: If ``quantity`` is below one.
            FailedTransactionError: If no transaction is ongoing, the
                ongoing one is finalised, or ``quantity`` is above one
                without bulk support. Stock is left untouched on rejection.
        """
        if quantity < 1:
            raise ValueError("Quantity must be at least 1.")
        ongoing = self._transaction_manager.ongoing_transaction
        if ongoing is None:
            raise _rejected(FailedTransactionError("No ongoing transaction. Cannot add to cart."))
        if ongoing.is_finalised():
            raise _rejected(FailedTransactionError("The current transaction is already finalised."))
        try:
            removed = self._inventory.remove_product(barcode, quantity)
        except FailedTransactionError as ex:
            _rejected(ex)
            raise
        for product in removed:
            self._transaction_manager.register_pending_purchase(product)
        if removed:
            STOCK_LEVEL.dec(len(removed), barcode=barcode.name)
        logger.info(
            "Added to cart",
            extra={"extra": {"barcode": barcode.name, "requested": quantity, "added": len(removed)}},
        )
        return len(removed)

    def checkout(self) -> bool:
        """Close the ongoing transaction.

        The transaction is recorded in the history only if it holds at
        least one purchase.  Returns whether it was recorded.

        Raises:
            FailedTransactionError: If no transaction is ongoing.
        """
        try:
            transaction = self._transaction_manager.close_current_transaction()
        except FailedTransactionError as ex:
            _rejected(ex)
            raise
        purchases = transaction.get_purchases()
        if not purchases:
            CHECKOUTS_TOTAL.inc(outcome="empty")
            logger.info(
                "Checkout without purchases",
                extra={"extra": {"customer": transaction.associated_customer.name}},
            )
            return False
        self._transaction_history.record_transaction(transaction)
        total = transaction.get_total()
        CHECKOUTS_TOTAL.inc(outcome="recorded")
        CHECKOUT_TOTAL_CENTS.observe(total, kind=type(transaction).__name__)
        for product in purchases:
            PRODUCTS_SOLD_TOTAL.inc(barcode=product.barcode.name)
        logger.info(
            "Checkout recorded",
            extra={
                "extra": {
                    "customer": transaction.associated_customer.name,
                    "items": len(purchases),
                    "total": total,
                    "categorised": isinstance(transaction, CategorisedTransaction),
                }
            },
        )
        return True

    def get_last_receipt(self) -> str:
        last = self._transaction_history.get_last_transaction()
        if last is None:
            return NO_TRANSACTIONS_MESSAGE
        return last.get_receipt()
