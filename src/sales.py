"""Sales bookkeeping: the single ongoing transaction and the sales history."""

from __future__ import annotations

import logging
from typing import List, Optional

from exceptions import FailedTransactionError
from products import Barcode, Product
from transactions import CategorisedTransaction, SpecialSaleTransaction, Transaction

logger = logging.getLogger(__name__)


class TransactionManager:
    """Holds at most one ongoing transaction.

    The manager never creates transactions; it is handed one, routes
    purchases into the associated customer's cart, and finalises it on
    close.
    """

    def __init__(self) -> None:
        self._ongoing: Optional[Transaction] = None

    def has_ongoing_transaction(self) -> bool:
        return self._ongoing is not None

    @property
    def ongoing_transaction(self) -> Optional[Transaction]:
        return self._ongoing

    def set_ongoing_transaction(self, transaction: Transaction) -> None:
        """Start managing ``transaction``.

        Raises:
            FailedTransactionError: If a transaction is already ongoing.
        """
        if self._ongoing is not None:
            raise FailedTransactionError("A transaction is already in progress.")
        self._ongoing = transaction
        logger.info(
            "Transaction started",
            extra={"extra": {"customer": transaction.associated_customer.name, "kind": type(transaction).__name__}},
        )

    def register_pending_purchase(self, product: Product) -> None:
        """Put ``product`` into the ongoing customer's cart.

        The product must already have been taken out of the inventory.

        Raises:
            FailedTransactionError: If nothing is ongoing or the ongoing
                transaction is already finalised.
        """
        if self._ongoing is None:
            raise FailedTransactionError("No ongoing transaction. Cannot add to cart.")
        if self._ongoing.is_finalised():
            raise FailedTransactionError("The current transaction is already finalised.")
        self._ongoing.associated_customer.cart.add_product(product)
        logger.debug("Purchase registered", extra={"extra": {"product": str(product)}})

    def close_current_transaction(self) -> Transaction:
        """Finalise the ongoing transaction, free the slot and return it.

        Empty or already finalised transactions are closed all the same.

        Raises:
            FailedTransactionError: If nothing is ongoing.
        """
        if self._ongoing is None:
            raise FailedTransactionError("No ongoing transaction to close.")
        transaction, self._ongoing = self._ongoing, None
        transaction.finalise()
        return transaction


class TransactionHistory:
    """Append-only record of finalised transactions and sales statistics."""

    def __init__(self) -> None:
        self._transactions: List[Transaction] = []

    def record_transaction(self, transaction: Transaction) -> None:
        """Append a finalised transaction.

        Raises:
            ValueError: If ``transaction`` has not been finalised.
        """
        if not transaction.is_finalised():
            raise ValueError("Transaction must be finalised before recording.")
        self._transactions.append(transaction)

    def get_all_transactions(self) -> List[Transaction]:
        return list(self._transactions)

    def get_last_transaction(self) -> Optional[Transaction]:
        if not self._transactions:
            return None
        return self._transactions[-1]

    def get_total_transactions_made(self) -> int:
        return len(self._transactions)

    def get_total_products_sold(self, barcode: Optional[Barcode] = None) -> int:
        """Sales volume.

        Without ``barcode`` this is the sum of every transaction's total,
        in cents.  With ``barcode`` it is the number of units of that type
        sold through categorised transactions.  Plain transactions do not
        report per-type quantities and are left out of the second form.
        """
        if barcode is None:
            return sum(transaction.get_total() for transaction in self._transactions)
        return sum(
            transaction.get_purchase_quantity(barcode)
            for transaction in self._transactions
            if isinstance(transaction, CategorisedTransaction)
        )

    def get_gross_earnings(self, barcode: Optional[Barcode] = None) -> int:
        return self.get_total_products_sold(barcode)

    def get_highest_grossing_transaction(self) -> Optional[Transaction]:
        """Transaction with the largest total; the earliest one wins ties."""
        best: Optional[Transaction] = None
        for transaction in self._transactions:
            if best is None or transaction.get_total() > best.get_total():
                best = transaction
        return best

    def get_most_popular_product(self) -> Barcode:
        """Barcode with the most units sold; ties go to catalogue order."""
        # max() keeps the first of equal keys
        return max(Barcode, key=self.get_total_products_sold)

    def get_average_spend_per_visit(self) -> float:
        """Mean transaction total in cents, 0.0 with no transactions."""
        if not self._transactions:
            return 0.0
        return self.get_gross_earnings() / len(self._transactions)

    def get_average_product_discount(self, barcode: Barcode) -> float:
        """Mean cents saved per unit of ``barcode`` sold, 0.0 if none sold.

        This is money per unit, not a sum of the discount percentages
        offered by each special sale.
        """
        sold = self.get_total_products_sold(barcode)
        if sold == 0:
            return 0.0
        saved = sum(
            transaction.get_purchase_saving(barcode)
            for transaction in self._transactions
            if isinstance(transaction, SpecialSaleTransaction)
        )
        return saved / sold
