# --- path/bootstrap (keep this at the very top) ---
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
# --- end path/bootstrap ---

import unittest

import metrics
from customers import AddressBook, Customer
from exceptions import (
    CustomerNotFoundError,
    DuplicateCustomerError,
    FailedTransactionError,
    InvalidStockRequestError,
)
from farm import NO_TRANSACTIONS_MESSAGE, Farm
from inventory import BasicInventory, FancyInventory
from products import Barcode, Product, Quality
from transactions import CategorisedTransaction, SpecialSaleTransaction, Transaction


class FarmTestCase(unittest.TestCase):
    def setUp(self):
        metrics.reset_metrics()
        self.customer = Customer("Ali", 33651111, "UQ")
        book = AddressBook()
        book.add_customer(self.customer)
        self.farm = Farm(FancyInventory(), book)
        self.basic_farm = Farm(BasicInventory(), book)


class TestCustomers(FarmTestCase):

    def test_save_and_find(self):
        bea = Customer("Bea", 5551234, "QUT")
        self.farm.save_customer(bea)
        self.assertIs(self.farm.get_customer("Bea", 5551234), bea)
        self.assertEqual(self.farm.get_all_customers(), [self.customer, bea])

    def test_duplicate_customer(self):
        with self.assertRaises(DuplicateCustomerError):
            self.farm.save_customer(Customer("Ali", 33651111, "UQ"))
        self.assertEqual(metrics.REJECTED_OPERATIONS_TOTAL.value(type="DuplicateCustomerError"), 1)

    def test_unknown_customer(self):
        with self.assertRaises(CustomerNotFoundError):
            self.farm.get_customer("Ali", 1)


class TestStocking(FarmTestCase):

    def test_stock_updates_inventory_and_metrics(self):
        self.farm.stock_product(Barcode.EGG, Quality.REGULAR, 3)
        self.farm.stock_product(Barcode.WOOL, Quality.IRIDIUM)
        self.assertEqual(len(self.farm.get_all_stock()), 4)
        self.assertEqual(metrics.PRODUCTS_STOCKED_TOTAL.value(barcode="EGG"), 3)
        self.assertEqual(metrics.STOCK_LEVEL.value(barcode="WOOL"), 1.0)

    def test_bulk_stock_rejected_on_basic_inventory(self):
        with self.assertLogs("farm", level="WARNING") as captured:
            with self.assertRaises(InvalidStockRequestError):
                self.basic_farm.stock_product(Barcode.EGG, Quality.REGULAR, 2)
        self.assertIn("Basic inventory does not support", captured.output[0])
        self.assertEqual(self.basic_farm.get_all_stock(), [])
        self.assertEqual(metrics.REJECTED_OPERATIONS_TOTAL.value(type="InvalidStockRequestError"), 1)

    def test_non_positive_quantity(self):
        with self.assertRaises(InvalidStockRequestError):
            self.farm.stock_product(Barcode.EGG, Quality.REGULAR, 0)

    def test_supports_bulk(self):
        self.assertTrue(self.farm.supports_bulk)
        self.assertFalse(self.basic_farm.supports_bulk)


class TestSelling(FarmTestCase):

    def test_start_requires_known_customer(self):
        stranger = Customer("Zed", 999, "Nowhere")
        with self.assertRaises(FailedTransactionError):
            self.farm.start_transaction(Transaction(stranger))
        self.assertFalse(self.farm.transaction_manager.has_ongoing_transaction())

    def test_only_one_transaction_at_a_time(self):
        self.farm.start_transaction(Transaction(self.customer))
        with self.assertRaises(FailedTransactionError):
            self.farm.start_transaction(CategorisedTransaction(self.customer))

    def test_finalised_transaction_cannot_start(self):
        transaction = Transaction(self.customer)
        transaction.finalise()
        with self.assertRaises(FailedTransactionError):
            self.farm.start_transaction(transaction)
        self.assertFalse(self.farm.transaction_manager.has_ongoing_transaction())

    def test_rejected_add_to_finalised_transaction_keeps_stock(self):
        self.farm.stock_product(Barcode.EGG, Quality.GOLD, 3)
        transaction = Transaction(self.customer)
        transaction.finalise()
        self.farm.transaction_manager.set_ongoing_transaction(transaction)
        with self.assertRaises(FailedTransactionError):
            self.farm.add_to_cart(Barcode.EGG, 2)
        self.assertEqual(len(self.farm.get_all_stock()), 3)
        self.assertTrue(self.customer.cart.is_empty())
        self.assertEqual(metrics.STOCK_LEVEL.value(barcode="EGG"), 3.0)
        self.assertEqual(metrics.REJECTED_OPERATIONS_TOTAL.value(type="FailedTransactionError"), 1)

    def test_add_to_cart_requires_transaction(self):
        self.farm.stock_product(Barcode.EGG)
        with self.assertRaises(FailedTransactionError):
            self.farm.add_to_cart(Barcode.EGG)
        self.assertEqual(len(self.farm.get_all_stock()), 1)

    def test_add_to_cart_rejects_non_positive_quantity(self):
        self.farm.start_transaction(Transaction(self.customer))
        with self.assertRaises(ValueError):
            self.farm.add_to_cart(Barcode.EGG, 0)

    def test_add_to_cart_moves_best_units(self):
        self.farm.stock_product(Barcode.JAM, Quality.REGULAR, 2)
        self.farm.stock_product(Barcode.JAM, Quality.GOLD)
        self.farm.start_transaction(CategorisedTransaction(self.customer))
        self.assertEqual(self.farm.add_to_cart(Barcode.JAM, 2), 2)
        self.assertEqual(
            self.customer.cart.get_contents(),
            [Product(Barcode.JAM, Quality.GOLD), Product(Barcode.JAM, Quality.REGULAR)],
        )
        self.assertEqual(self.farm.get_all_stock(), [Product(Barcode.JAM, Quality.REGULAR)])
        self.assertEqual(metrics.STOCK_LEVEL.value(barcode="JAM"), 1.0)

    def test_add_to_cart_partial_and_out_of_stock(self):
        self.farm.stock_product(Barcode.EGG, Quality.REGULAR, 3)
        self.farm.start_transaction(CategorisedTransaction(self.customer))
        self.assertEqual(self.farm.add_to_cart(Barcode.EGG, 5), 3)
        self.assertEqual(self.farm.add_to_cart(Barcode.EGG), 0)
        self.assertEqual(len(self.customer.cart), 3)

    def test_bulk_add_to_cart_rejected_on_basic_inventory(self):
        self.basic_farm.stock_product(Barcode.EGG)
        self.basic_farm.start_transaction(Transaction(self.customer))
        with self.assertRaises(FailedTransactionError):
            self.basic_farm.add_to_cart(Barcode.EGG, 2)
        self.assertEqual(len(self.basic_farm.get_all_stock()), 1)
        self.assertEqual(self.basic_farm.add_to_cart(Barcode.EGG), 1)

    def test_checkout_records_transaction(self):
        self.farm.stock_product(Barcode.MILK, Quality.REGULAR, 3)
        self.farm.start_transaction(SpecialSaleTransaction(self.customer, {Barcode.MILK: 10}))
        self.farm.add_to_cart(Barcode.MILK, 3)
        self.assertTrue(self.farm.checkout())
        history = self.farm.transaction_history
        self.assertEqual(history.get_total_transactions_made(), 1)
        self.assertEqual(history.get_last_transaction().get_total(), 1188)
        self.assertTrue(self.customer.cart.is_empty())
        self.assertFalse(self.farm.transaction_manager.has_ongoing_transaction())
        self.assertIn("TOTAL SAVINGS: $1.32", self.farm.get_last_receipt())
        self.assertEqual(metrics.CHECKOUTS_TOTAL.value(outcome="recorded"), 1)
        self.assertEqual(metrics.PRODUCTS_SOLD_TOTAL.value(barcode="MILK"), 3)
        self.assertEqual(metrics.CHECKOUT_TOTAL_CENTS.count(kind="SpecialSaleTransaction"), 1)

    def test_empty_checkout_is_not_recorded(self):
        self.farm.start_transaction(Transaction(self.customer))
        self.assertFalse(self.farm.checkout())
        self.assertEqual(self.farm.transaction_history.get_total_transactions_made(), 0)
        self.assertFalse(self.farm.transaction_manager.has_ongoing_transaction())
        self.assertEqual(metrics.CHECKOUTS_TOTAL.value(outcome="empty"), 1)

    def test_checkout_without_transaction(self):
        with self.assertRaises(FailedTransactionError):
            self.farm.checkout()

    def test_last_receipt_without_history(self):
        self.assertEqual(self.farm.get_last_receipt(), NO_TRANSACTIONS_MESSAGE)

    def test_history_after_several_sales(self):
        self.farm.stock_product(Barcode.EGG, Quality.REGULAR, 4)
        self.farm.stock_product(Barcode.WOOL)
        for barcode, quantity in ((Barcode.EGG, 4), (Barcode.WOOL, 1)):
            self.farm.start_transaction(CategorisedTransaction(self.customer))
            self.farm.add_to_cart(barcode, quantity)
            self.farm.checkout()
        history = self.farm.transaction_history
        self.assertEqual(history.get_total_transactions_made(), 2)
        self.assertIs(history.get_most_popular_product(), Barcode.EGG)
        self.assertEqual(history.get_highest_grossing_transaction().get_total(), 2850)
        self.assertEqual(history.get_total_products_sold(), 200 + 2850)


if __name__ == "__main__":
    unittest.main(verbosity=2)
