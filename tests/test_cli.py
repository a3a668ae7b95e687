# --- path/bootstrap (keep this at the very top) ---
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
# --- end path/bootstrap ---

import unittest

import cli
import metrics
from config import FarmConfig
from customers import AddressBook, Customer
from farm import Farm
from inventory import BasicInventory, FancyInventory
from products import Barcode, Product
from transactions import SpecialSaleTransaction


class ScriptedManager:
    """Drive a FarmManager from a list of answers and collect its output."""

    def __init__(self, farm, answers):
        self._answers = iter(answers)
        self.prompts = []
        self.output = []
        self.manager = cli.FarmManager(farm, input_fn=self._answer, output_fn=self.output.append)

    def _answer(self, prompt):
        self.prompts.append(prompt)
        return next(self._answers)


class TestFarmManager(unittest.TestCase):

    def setUp(self):
        metrics.reset_metrics()
        self.book = AddressBook()
        self.farm = Farm(FancyInventory(), self.book)

    def run_script(self, answers, farm=None):
        scripted = ScriptedManager(farm or self.farm, answers)
        scripted.manager.run()
        return scripted.output

    def test_welcome_and_goodbye(self):
        output = self.run_script(["bogus", "q"])
        self.assertEqual(output[0], "-*- WELCOME TO THE FARM SHOP -*-")
        self.assertEqual(output[1], cli.INCORRECT_ARGUMENTS)
        self.assertEqual(output[-1], "Thank you for using the farm shop!")

    def test_inventory_mode(self):
        output = self.run_script(
            ["inventory", "list", "add Egg 3", "add cheese", "add egg 0", "add -o", "list", "q", "q"]
        )
        self.assertIn("Inventory is empty.", output)
        self.assertIn("Product/s added to the inventory.", output)
        self.assertIn(cli.INVALID_PRODUCT, output)
        self.assertIn(cli.INVALID_QUANTITY, output)
        self.assertIn("wool", output)
        self.assertEqual(output.count("Egg: 50c REGULAR"), 3)

    def test_quantities_refused_on_basic_inventory(self):
        farm = Farm(BasicInventory(), self.book)
        output = self.run_script(["inventory", "add milk 2", "add milk", "q", "q"], farm=farm)
        self.assertIn(cli.QUANTITIES_NOT_SUPPORTED, output)
        self.assertEqual(farm.get_all_stock(), [Product(Barcode.MILK)])

    def test_address_mode(self):
        output = self.run_script(
            [
                "address", "list",
                "add", "Ali", "33651111", "UQ",
                "add", "Ali", "33651111", "UQ",
                "add", "Bea", "12ab",
                "list", "q", "q",
            ]
        )
        self.assertIn("Address book is empty.", output)
        self.assertEqual(output.count("Customer added to the address book."), 1)
        self.assertIn("That customer already exists in the address book.", output)
        self.assertIn(cli.INVALID_PHONE, output)
        self.assertIn("Name: Ali | Phone Number: 33651111 | Address: UQ", output)
        self.assertEqual(self.farm.get_all_customers(), [Customer("Ali", 33651111, "UQ")])

    def test_categorised_sale(self):
        self.book.add_customer(Customer("Ali", 33651111, "UQ"))
        self.farm.stock_product(Barcode.EGG, quantity=3)
        output = self.run_script(
            [
                "sales",
                "start -c", "Ali", "33651111",
                "add egg 5",
                "add egg",
                "q",
                "checkout",
                "q",
                "q",
            ]
        )
        self.assertIn("Transaction started for Ali.", output)
        self.assertIn("We only had 3 egg to give you :(", output)
        self.assertIn("Sorry, that's out of stock!", output)
        self.assertTrue(any(line.startswith("You have a transaction in progress.") for line in output))
        receipt = next(line for line in output if "Thank you for shopping with us, Ali!" in line)
        self.assertIn("Total:".ljust(24) + "$1.50", receipt)
        self.assertEqual(self.farm.transaction_history.get_total_transactions_made(), 1)

    def test_special_sale_prompts_for_discounts(self):
        self.book.add_customer(Customer("Ali", 33651111, "UQ"))
        self.farm.stock_product(Barcode.MILK, quantity=2)
        output = self.run_script(
            [
                "sales",
                "start -specialsale", "Ali", "33651111",
                "cheese",
                "milk", "150",
                "milk", "25",
                "q",
                "add milk 2",
                "checkout",
                "q",
                "q",
            ]
        )
        self.assertIn("Please enter a valid product name.", output)
        self.assertIn("Discounts must be whole percentages from 0 to 100.", output)
        self.assertIn("Discounts entered as follows: {milk: 25%}", output)
        last = self.farm.transaction_history.get_last_transaction()
        self.assertIsInstance(last, SpecialSaleTransaction)
        self.assertEqual(last.get_total(), 660)

    def test_unknown_customer_cannot_start(self):
        output = self.run_script(["sales", "start", "Nobody", "1", "checkout", "q", "q"])
        self.assertIn("Customer not found. Add them in address book mode first.", output)
        self.assertTrue(any(line.startswith("Checkout request failed:") for line in output))

    def test_empty_checkout(self):
        self.book.add_customer(Customer("Ali", 33651111, "UQ"))
        output = self.run_script(["sales", "start", "Ali", "33651111", "checkout", "q", "q"])
        self.assertIn("Thanks for stopping by!", output)
        self.assertEqual(self.farm.transaction_history.get_total_transactions_made(), 0)

    def test_history_mode_without_transactions(self):
        output = self.run_script(["history", "last", "grossing", "popular", "q", "q"])
        self.assertEqual(output.count(cli.NO_TRANSACTIONS), 3)

    def test_history_mode(self):
        self.book.add_customer(Customer("Ali", 33651111, "UQ"))
        self.farm.stock_product(Barcode.JAM, quantity=2)
        output = self.run_script(
            [
                "sales", "start -c", "Ali", "33651111", "add jam 2", "checkout", "q",
                "history", "stats", "stats jam", "stats cheese", "popular", "last", "q",
                "q",
            ]
        )
        self.assertIn("Jam is the most popular!!", output)
        stats = [line for line in output if line.startswith("|--")]
        self.assertTrue(stats)
        self.assertTrue(any("| Gross Earnings:      $13.40" in line for line in output))
        self.assertTrue(any("| Total Products Sold: 2" in line for line in output))
        self.assertIn(cli.INVALID_PRODUCT, output)


class TestBuildFarm(unittest.TestCase):

    def test_inventory_follows_config(self):
        self.assertTrue(cli.build_farm(FarmConfig(fancy_inventory=True)).supports_bulk)
        self.assertFalse(cli.build_farm(FarmConfig(fancy_inventory=False)).supports_bulk)


if __name__ == "__main__":
    unittest.main(verbosity=2)
