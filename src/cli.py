"""
Command‑line interface for the farm shop.

This script wires the ``Farm`` class into an interactive, mode based CLI
loop.  It prompts for commands, invokes methods on the ``Farm`` instance
and prints results.  Separating the CLI from the business logic keeps
the latter testable and free from I/O code; the prompt and output
functions are injectable so the loop itself can be driven from tests.

Modes and their commands::

    inventory  add <product> [qty] | add -o | list | q
    address    add | list | q
    sales      start [-c|-categorised|-s|-specialsale] | add <product> [qty]
               | add -o | checkout | q
    history    stats [product] | last | grossing | popular | q
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, List, Optional

from config import FarmConfig
from customers import AddressBook, Customer
from exceptions import FarmError, InvalidStockRequestError
from farm import Farm
from inventory import BasicInventory, FancyInventory
from logging_config import configure_logging
from products import Barcode, Quality
from receipts import set_shop_details
from transactions import CategorisedTransaction, SpecialSaleTransaction, Transaction

logger = logging.getLogger(__name__)

INCORRECT_ARGUMENTS = "Incorrect arguments provided, please try again."
QUANTITIES_NOT_SUPPORTED = "Quantities are not supported by this farm's inventory."
INVALID_QUANTITY = "Invalid quantity provided, it must be a whole number of at least 1."
INVALID_PRODUCT = "Invalid product name provided. Use 'add -o' to list the options."
INVALID_PHONE = "Invalid phone number provided, it must contain digits only."
NO_TRANSACTIONS = "No transactions made!"


class FarmManager:
    """Interactive controller between a :class:`Farm` and the terminal."""

    def __init__(
        self,
        farm: Farm,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self.farm = farm
        self._input = input_fn
        self._output = output_fn

    # ---- I/O helpers ----

    def _display(self, message: str) -> None:
        self._output(message)

    def _prompt(self, text: str) -> str:
        return self._input(text).strip()

    def _prompt_command(self, mode: str) -> List[str]:
        words = self._prompt(f"{mode}> ").lower().split()
        return words or [""]

    def _display_product_options(self) -> None:
        for barcode in Barcode:
            self._display(barcode.name.lower())

    def _parse_quantity(self, raw: str) -> Optional[int]:
        try:
            quantity = int(raw)
        except ValueError:
            return None
        return quantity if quantity >= 1 else None

    # ---- Main loop ----

    def run(self) -> None:
        """Prompt for modes until the user quits."""
        self._display("-*- WELCOME TO THE FARM SHOP -*-")
        modes: Dict[str, Callable[[], None]] = {
            "inventory": self.launch_inventory_mode,
            "address": self.launch_address_book_mode,
            "sales": self.launch_sales_mode,
            "history": self.launch_history_mode,
        }
        while True:
            mode = self._prompt("Select a mode (inventory, address, sales, history, q): ").lower()
            if mode == "q":
                break
            handler = modes.get(mode)
            if handler is None:
                self._display(INCORRECT_ARGUMENTS)
                continue
            handler()
        self._display("Thank you for using the farm shop!")

    # ---- Inventory mode ----

    def launch_inventory_mode(self) -> None:
        while True:
            command = self._prompt_command("inventory")
            if command[0] == "q":
                return
            if command[0] == "add":
                self._handle_inventory_add(command)
            elif command[0] == "list":
                self._display_stock()
            else:
                self._display(INCORRECT_ARGUMENTS)

    def _display_stock(self) -> None:
        stock = self.farm.get_all_stock()
        if not stock:
            self._display("Inventory is empty.")
            return
        for product in stock:
            self._display(str(product))

    def _handle_inventory_add(self, command: List[str]) -> None:
        if len(command) == 2 and command[1] == "-o":
            self._display_product_options()
            return
        if len(command) not in (2, 3):
            self._display(INCORRECT_ARGUMENTS)
            return
        quantity = 1
        if len(command) == 3:
            if not self.farm.supports_bulk:
                self._display(QUANTITIES_NOT_SUPPORTED)
                return
            quantity = self._parse_quantity(command[2])
            if quantity is None:
                self._display(INVALID_QUANTITY)
                return
        try:
            barcode = Barcode.from_name(command[1])
        except InvalidStockRequestError:
            self._display(INVALID_PRODUCT)
            return
        try:
            self.farm.stock_product(barcode, Quality.REGULAR, quantity)
        except FarmError as ex:
            self._display(f"Product could not be added: {ex}")
            return
        self._display("Product/s added to the inventory.")

    # ---- Address book mode ----

    def launch_address_book_mode(self) -> None:
        while True:
            command = self._prompt_command("address")
            if command[0] == "q":
                return
            if command[0] == "add":
                self.create_customer()
            elif command[0] == "list":
                customers = self.farm.get_all_customers()
                if not customers:
                    self._display("Address book is empty.")
                for customer in customers:
                    self._display(str(customer))
            else:
                self._display(INCORRECT_ARGUMENTS)

    def _prompt_phone_number(self) -> Optional[int]:
        raw = self._prompt("Customer phone number: ")
        if not raw.isdigit() or int(raw) == 0:
            self._display(INVALID_PHONE)
            return None
        return int(raw)

    def create_customer(self) -> None:
        """Prompt for a new customer and save it in the address book."""
        name = self._prompt("Customer name: ")
        phone_number = self._prompt_phone_number()
        if phone_number is None:
            return
        address = self._prompt("Customer address: ")
        try:
            customer = Customer(name, phone_number, address)
        except ValueError as ex:
            self._display(f"Customer could not be created: {ex}")
            return
        try:
            self.farm.save_customer(customer)
        except FarmError:
            self._display("That customer already exists in the address book.")
            return
        self._display("Customer added to the address book.")

    # ---- Sales mode ----

    def launch_sales_mode(self) -> None:
        while True:
            command = self._prompt_command("sales")
            if command[0] == "q":
                if self.farm.transaction_manager.has_ongoing_transaction():
                    self._display(
                        "You have a transaction in progress. Please check out "
                        "before quitting sales mode or your inventory may be corrupted."
                    )
                    continue
                return
            if command[0] == "start" and len(command) <= 2:
                self.initiate_transaction(command[1] if len(command) == 2 else "")
            elif command[0] == "add":
                self._handle_transaction_add(command)
            elif command[0] == "checkout":
                self._handle_checkout()
            else:
                self._display(INCORRECT_ARGUMENTS)

    def initiate_transaction(self, transaction_type: str) -> None:
        """Look up a customer and start a transaction of the given type."""
        name = self._prompt("Customer name: ")
        phone_number = self._prompt_phone_number()
        if phone_number is None:
            return
        try:
            customer = self.farm.get_customer(name, phone_number)
        except FarmError:
            self._display("Customer not found. Add them in address book mode first.")
            return
        transaction: Transaction
        if transaction_type in ("-s", "-specialsale"):
            transaction = SpecialSaleTransaction(customer, self._prompt_discounts())
        elif transaction_type in ("-c", "-categorised"):
            transaction = CategorisedTransaction(customer)
        elif transaction_type == "":
            transaction = Transaction(customer)
        else:
            self._display(INCORRECT_ARGUMENTS)
            return
        try:
            self.farm.start_transaction(transaction)
        except FarmError as ex:
            self._display(f"Transaction could not be started: {ex}")
            return
        self._display(f"Transaction started for {customer.name}.")

    def _prompt_discounts(self) -> Dict[Barcode, int]:
        self._display("Entering discount setting! Enter 'q' as the product name to finish.")
        discounts: Dict[Barcode, int] = {}
        while True:
            name = self._prompt("Product name: ").lower()
            if name == "q":
                break
            try:
                barcode = Barcode.from_name(name)
            except InvalidStockRequestError:
                self._display("Please enter a valid product name.")
                continue
            raw = self._prompt("Discount (%): ")
            if not raw.isdigit() or int(raw) > 100:
                self._display("Discounts must be whole percentages from 0 to 100.")
                continue
            # a repeated product overwrites its earlier discount
            discounts[barcode] = int(raw)
        summary = ", ".join(f"{barcode.name.lower()}: {pct}%" for barcode, pct in discounts.items())
        self._display(f"Discounts entered as follows: {{{summary}}}")
        return discounts

    def _handle_transaction_add(self, command: List[str]) -> None:
        if len(command) == 2 and command[1] == "-o":
            self._display_product_options()
            return
        if len(command) not in (2, 3):
            self._display(INCORRECT_ARGUMENTS)
            return
        quantity = 1
        if len(command) == 3:
            if not self.farm.supports_bulk:
                self._display(QUANTITIES_NOT_SUPPORTED)
                return
            quantity = self._parse_quantity(command[2])
            if quantity is None:
                self._display(INVALID_QUANTITY)
                return
        try:
            barcode = Barcode.from_name(command[1])
        except InvalidStockRequestError:
            self._display(INVALID_PRODUCT)
            return
        try:
            added = self.farm.add_to_cart(barcode, quantity)
        except FarmError as ex:
            self._display(f"Product could not be added to transaction: {ex}")
            return
        if added == 0:
            self._display("Sorry, that's out of stock!")
        elif added < quantity:
            self._display(f"We only had {added} {command[1]} to give you :(")
        else:
            self._display("Item/s added to cart.")

    def _handle_checkout(self) -> None:
        try:
            recorded = self.farm.checkout()
        except FarmError as ex:
            self._display(f"Checkout request failed: {ex}")
            return
        if recorded:
            self._display(self.farm.get_last_receipt())
        else:
            self._display("Thanks for stopping by!")

    # ---- History mode ----

    def launch_history_mode(self) -> None:
        history = self.farm.transaction_history
        while True:
            command = self._prompt_command("history")
            if command[0] == "q":
                return
            if command[0] == "stats" and len(command) <= 2:
                self._handle_stats(command[1] if len(command) == 2 else None)
            elif command[0] == "last":
                if history.get_total_transactions_made() == 0:
                    self._display(NO_TRANSACTIONS)
                else:
                    self._display(self.farm.get_last_receipt())
            elif command[0] == "grossing":
                best = history.get_highest_grossing_transaction()
                self._display(NO_TRANSACTIONS if best is None else best.get_receipt())
            elif command[0] == "popular":
                if history.get_total_transactions_made() == 0:
                    self._display(NO_TRANSACTIONS)
                else:
                    self._display(f"{history.get_most_popular_product().display_name} is the most popular!!")
            else:
                self._display(INCORRECT_ARGUMENTS)

    def _handle_stats(self, product_name: Optional[str]) -> None:
        history = self.farm.transaction_history
        lines = [
            "|--------------------------",
            "|     Stats for all",
            f"| Total Transactions:  {history.get_total_transactions_made()}",
            f"| Average Sale Price:  ${history.get_average_spend_per_visit() / 100:.2f}",
        ]
        if product_name is None:
            lines += [
                f"| Gross Earnings:      ${history.get_gross_earnings() / 100:.2f}",
                "|--------------------------",
            ]
            self._display("\n".join(lines))
            return
        try:
            barcode = Barcode.from_name(product_name)
        except InvalidStockRequestError:
            self._display(INVALID_PRODUCT)
            return
        lines += [
            "|--------------------------",
            f"|     Stats for {barcode.display_name}",
            f"| Total Products Sold: {history.get_total_products_sold(barcode)}",
            f"| Average Discount:    ${history.get_average_product_discount(barcode) / 100:.2f}",
            "|--------------------------",
        ]
        self._display("\n".join(lines))


def build_farm(config: FarmConfig) -> Farm:
    inventory = FancyInventory() if config.fancy_inventory else BasicInventory()
    return Farm(inventory, AddressBook())


def interactive_cli(config: Optional[FarmConfig] = None) -> None:
    """Run the farm shop CLI on the terminal."""
    config = config or FarmConfig.from_env()
    configure_logging(config.log_dir, config.log_level, console=False)
    set_shop_details(config.shop_name, config.shop_address)
    logger.info(
        "Farm shop starting",
        extra={"extra": {"fancy_inventory": config.fancy_inventory, "log_dir": config.log_dir}},
    )
    FarmManager(build_farm(config)).run()


def main() -> None:
    try:
        interactive_cli()
    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted by user. Exiting.")
        sys.exit(0)


if __name__ == "__main__":
    main()
