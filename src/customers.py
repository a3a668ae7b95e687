"""Customers, their carts and the farm's address book."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from exceptions import CustomerNotFoundError, DuplicateCustomerError
from products import Product

logger = logging.getLogger(__name__)


class Cart:
    """Products a customer has picked during the current visit.

    The cart does no validation: callers only add units that were
    actually taken out of the inventory.
    """

    def __init__(self) -> None:
        self._contents: List[Product] = []

    def add_product(self, product: Product) -> None:
        self._contents.append(product)

    def get_contents(self) -> List[Product]:
        return list(self._contents)

    def set_empty(self) -> None:
        self._contents.clear()

    def is_empty(self) -> bool:
        return not self._contents

    def __len__(self) -> int:
        return len(self._contents)


@dataclass(eq=True)
class Customer:
    """A customer record.  Equality and hashing ignore the cart."""

    name: str
    phone_number: int
    address: str
    cart: Cart = field(default_factory=Cart, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Customer name must not be blank.")
        if self.phone_number <= 0:
            raise ValueError("Phone number must be a positive number.")

    def __hash__(self) -> int:
        return hash((self.name, self.phone_number, self.address))

    def __str__(self) -> str:
        return f"Name: {self.name} | Phone Number: {self.phone_number} | Address: {self.address}"


class AddressBook:
    """Customer records, kept in insertion order and looked up linearly."""

    def __init__(self) -> None:
        self._customers: List[Customer] = []

    def add_customer(self, customer: Customer) -> None:
        """Store ``customer``.

        Raises:
            DuplicateCustomerError: If an equal customer is already stored.
        """
        if self.contains_customer(customer):
            raise DuplicateCustomerError(f"Customer already exists: {customer.name}")
        self._customers.append(customer)
        logger.info("Customer saved", extra={"extra": {"customer": customer.name}})

    def get_all_records(self) -> List[Customer]:
        return list(self._customers)

    def contains_customer(self, customer: Customer) -> bool:
        return customer in self._customers

    def get_customer(self, name: str, phone_number: int) -> Customer:
        """Find the customer with this name and phone number.

        Raises:
            CustomerNotFoundError: If no record matches.
        """
        for customer in self._customers:
            if customer.name == name and customer.phone_number == phone_number:
                return customer
        raise CustomerNotFoundError(f"Customer not found: {name}")
