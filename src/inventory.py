"""Stock storage for the farm.

Two inventories share the :class:`Inventory` interface.  A
:class:`BasicInventory` handles one unit at a time and hands stock out in
the order it arrived.  A :class:`FancyInventory` supports bulk stocking
and bulk removal, always releasing the best quality unit first.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List

from exceptions import FailedTransactionError, InvalidStockRequestError
from products import Barcode, Product, Quality

logger = logging.getLogger(__name__)


class Inventory(ABC):
    """Interface for the farm's stock.

    Every instance owns its own store.  Collections handed to callers are
    copies, so mutating them never touches the stock.
    """

    #: Whether quantities above one are accepted by add/remove.
    supports_bulk = False

    def __init__(self) -> None:
        self._products: List[Product] = []

    def add_product(self, barcode: Barcode, quality: Quality = Quality.REGULAR, quantity: int = 1) -> None:
        """Stock ``quantity`` units of ``barcode`` at ``quality``.

        Raises:
            InvalidStockRequestError: If ``quantity`` is below one, or above
                one on an inventory without bulk support.
        """
        if quantity < 1:
            raise InvalidStockRequestError("Quantity must be at least 1.")
        if quantity > 1 and not self.supports_bulk:
            raise InvalidStockRequestError(
                "Current inventory is not fancy enough. Please supply products one at a time."
            )
        for _ in range(quantity):
            self._products.append(Product(barcode, quality))
        logger.debug(
            "Stock added",
            extra={"extra": {"barcode": barcode.name, "quality": quality.name, "quantity": quantity}},
        )

    def exists_product(self, barcode: Barcode) -> bool:
        return any(product.barcode is barcode for product in self._products)

    def remove_product(self, barcode: Barcode, quantity: int = 1) -> List[Product]:
        """Take up to ``quantity`` units of ``barcode`` out of stock.

        Returns the removed units.  Running out of stock is not an error:
        fewer units (possibly none) are returned.

        Raises:
            FailedTransactionError: If ``quantity`` is below one, or above
                one on an inventory without bulk support.
        """
        if quantity < 1:
            raise FailedTransactionError("Quantity must be at least 1.")
        if quantity > 1 and not self.supports_bulk:
            raise FailedTransactionError(
                "Current inventory is not fancy enough. Please purchase products one at a time."
            )
        removed: List[Product] = []
        for _ in range(quantity):
            index = self._select_for_removal(barcode)
            if index is None:
                break
            removed.append(self._products.pop(index))
        if len(removed) < quantity:
            logger.info(
                "Stock exhausted",
                extra={"extra": {"barcode": barcode.name, "requested": quantity, "removed": len(removed)}},
            )
        return removed

    @abstractmethod
    def _select_for_removal(self, barcode: Barcode) -> int | None:
        """Index of the next unit of ``barcode`` to hand out, or None."""

    @abstractmethod
    def get_all_products(self) -> List[Product]:
        """Snapshot of the current stock."""

    def __len__(self) -> int:
        return len(self._products)


class BasicInventory(Inventory):
    """Single-unit inventory that releases stock in arrival order."""

    def _select_for_removal(self, barcode: Barcode) -> int | None:
        for index, product in enumerate(self._products):
            if product.barcode is barcode:
                return index
        return None

    def get_all_products(self) -> List[Product]:
        return list(self._products)


class FancyInventory(Inventory):
    """Inventory with bulk operations and quality-first removal.

    Among units of the requested barcode the highest :class:`Quality` is
    released first; units of equal quality leave in arrival order.
    Listings are ordered by barcode declaration order.
    """

    supports_bulk = True

    def _select_for_removal(self, barcode: Barcode) -> int | None:
        best = None
        for index, product in enumerate(self._products):
            if product.barcode is not barcode:
                continue
            # strict comparison keeps the earliest unit on ties
            if best is None or product.quality.rank > self._products[best].quality.rank:
                best = index
        return best

    def get_all_products(self) -> List[Product]:
        # sorted() is stable, so arrival order survives within a barcode
        return sorted(self._products, key=lambda product: product.barcode.ordinal)

    def get_stocked_quantity(self, barcode: Barcode) -> int:
        return sum(1 for product in self._products if product.barcode is barcode)
