"""Product catalogue: barcodes, quality grades and product values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from exceptions import InvalidStockRequestError


class Barcode(Enum):
    """Kinds of product sold by the farm, in catalogue order."""

    EGG = ("Egg", 50)
    MILK = ("Milk", 440)
    JAM = ("Jam", 670)
    WOOL = ("Wool", 2850)

    def __init__(self, display_name: str, base_price: int) -> None:
        self.display_name = display_name
        # integer cents
        self.base_price = base_price

    @property
    def ordinal(self) -> int:
        return _BARCODE_ORDER[self]

    @classmethod
    def from_name(cls, name: str) -> "Barcode":
        """Resolve a product name typed by a user, ignoring case.

        Raises:
            InvalidStockRequestError: If the name is not a known product.
        """
        key = name.strip().upper()
        try:
            return cls[key]
        except KeyError:
            raise InvalidStockRequestError(f"Invalid product name provided: {name}") from None

    def __str__(self) -> str:
        return self.name


_BARCODE_ORDER = {barcode: index for index, barcode in enumerate(Barcode)}


class Quality(Enum):
    """Stock grades.  Higher ranks are handed out first by a fancy inventory."""

    REGULAR = 0
    SILVER = 1
    GOLD = 2
    IRIDIUM = 3

    @property
    def rank(self) -> int:
        return self.value

    def __lt__(self, other: "Quality") -> bool:
        if not isinstance(other, Quality):
            return NotImplemented
        return self.rank < other.rank

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Product:
    """A single physical unit of stock."""

    barcode: Barcode
    quality: Quality = Quality.REGULAR

    @property
    def display_name(self) -> str:
        return self.barcode.display_name

    @property
    def base_price(self) -> int:
        return self.barcode.base_price

    def __str__(self) -> str:
        return f"{self.display_name}: {self.base_price}c {self.quality}"


def sort_by_catalogue(barcodes) -> list[Barcode]:
    """Return ``barcodes`` ordered as they are declared in :class:`Barcode`."""
    return sorted(barcodes, key=lambda barcode: barcode.ordinal)
