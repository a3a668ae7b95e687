"""Exceptions raised by the farm shop.

All of them derive from :class:`FarmError` so the CLI can report any
rejected request with a single handler.  Plain precondition violations
(a quantity below one, recording an unfinished transaction) are raised
as :class:`ValueError` instead.
"""


class FarmError(Exception):
    """Base class for recoverable farm shop errors."""


class DuplicateCustomerError(FarmError):
    """An equal customer is already stored in the address book."""


class CustomerNotFoundError(FarmError):
    """No customer matches the requested name and phone number."""


class InvalidStockRequestError(FarmError):
    """A stocking request cannot be honoured by the inventory."""


class FailedTransactionError(FarmError):
    """A transaction operation was attempted in an invalid state."""
