"""Top‑level package for the farm shop.

The shop logic lives in flat modules imported by name: the catalogue in
:mod:`products`, stock in :mod:`inventory`, customers in
:mod:`customers`, sales in :mod:`transactions` and :mod:`sales`, and the
orchestrating :class:`farm.Farm` driven by the CLI in :mod:`cli`.
"""
