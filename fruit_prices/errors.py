from __future__ import annotations


class FruitPricesError(Exception):
    pass


class EmptyInputError(FruitPricesError):
    """Parsed CSV had no rows, so there is no header to key records by."""

    def __init__(self, message: str = "CSV is empty"):
        super().__init__(message)


class LoadError(FruitPricesError):
    """The CSV source could not be fetched or read."""
