"""Error types for the Family Dinner persistence layer.

Storage failures are surfaced to callers as-is; nothing here retries.
"""

from __future__ import annotations


class FamilyDinnerError(Exception):
    """Base error for all Family Dinner exceptions."""


class StorageError(FamilyDinnerError):
    """Raised when the underlying database fails to complete an operation."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"Storage operation '{operation}' failed: {message}")


class StoreClosedError(FamilyDinnerError):
    """Raised when a store is used before ``open()`` or after ``close()``."""

    def __init__(self) -> None:
        super().__init__("DinnerStore is not open")
