"""Custom exceptions for the defaults_store package."""

from __future__ import annotations


class DefaultsError(Exception):
    """Base exception for all defaults-store errors."""


class EncodeError(DefaultsError):
    """Raised by a codec when a value cannot be turned into a raw payload."""

    def __init__(self, value_type: str, detail: str = "") -> None:
        self.value_type = value_type
        msg = f"Could not encode value of type '{value_type}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class DecodeError(DefaultsError):
    """Raised by a codec when a stored payload does not parse into the expected type."""

    def __init__(self, value_type: str, detail: str = "") -> None:
        self.value_type = value_type
        msg = f"Could not decode stored payload as '{value_type}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class StoreError(DefaultsError):
    """Raised when a store operation fails."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class StoreConfigError(DefaultsError):
    """Raised when a store is misconfigured."""

    def __init__(self, store_type: str, message: str) -> None:
        self.store_type = store_type
        super().__init__(f"Store '{store_type}' misconfigured: {message}")
