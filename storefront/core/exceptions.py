"""Custom exceptions for the storefront client."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storefront.domain.checkout_fsm import ValidationResult


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass


class ApiException(StorefrontException):
    """Errors raised while talking to the REST backend."""

    pass


class BackendError(ApiException):
    """The backend answered with an error status and (usually) a message."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class TransportError(ApiException):
    """No usable response: connection refused, timeout, invalid JSON."""

    pass


class CheckoutValidationError(StorefrontException):
    """Local pre-network checkout validation failure."""

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.message)
        self.result = result
