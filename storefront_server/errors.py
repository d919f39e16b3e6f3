"""Exceptions raised by the storefront."""

from typing import Optional


class StorefrontError(Exception):
    """Base class for storefront errors."""


class APIError(StorefrontError):
    """The store backend could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(APIError):
    """The requested record does not exist on the backend (HTTP 404)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


class CheckoutValidationError(StorefrontError):
    """Checkout input rejected before contacting the backend."""
