"""Domain errors raised by services and rendered by the API layer.

Every error derives from ``ValueError`` so service callers that only care
about "bad input" can keep catching that.  The HTTP layer registers a single
handler for :class:`SalesError` that turns ``status_code`` and ``message``
into a ``{"message": ...}`` response body.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import status


class SalesError(ValueError):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SalesError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidReference(SalesError):
    """A referenced customer/product/product type does not exist."""

    def __init__(self, kind: str, ref_id: UUID | str) -> None:
        super().__init__(f"Invalid {kind} {ref_id}")
        self.kind = kind
        self.ref_id = ref_id


class InsufficientStock(SalesError):
    def __init__(self, product_name: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested


class DuplicateKey(SalesError):
    pass


class AuthenticationFailed(SalesError):
    pass


class PermissionDenied(SalesError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(SalesError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class UnexpectedStoreError(SalesError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Server error") -> None:
        super().__init__(message)
