"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and optional details so
request handlers can render the standard error envelope.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "COLLECTION_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# CATALOG ERRORS
# ===================

class CatalogError(ExternalServiceError):
    """Shopify transport or GraphQL failure."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="shopify",
            message=message,
            details=details
        )


class CollectionNotFoundError(NotFoundError):
    """Collection doesn't exist in the catalog."""

    def __init__(self, collection_id: str):
        super().__init__(
            resource="Collection",
            identifier=collection_id,
            code="COLLECTION_NOT_FOUND"
        )


# ===================
# RESORT ERRORS
# ===================

class CollectionNotManualError(ValidationError):
    """Collection uses an automatic sort order and cannot be reordered."""

    def __init__(self, collection_id: str, sort_order: Optional[str]):
        mode = (sort_order or "automatic").lower()
        super().__init__(
            message=(
                f"This is an {mode} collection. Only manual collections can be "
                "reordered. Change it to a manual collection in Shopify admin."
            ),
            code="COLLECTION_NOT_MANUAL",
            details={"collection_id": collection_id, "sort_order": sort_order}
        )


class EmptyCollectionError(ValidationError):
    """Collection has no products to order."""

    def __init__(self, collection_id: str):
        super().__init__(
            message="No products found in this collection",
            code="EMPTY_COLLECTION",
            details={"collection_id": collection_id}
        )


class DataUnavailableError(AppError):
    """
    Remote data could not be read completely (503).

    Raised when pagination fails part way. Partial data is never used.
    """

    def __init__(self, source: str, message: str):
        super().__init__(
            code="DATA_UNAVAILABLE",
            message=f"Could not read {source}: {message}",
            status_code=503,
            details={"source": source}
        )


class SubmissionRejectedError(AppError):
    """The catalog rejected the move list (422)."""

    def __init__(self, collection_id: str, user_errors: list[dict]):
        first = user_errors[0].get("message") if user_errors else None
        super().__init__(
            code="REORDER_REJECTED",
            message=f"Shopify error: {first or 'reorder rejected'}",
            status_code=422,
            details={"collection_id": collection_id, "user_errors": user_errors}
        )
        self.user_errors = user_errors
