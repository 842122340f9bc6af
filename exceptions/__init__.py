"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Catalog
    CatalogError,
    CollectionNotFoundError,

    # Resort
    CollectionNotManualError,
    EmptyCollectionError,
    DataUnavailableError,
    SubmissionRejectedError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Catalog
    "CatalogError",
    "CollectionNotFoundError",

    # Resort
    "CollectionNotManualError",
    "EmptyCollectionError",
    "DataUnavailableError",
    "SubmissionRejectedError",
]
