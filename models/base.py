"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class BaseSchema(BaseModel):
    """
    Base for merchant-edited settings.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class SnapshotSchema(BaseModel):
    """
    Base for data read from the catalog.

    Strings are kept verbatim: tags and ids are matched exactly.
    """
    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True
    )


class PageInfo(BaseModel):
    """Cursor pagination state of one GraphQL connection page."""
    has_next_page: bool = False
    end_cursor: Optional[str] = None
