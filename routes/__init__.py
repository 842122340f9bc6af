"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.resort import router as resort_router

__all__ = [
    "resort_router",
]
