"""SQLAlchemy ORM models."""

from minilytics.models.base import Base
from minilytics.models.page_view import PageView
from minilytics.models.site import Site

__all__ = [
    "Base",
    "PageView",
    "Site",
]
