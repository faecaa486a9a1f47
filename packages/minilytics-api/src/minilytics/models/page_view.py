"""PageView model - one page view or custom event reported by a tracker."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from minilytics.db.types import JSONType
from minilytics.models.base import Base


class PageView(Base):
    __tablename__ = "page_views"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    domain: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str] = mapped_column(String(2048), nullable=False)
    referrer: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Soft reference to Site.site_id, no foreign key.
    site_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    event: Mapped[str | None] = mapped_column(String(128), nullable=True)
    properties: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    __table_args__ = (
        Index("ix_page_views_site_id_created_at", "site_id", "created_at"),
    )
