"""
Listing model - the record users browse, search, create, edit and delete.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from listings_web.db.base import Base, utcnow


def new_listing_id() -> str:
    """Opaque identifier assigned once at creation."""
    return uuid.uuid4().hex


class Listing(Base):
    """Listing entity. Any logged-in user may change any listing."""

    __tablename__ = "listings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_listing_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title})>"
