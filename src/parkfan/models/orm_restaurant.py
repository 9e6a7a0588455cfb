"""
SQLAlchemy ORM Model: Restaurant
Dining locations listed among a park's children.
"""

from sqlalchemy import String, Boolean, Float, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional

from .base import Base, new_id


class Restaurant(Base):
    __tablename__ = "restaurants"
    __table_args__ = (
        Index('idx_restaurants_park_name', 'park_id', 'name'),
        Index('idx_restaurants_park_active', 'park_id', 'is_active'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    park_id: Mapped[str] = mapped_column(
        ForeignKey("parks.id", ondelete="CASCADE"),
        nullable=False
    )

    external_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(255))

    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    availability_status: Mapped[Optional[str]] = mapped_column(
        String(32),
        comment="Live status string of the restaurant (OPERATING, CLOSED, ...)"
    )
    accepts_reservations: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_synced: Mapped[Optional[datetime]] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, name='{self.name}', park_id={self.park_id})>"
