"""
SQLAlchemy ORM Model: ParkGroup
Represents a ThemeParks.wiki destination (resort) grouping several parks.
"""

from sqlalchemy import String, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import List, Optional

from .base import Base, new_id


class ParkGroup(Base):
    __tablename__ = "park_groups"

    # Primary Key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # ThemeParks.wiki destination id
    external_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Destination ID from ThemeParks.wiki"
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(255))

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_synced: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Timestamps
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

    # Relationships
    parks: Mapped[List["Park"]] = relationship(
        "Park",
        back_populates="park_group",
        lazy="select"
    )

    def __repr__(self) -> str:
        return f"<ParkGroup(id={self.id}, name='{self.name}', external_id='{self.external_id}')>"
