"""
SQLAlchemy ORM Model: Park
Represents theme park master data plus resolved location and live status.
"""

from sqlalchemy import String, Boolean, Float, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import List, Optional

from .base import Base, new_id


class Park(Base):
    __tablename__ = "parks"
    __table_args__ = (
        Index('idx_parks_group_name', 'park_group_id', 'name'),
    )

    # Primary Key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # ThemeParks.wiki Integration
    external_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Park entity ID from ThemeParks.wiki"
    )

    # Basic Information
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(255))
    timezone: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default='UTC',
        comment="IANA timezone reported by the park entity document"
    )

    # Geographic Coordinates
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    # Resolved by reverse geocoding
    country: Mapped[Optional[str]] = mapped_column(String(100))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    continent: Mapped[Optional[str]] = mapped_column(String(50))
    country_code: Mapped[Optional[str]] = mapped_column(String(2), comment="ISO 3166-1 alpha-2 country code")

    # Live status
    operating_status: Mapped[Optional[str]] = mapped_column(
        String(32),
        comment="Schedule type of the current day as reported upstream"
    )
    is_at_capacity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_synced: Mapped[Optional[datetime]] = mapped_column(DateTime)

    park_group_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("park_groups.id", ondelete="CASCADE"),
        nullable=True
    )

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
    park_group: Mapped[Optional["ParkGroup"]] = relationship(
        "ParkGroup",
        back_populates="parks"
    )
    attractions: Mapped[List["Attraction"]] = relationship(
        "Attraction",
        back_populates="park",
        lazy="select",
        cascade="all, delete-orphan"
    )
    schedules: Mapped[List["ParkSchedule"]] = relationship(
        "ParkSchedule",
        back_populates="park",
        lazy="select",
        cascade="all, delete-orphan"
    )

    @property
    def has_full_location(self) -> bool:
        """True when country, city and continent are all resolved."""
        return bool(self.country and self.city and self.continent)

    def __repr__(self) -> str:
        return f"<Park(id={self.id}, name='{self.name}', external_id='{self.external_id}')>"
