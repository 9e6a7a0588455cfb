"""
SQLAlchemy ORM Model: Attraction
Represents rides, shows and other park entities tracked with a live status.
"""

from sqlalchemy import String, Boolean, Float, DateTime, ForeignKey, Index, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import List, Optional

from .base import Base, new_id
from .enums import EntityType, OperatingStatus


class Attraction(Base):
    __tablename__ = "attractions"
    __table_args__ = (
        Index('idx_attractions_park_type', 'park_id', 'entity_type'),
    )

    # Primary Key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Foreign Keys
    park_id: Mapped[str] = mapped_column(
        ForeignKey("parks.id", ondelete="CASCADE"),
        nullable=False
    )

    external_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Entity ID from ThemeParks.wiki"
    )

    # Basic Information
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(255))
    entity_type: Mapped[EntityType] = mapped_column(
        SQLEnum(EntityType, name='entity_type_enum'),
        nullable=False,
        default=EntityType.ATTRACTION
    )

    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    status: Mapped[Optional[OperatingStatus]] = mapped_column(
        SQLEnum(OperatingStatus, name='operating_status_enum'),
        nullable=True
    )

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
    park: Mapped["Park"] = relationship(
        "Park",
        back_populates="attractions"
    )
    wait_times: Mapped[List["WaitTime"]] = relationship(
        "WaitTime",
        back_populates="attraction",
        lazy="select",
        cascade="all, delete-orphan"
    )
    show_times: Mapped[List["ShowTime"]] = relationship(
        "ShowTime",
        back_populates="attraction",
        lazy="select",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Attraction(id={self.id}, name='{self.name}', type='{self.entity_type}')>"
