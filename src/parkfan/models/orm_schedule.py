"""
SQLAlchemy ORM Model: ParkSchedule
Represents theme park operating schedule data, one row per park and day.
"""

from sqlalchemy import String, Boolean, Date, DateTime, Time, ForeignKey, UniqueConstraint, func, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, date, time
from typing import Optional

from .base import Base, new_id
from .enums import ParkScheduleType


class ParkSchedule(Base):
    __tablename__ = "park_schedules"
    __table_args__ = (
        UniqueConstraint('park_id', 'schedule_date', name='park_schedule_unique'),
    )

    # Primary Key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Foreign Key
    park_id: Mapped[str] = mapped_column(
        ForeignKey('parks.id', ondelete="CASCADE"),
        nullable=False,
        comment="Reference to parks table"
    )

    # Schedule Data
    schedule_date: Mapped[date] = mapped_column(Date, nullable=False, comment="Date for this schedule entry")
    opening_time: Mapped[Optional[time]] = mapped_column(
        Time,
        nullable=True,
        comment="Park opening time, local wall clock as printed upstream"
    )
    closing_time: Mapped[Optional[time]] = mapped_column(
        Time,
        nullable=True,
        comment="Park closing time, local wall clock as printed upstream"
    )

    schedule_type: Mapped[ParkScheduleType] = mapped_column(
        SQLEnum(ParkScheduleType, name='schedule_type_enum'),
        nullable=False,
        default=ParkScheduleType.OPERATING,
        comment="Type of schedule entry"
    )
    description: Mapped[Optional[str]] = mapped_column(String(255))
    is_special: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Metadata
    last_synced: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        comment="When this schedule data was fetched from API"
    )
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
        back_populates="schedules",
        lazy="select"
    )

    def __repr__(self) -> str:
        return (
            f"<ParkSchedule(id={self.id}, park_id={self.park_id}, "
            f"date={self.schedule_date}, type='{self.schedule_type}')>"
        )
