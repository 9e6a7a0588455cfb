"""
SQLAlchemy ORM Model: WaitTime
One row per observed change of a queue's wait time or status.
"""

from sqlalchemy import String, Boolean, Integer, DateTime, ForeignKey, Index, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional

from .base import Base, new_id
from .enums import OperatingStatus, QueueType


class WaitTime(Base):
    """
    Wait-time observation.

    Only the most recent row per (attraction_id, queue_type) has is_active=True.
    """
    __tablename__ = "wait_times"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    attraction_id: Mapped[str] = mapped_column(
        ForeignKey("attractions.id", ondelete="CASCADE"),
        nullable=False
    )

    wait_time_minutes: Mapped[Optional[int]] = mapped_column(Integer)
    queue_type: Mapped[QueueType] = mapped_column(
        SQLEnum(QueueType, name='queue_type_enum'),
        nullable=False,
        default=QueueType.STANDBY
    )
    status: Mapped[OperatingStatus] = mapped_column(
        SQLEnum(OperatingStatus, name='operating_status_enum'),
        nullable=False
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        Index('idx_wait_times_attraction_queue_recorded', 'attraction_id', 'queue_type', 'recorded_at'),
        Index('idx_wait_times_recorded_at', 'recorded_at'),
        Index('idx_wait_times_status', 'status'),
        Index('idx_wait_times_is_active', 'is_active'),
        Index('idx_wait_times_current', 'attraction_id', 'queue_type', 'is_active', 'recorded_at'),
    )

    # Relationships
    attraction: Mapped["Attraction"] = relationship(
        "Attraction",
        back_populates="wait_times"
    )

    def __repr__(self) -> str:
        return (
            f"<WaitTime(id={self.id}, attraction_id={self.attraction_id}, "
            f"queue={self.queue_type}, minutes={self.wait_time_minutes})>"
        )
