"""
SQLAlchemy ORM Model: ShowTime
Performance slots of a show. Replaced wholesale on every sync pass.
"""

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Index, UniqueConstraint, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional

from .base import Base, new_id
from .enums import ShowType


class ShowTime(Base):
    __tablename__ = "show_times"
    __table_args__ = (
        UniqueConstraint('attraction_id', 'start_time', 'end_time', name='show_time_unique'),
        Index('idx_show_times_attraction_start', 'attraction_id', 'start_time'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    attraction_id: Mapped[str] = mapped_column(
        ForeignKey("attractions.id", ondelete="CASCADE"),
        nullable=False
    )

    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="UTC")
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="UTC")
    show_type: Mapped[ShowType] = mapped_column(
        SQLEnum(ShowType, name='show_type_enum'),
        nullable=False,
        default=ShowType.REGULAR
    )

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

    attraction: Mapped["Attraction"] = relationship(
        "Attraction",
        back_populates="show_times"
    )

    def __repr__(self) -> str:
        return f"<ShowTime(id={self.id}, attraction_id={self.attraction_id}, start={self.start_time})>"
