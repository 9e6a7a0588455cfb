"""
SQLAlchemy ORM Model: Purchase
Ticket packages and paid attraction access offered on a schedule day.
"""

from sqlalchemy import String, Boolean, Integer, DateTime, ForeignKey, Index, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional

from .base import Base, new_id
from .enums import PurchaseType


class Purchase(Base):
    __tablename__ = "purchases"
    __table_args__ = (
        Index('idx_purchases_schedule_type', 'park_schedule_id', 'type'),
        Index('idx_purchases_schedule_available', 'park_schedule_id', 'available'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    external_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)

    park_schedule_id: Mapped[str] = mapped_column(
        ForeignKey("park_schedules.id", ondelete="CASCADE"),
        nullable=False
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[PurchaseType] = mapped_column(
        SQLEnum(PurchaseType, name='purchase_type_enum'),
        nullable=False
    )

    # Price in minor units (cents)
    price_amount: Mapped[Optional[int]] = mapped_column(Integer)
    price_currency: Mapped[Optional[str]] = mapped_column(String(3))
    price_formatted: Mapped[Optional[str]] = mapped_column(String(64))

    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
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
        return f"<Purchase(id={self.id}, name='{self.name}', available={self.available})>"
