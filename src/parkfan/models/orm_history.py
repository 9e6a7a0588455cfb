"""
SQLAlchemy ORM Models: status history tables
Append-only snapshots of attractions, restaurants, parks and purchases.

Each table keeps exactly one row per parent with is_active=True (the current
snapshot). Rows are written by processor.history_recorder only when an observed
value differs from the current snapshot.
"""

from sqlalchemy import String, Boolean, Integer, Float, DateTime, ForeignKey, Index, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional

from .base import Base, new_id
from .enums import EntityType, OperatingStatus, PurchaseType


class AttractionHistory(Base):
    """Snapshot of an attraction's status."""
    __tablename__ = "attraction_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    attraction_id: Mapped[str] = mapped_column(
        ForeignKey("attractions.id", ondelete="CASCADE"),
        nullable=False
    )

    # Snapshot data
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[EntityType] = mapped_column(
        SQLEnum(EntityType, name='entity_type_enum'),
        nullable=False
    )
    status: Mapped[Optional[OperatingStatus]] = mapped_column(
        SQLEnum(OperatingStatus, name='operating_status_enum'),
        nullable=True
    )
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    is_active_attraction: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_attraction_history_attraction_recorded', 'attraction_id', 'recorded_at'),
        Index('idx_attraction_history_recorded', 'recorded_at'),
        Index('idx_attraction_history_status', 'status', 'recorded_at'),
        Index('idx_attraction_history_type_status', 'entity_type', 'status', 'recorded_at'),
        Index('idx_attraction_history_current', 'attraction_id', 'is_active', 'recorded_at'),
    )

    def __repr__(self) -> str:
        return f"<AttractionHistory(attraction_id={self.attraction_id}, status={self.status}, at={self.recorded_at})>"


class RestaurantHistory(Base):
    """Snapshot of a restaurant's availability."""
    __tablename__ = "restaurant_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    is_active_restaurant: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    availability_status: Mapped[Optional[str]] = mapped_column(String(32))
    accepts_reservations: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_restaurant_history_restaurant_recorded', 'restaurant_id', 'recorded_at'),
        Index('idx_restaurant_history_recorded', 'recorded_at'),
        Index('idx_restaurant_history_availability', 'availability_status', 'recorded_at'),
        Index('idx_restaurant_history_reservations', 'accepts_reservations', 'recorded_at'),
        Index('idx_restaurant_history_current', 'restaurant_id', 'is_active', 'recorded_at'),
    )

    def __repr__(self) -> str:
        return (
            f"<RestaurantHistory(restaurant_id={self.restaurant_id}, "
            f"status={self.availability_status}, at={self.recorded_at})>"
        )


class ParkStatusHistory(Base):
    """
    Snapshot of a park's operating status and live metrics.

    avg/max wait time are computed from STANDBY queues of operating
    attractions; open/closed counts from the same live payload.
    """
    __tablename__ = "park_status_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    park_id: Mapped[str] = mapped_column(
        ForeignKey("parks.id", ondelete="CASCADE"),
        nullable=False
    )

    is_at_capacity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    operating_status: Mapped[Optional[str]] = mapped_column(String(32))

    avg_wait_time: Mapped[Optional[int]] = mapped_column(Integer)
    max_wait_time: Mapped[Optional[int]] = mapped_column(Integer)
    total_attractions_open: Mapped[Optional[int]] = mapped_column(Integer)
    total_attractions_closed: Mapped[Optional[int]] = mapped_column(Integer)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_park_status_history_park_recorded', 'park_id', 'recorded_at'),
        Index('idx_park_status_history_recorded', 'recorded_at'),
        Index('idx_park_status_history_capacity', 'is_at_capacity', 'recorded_at'),
        Index('idx_park_status_history_status', 'operating_status', 'recorded_at'),
        Index('idx_park_status_history_current', 'park_id', 'is_active', 'recorded_at'),
    )

    def __repr__(self) -> str:
        return (
            f"<ParkStatusHistory(park_id={self.park_id}, "
            f"status='{self.operating_status}', at={self.recorded_at})>"
        )


class PurchaseHistory(Base):
    """Snapshot of a purchase's price and availability."""
    __tablename__ = "purchase_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    purchase_id: Mapped[str] = mapped_column(
        ForeignKey("purchases.id", ondelete="CASCADE"),
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

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_purchase_history_purchase_recorded', 'purchase_id', 'recorded_at'),
        Index('idx_purchase_history_recorded', 'recorded_at'),
        Index('idx_purchase_history_available', 'available', 'recorded_at'),
        Index('idx_purchase_history_price', 'price_amount', 'recorded_at'),
        Index('idx_purchase_history_current', 'purchase_id', 'is_active', 'recorded_at'),
    )

    def __repr__(self) -> str:
        return f"<PurchaseHistory(purchase_id={self.purchase_id}, available={self.available}, at={self.recorded_at})>"
