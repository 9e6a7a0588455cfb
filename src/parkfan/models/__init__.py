# Park Fan Sync - Models Package

# Import all ORM models to register them with SQLAlchemy's declarative base
# This ensures string-based relationship() forward references can be resolved
from .base import Base, SessionLocal, create_session, new_id
from .enums import (
    EntityType, OperatingStatus, QueueType, ShowType, ParkScheduleType, PurchaseType
)
from .orm_park_group import ParkGroup
from .orm_park import Park
from .orm_attraction import Attraction
from .orm_restaurant import Restaurant
from .orm_wait_time import WaitTime
from .orm_show_time import ShowTime
from .orm_schedule import ParkSchedule
from .orm_purchase import Purchase
from .orm_history import AttractionHistory, RestaurantHistory, ParkStatusHistory, PurchaseHistory

__all__ = [
    'Base',
    'SessionLocal',
    'create_session',
    'new_id',
    'EntityType',
    'OperatingStatus',
    'QueueType',
    'ShowType',
    'ParkScheduleType',
    'PurchaseType',
    'ParkGroup',
    'Park',
    'Attraction',
    'Restaurant',
    'WaitTime',
    'ShowTime',
    'ParkSchedule',
    'Purchase',
    'AttractionHistory',
    'RestaurantHistory',
    'ParkStatusHistory',
    'PurchaseHistory',
]
