"""
Closed enumerations shared by the ORM models and the API client.
"""

from enum import Enum


class EntityType(str, Enum):
    """Entity types reported by ThemeParks.wiki."""
    PARK = "PARK"
    ATTRACTION = "ATTRACTION"
    SHOW = "SHOW"
    RESTAURANT = "RESTAURANT"
    SHOP = "SHOP"
    MEET_AND_GREET = "MEET_AND_GREET"
    EXPERIENCE = "EXPERIENCE"
    OTHER = "OTHER"


class OperatingStatus(str, Enum):
    """Live operating status of an attraction or restaurant."""
    OPERATING = "OPERATING"
    DOWN = "DOWN"
    CLOSED = "CLOSED"
    REFURBISHMENT = "REFURBISHMENT"
    TEMPORARILY_CLOSED = "TEMPORARILY_CLOSED"


class QueueType(str, Enum):
    """Queue kinds found in the live "queue" object."""
    STANDBY = "STANDBY"
    RETURN_TIME = "RETURN_TIME"
    PAID_RETURN_TIME = "PAID_RETURN_TIME"
    LIGHTNING_LANE = "LIGHTNING_LANE"
    FAST_PASS = "FAST_PASS"
    SINGLE_RIDER = "SINGLE_RIDER"


class ShowType(str, Enum):
    REGULAR = "REGULAR"
    SPECIAL = "SPECIAL"
    SEASONAL = "SEASONAL"
    FIREWORKS = "FIREWORKS"
    PARADE = "PARADE"


class ParkScheduleType(str, Enum):
    """Kind of a park schedule entry for one calendar day."""
    OPERATING = "OPERATING"
    CLOSED = "CLOSED"
    SPECIAL_HOURS = "SPECIAL_HOURS"
    PRIVATE_EVENT = "PRIVATE_EVENT"
    TICKETED_EVENT = "TICKETED_EVENT"
    INFO = "INFO"


class PurchaseType(str, Enum):
    PACKAGE = "PACKAGE"
    ATTRACTION = "ATTRACTION"
