"""
Park Fan Sync - Upstream string to enum mapping

ThemeParks.wiki reports categories as loosely-typed strings. Every function
here is total: unknown, empty or None input returns the documented fallback
instead of raising.

    map_entity_type       -> EntityType.OTHER
    map_operating_status  -> OperatingStatus.OPERATING
    map_queue_type        -> QueueType.STANDBY
    map_show_type         -> ShowType.REGULAR
    map_schedule_type     -> ParkScheduleType.OPERATING
    map_purchase_type     -> PurchaseType.PACKAGE
"""

from enum import Enum
from typing import Optional, Type, TypeVar

from ..models.enums import (
    EntityType, OperatingStatus, QueueType, ShowType, ParkScheduleType, PurchaseType
)

E = TypeVar('E', bound=Enum)

# Upstream show time spellings ("Performance Time", "Operating", ...)
_SHOW_TYPE_ALIASES = {
    'fireworks': ShowType.FIREWORKS,
    'parade': ShowType.PARADE,
    'special': ShowType.SPECIAL,
    'seasonal': ShowType.SEASONAL,
    'performance time': ShowType.SPECIAL,
    'performance_time': ShowType.SPECIAL,
    'operating': ShowType.REGULAR,
    'regular': ShowType.REGULAR,
}


def _map_upper(value: Optional[str], enum_cls: Type[E], fallback: E) -> E:
    if not value:
        return fallback
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        return fallback


def map_entity_type(value: Optional[str]) -> EntityType:
    """Map an upstream entityType string; unknown types become OTHER."""
    return _map_upper(value, EntityType, EntityType.OTHER)


def map_operating_status(value: Optional[str]) -> OperatingStatus:
    """Map an upstream live status; unknown values are treated as OPERATING."""
    return _map_upper(value, OperatingStatus, OperatingStatus.OPERATING)


def map_queue_type(value: Optional[str]) -> QueueType:
    return _map_upper(value, QueueType, QueueType.STANDBY)


def parse_queue_type(value: Optional[str]) -> Optional[QueueType]:
    """
    Strict queue mapping: None for names that are not a QueueType member.

    Live wait times are keyed by (attraction, queue type), so an unknown queue
    such as PAID_STANDBY must not be folded into STANDBY.
    """
    if not value:
        return None
    try:
        return QueueType(value.strip().upper())
    except ValueError:
        return None


def map_show_type(value: Optional[str]) -> ShowType:
    """
    Map an upstream show time type.

    Matching is case-insensitive. "Performance Time" is a SPECIAL showing,
    "Operating" a REGULAR one; anything unrecognized is REGULAR.
    """
    if not value:
        return ShowType.REGULAR
    return _SHOW_TYPE_ALIASES.get(value.strip().lower(), ShowType.REGULAR)


def map_schedule_type(value: Optional[str]) -> ParkScheduleType:
    return _map_upper(value, ParkScheduleType, ParkScheduleType.OPERATING)


def map_purchase_type(value: Optional[str]) -> PurchaseType:
    return _map_upper(value, PurchaseType, PurchaseType.PACKAGE)
