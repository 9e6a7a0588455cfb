"""
Park Fan Sync - Park Location Service
Fills country/city/continent on parks from their coordinates.
"""

import time
from typing import Callable, ContextManager, Dict, List, Optional

from sqlalchemy import select, func, and_, or_
from sqlalchemy.orm import Session

from ..collector.geocoding_client import GeocodingClient
from ..database.connection import get_db_session
from ..models import Park
from ..utils.logger import logger

# Geocoding pace for backfills (BigDataCloud/Nominatim fair use)
BACKFILL_BATCH_SIZE = 3
BACKFILL_DELAY_MS = 1200


def _has_coordinates():
    return and_(Park.latitude.is_not(None), Park.longitude.is_not(None))


def _missing_location():
    return or_(Park.country.is_(None), Park.city.is_(None), Park.continent.is_(None))


class ParkLocationService:
    """
    Reverse geocodes park coordinates and stores the resolved location.

    Example:
        >>> service = ParkLocationService(GeocodingClient())
        >>> service.get_location_stats()
        {'total': 120, 'with_coordinates': 118, 'with_full_location': 110, 'needing_update': 8}
    """

    def __init__(
        self,
        geocoder: Optional[GeocodingClient] = None,
        session_scope: Callable[[], ContextManager[Session]] = get_db_session
    ):
        self.geocoder = geocoder or GeocodingClient()
        self.session_scope = session_scope

    def get_location_stats(self) -> Dict[str, int]:
        """Count parks by coordinate and location completeness."""
        with self.session_scope() as session:
            def count(*conditions) -> int:
                stmt = select(func.count(Park.id))
                for condition in conditions:
                    stmt = stmt.where(condition)
                return session.execute(stmt).scalar_one()

            return {
                'total': count(),
                'with_coordinates': count(_has_coordinates()),
                'with_full_location': count(
                    Park.country.is_not(None), Park.city.is_not(None), Park.continent.is_not(None)
                ),
                'needing_update': count(_has_coordinates(), _missing_location()),
            }

    def update_park_location(self, park_id: str) -> Optional[Park]:
        """
        Re-geocode a single park, overwriting fields whose resolved value changed.

        Returns:
            The park, or None if it does not exist
        """
        with self.session_scope() as session:
            park = session.get(Park, park_id)

            if park is None:
                logger.warning(f"Park with ID {park_id} not found")
                return None

            if not park.latitude or not park.longitude:
                logger.warning(f"Park {park.name} has no coordinates")
                return park

            latitude, longitude = park.latitude, park.longitude

        location = self.geocoder.reverse_geocode(latitude, longitude)

        with self.session_scope() as session:
            park = session.get(Park, park_id)
            if park is None:
                return None

            has_updates = False
            for column in ('country', 'city', 'continent', 'country_code'):
                value = getattr(location, column)
                if value and value != getattr(park, column):
                    setattr(park, column, value)
                    has_updates = True

            if has_updates:
                logger.info(f"Updated location data for park: {park.name}")
            else:
                logger.debug(f"No location updates needed for park: {park.name}")

            return park

    def update_all_parks_without_location(self) -> int:
        """
        Geocode every park that has coordinates but an incomplete location.

        Only fills fields that are still empty. No session is held while
        geocoding; results are written in a fresh session afterwards.

        Returns:
            Number of parks updated
        """
        with self.session_scope() as session:
            pending = session.execute(
                select(Park.id, Park.latitude, Park.longitude).where(_has_coordinates(), _missing_location())
            ).all()

        logger.info(f"Found {len(pending)} parks needing location updates")
        if not pending:
            return 0

        locations = self.geocoder.resolve_many(
            [(lat, lng) for _, lat, lng in pending],
            delay_ms=BACKFILL_DELAY_MS,
            batch_size=BACKFILL_BATCH_SIZE
        )

        updated = 0
        with self.session_scope() as session:
            for (park_id, _, _), location in zip(pending, locations):
                park = session.get(Park, park_id)
                if park is None:
                    continue

                has_updates = False
                for column in ('country', 'city', 'continent', 'country_code'):
                    value = getattr(location, column)
                    if value and not getattr(park, column):
                        setattr(park, column, value)
                        has_updates = True

                if has_updates:
                    updated += 1
                    logger.debug(f"Updated location for park: {park.name}")

        logger.info("Completed batch update of park locations", extra={"parks_updated": updated})
        return updated

    def update_park_locations_by_ids(self, park_ids: List[str], pause_seconds: float = 1.0):
        """Re-geocode specific parks one at a time."""
        logger.info(f"Updating location data for {len(park_ids)} parks")

        for index, park_id in enumerate(park_ids):
            self.update_park_location(park_id)
            if pause_seconds and index < len(park_ids) - 1:
                time.sleep(pause_seconds)

        logger.info("Completed updating park locations by IDs")
