"""
Park Fan Sync - Park Location Service Unit Tests

Tests ParkLocationService with a mocked geocoder:
- Location statistics
- Backfill fills only empty fields, geocoding outside any session
- Single-park update overwrites changed fields
"""

from contextlib import contextmanager
from unittest.mock import Mock

import pytest
from parkfan.collector.geocoding_client import GeolocationData
from parkfan.database.repositories.entity_repository import EntityRepository
from parkfan.models import Park
from parkfan.processor.park_location_service import (
    ParkLocationService, BACKFILL_BATCH_SIZE, BACKFILL_DELAY_MS
)


@pytest.fixture
def parks(session_scope):
    """Three parks: resolvable, partially located, no coordinates."""
    with session_scope() as session:
        repo = EntityRepository(session, Park)
        ids = {
            "mk": repo.upsert("mk", {"name": "Magic Kingdom", "latitude": 28.41, "longitude": -81.58})[0],
            "ep": repo.upsert("ep", {"name": "Europa-Park", "latitude": 48.26, "longitude": 7.72,
                                     "country": "Germany"})[0],
            "virtual": repo.upsert("virtual", {"name": "Virtual Park"})[0],
        }
    return ids


@pytest.fixture
def geocoder():
    geocoder = Mock()
    geocoder.resolve_many.side_effect = lambda coords, **kwargs: [
        GeolocationData(country="United States", city="Bay Lake", continent="North America", country_code="US")
        if lat < 40 else
        GeolocationData(country="Deutschland", city="Rust", continent="Europe", country_code="DE")
        for lat, lng in coords
    ]
    return geocoder


def _park(session_scope, park_id):
    with session_scope() as session:
        return session.get(Park, park_id)


class TestLocationStats:

    def test_counts(self, parks, geocoder, session_scope):
        stats = ParkLocationService(geocoder, session_scope).get_location_stats()

        assert stats == {'total': 3, 'with_coordinates': 2, 'with_full_location': 0, 'needing_update': 2}


class TestBackfill:

    def test_fills_empty_fields_only(self, parks, geocoder, session_scope):
        updated = ParkLocationService(geocoder, session_scope).update_all_parks_without_location()

        assert updated == 2
        ep = _park(session_scope, parks["ep"])
        assert ep.country == "Germany"
        assert ep.city == "Rust"
        assert ep.continent == "Europe"
        assert ep.country_code == "DE"
        assert _park(session_scope, parks["mk"]).has_full_location

    def test_uses_backfill_pace(self, parks, geocoder, session_scope):
        ParkLocationService(geocoder, session_scope).update_all_parks_without_location()

        kwargs = geocoder.resolve_many.call_args.kwargs
        assert kwargs == {'delay_ms': BACKFILL_DELAY_MS, 'batch_size': BACKFILL_BATCH_SIZE}

    def test_empty_result_is_not_an_update(self, parks, session_scope):
        geocoder = Mock()
        geocoder.resolve_many.side_effect = lambda coords, **kwargs: [GeolocationData() for _ in coords]

        updated = ParkLocationService(geocoder, session_scope).update_all_parks_without_location()

        assert updated == 0
        assert _park(session_scope, parks["mk"]).country is None

    def test_no_session_open_while_geocoding(self, parks, geocoder, session_scope):
        """The rate-limited geocoding run happens between two short sessions."""
        open_sessions = []

        @contextmanager
        def tracking_scope():
            with session_scope() as session:
                open_sessions.append(session)
                try:
                    yield session
                finally:
                    open_sessions.remove(session)

        resolve = geocoder.resolve_many.side_effect

        def resolve_outside_session(coords, **kwargs):
            assert open_sessions == []
            return resolve(coords, **kwargs)

        geocoder.resolve_many.side_effect = resolve_outside_session

        updated = ParkLocationService(geocoder, tracking_scope).update_all_parks_without_location()

        assert updated == 2
        assert _park(session_scope, parks["mk"]).city == "Bay Lake"

    def test_nothing_to_do(self, session_scope, geocoder):
        assert ParkLocationService(geocoder, session_scope).update_all_parks_without_location() == 0
        geocoder.resolve_many.assert_not_called()


class TestSingleParkUpdate:

    def test_overwrites_changed_fields(self, parks, session_scope):
        geocoder = Mock()
        geocoder.reverse_geocode.return_value = GeolocationData(
            country="Germany", city="Rust", continent="Europe", country_code="DE"
        )
        service = ParkLocationService(geocoder, session_scope)

        service.update_park_location(parks["ep"])

        ep = _park(session_scope, parks["ep"])
        assert ep.city == "Rust"
        geocoder.reverse_geocode.assert_called_once_with(48.26, 7.72)

    def test_unknown_park(self, session_scope, geocoder):
        assert ParkLocationService(geocoder, session_scope).update_park_location("missing") is None

    def test_park_without_coordinates(self, parks, session_scope):
        geocoder = Mock()
        service = ParkLocationService(geocoder, session_scope)

        park = service.update_park_location(parks["virtual"])

        assert park.name == "Virtual Park"
        geocoder.reverse_geocode.assert_not_called()

    def test_by_ids(self, parks, session_scope):
        geocoder = Mock()
        geocoder.reverse_geocode.return_value = GeolocationData(city="Somewhere")
        service = ParkLocationService(geocoder, session_scope)

        service.update_park_locations_by_ids([parks["mk"], parks["ep"]], pause_seconds=0)

        assert geocoder.reverse_geocode.call_count == 2
        assert _park(session_scope, parks["mk"]).city == "Somewhere"
