"""
Park Fan Sync - pytest Configuration and Fixtures

Provides shared test fixtures for:
- In-memory SQLite engine and session scopes matching get_db_session()
- Sample upstream DTOs (destinations, children, live data, schedules)
- A fake ThemeParks.wiki client built on unittest.mock
- Log capture for the non-propagating parkfan logger
"""

from contextlib import contextmanager
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from parkfan.collector.themeparks_wiki_client import (
    ThemeParksWikiClient, ParkGroupDTO, ParkSummaryDTO, ParkDTO, EntityDTO,
    WaitTimeDTO, ShowDTO, ShowTimeSlotDTO, LiveDataDTO, ScheduleEntryDTO, PurchaseDTO
)
from parkfan.database.connection import enable_sqlite_savepoints
from parkfan.models import (
    Base, EntityType, OperatingStatus, QueueType, ShowType, ParkScheduleType, PurchaseType
)
from parkfan.utils.logger import logger as parkfan_logger


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def engine():
    """
    In-memory SQLite engine shared across threads.

    StaticPool keeps a single connection so every session sees the same
    database; fan-out tests run with max_workers=1.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
def session_scope(session_factory):
    """Commit/rollback/close context manager with the get_db_session() contract."""
    @contextmanager
    def scope():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return scope


@pytest.fixture
def db_session(session_factory):
    """Plain session for assertions; rolled back and closed after the test."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


# ============================================================================
# Sample Upstream Data Fixtures
# ============================================================================

@pytest.fixture
def sample_park_groups():
    """
    Two destinations with three parks.

    Returns:
        List of ParkGroupDTO as returned by fetch_park_groups()
    """
    return [
        ParkGroupDTO(
            id="wdw",
            name="Walt Disney World® Resort",
            parks=[
                ParkSummaryDTO(id="mk", name="Magic Kingdom Park", destination_id="wdw"),
                ParkSummaryDTO(id="epcot", name="EPCOT", destination_id="wdw"),
            ]
        ),
        ParkGroupDTO(
            id="europa",
            name="Europa-Park Resort",
            parks=[
                ParkSummaryDTO(id="ep", name="Europa-Park", destination_id="europa"),
            ]
        ),
    ]


@pytest.fixture
def park_details():
    """Detailed park documents keyed by external id."""
    return {
        "mk": ParkDTO(id="mk", name="Magic Kingdom Park", timezone="America/New_York",
                      latitude=28.4177, longitude=-81.5812, destination_id="wdw"),
        "epcot": ParkDTO(id="epcot", name="EPCOT", timezone="America/New_York",
                         latitude=28.3747, longitude=-81.5494, destination_id="wdw"),
        "ep": ParkDTO(id="ep", name="Europa-Park", timezone="Europe/Berlin",
                      latitude=48.2660, longitude=7.7220, destination_id="europa"),
    }


@pytest.fixture
def sample_children():
    """Children of Magic Kingdom: two rides, one show, one restaurant."""
    return [
        EntityDTO(id="space-mountain", name="Space Mountain", entity_type=EntityType.ATTRACTION,
                  park_id="mk", latitude=28.4187, longitude=-81.5781),
        EntityDTO(id="haunted-mansion", name="Haunted Mansion", entity_type=EntityType.ATTRACTION,
                  park_id="mk", latitude=28.4203, longitude=-81.5829),
        EntityDTO(id="festival-of-fantasy", name="Festival of Fantasy Parade", entity_type=EntityType.SHOW,
                  park_id="mk"),
        EntityDTO(id="be-our-guest", name="Be Our Guest Restaurant", entity_type=EntityType.RESTAURANT,
                  park_id="mk", latitude=28.4210, longitude=-81.5815),
    ]


@pytest.fixture
def sample_live_data():
    """Live data for Magic Kingdom with wait times, a show and a restaurant status."""
    parade_slots = [
        ShowTimeSlotDTO(start_time="2025-06-27T12:00:00-04:00", end_time="2025-06-27T12:30:00-04:00",
                        show_type=ShowType.PARADE),
        ShowTimeSlotDTO(start_time="2025-06-27T15:00:00-04:00", end_time="2025-06-27T15:30:00-04:00",
                        show_type=ShowType.PARADE),
    ]
    return LiveDataDTO(
        wait_times=[
            WaitTimeDTO(attraction_id="space-mountain", queue_type=QueueType.STANDBY, wait_time=45,
                        status=OperatingStatus.OPERATING),
            WaitTimeDTO(attraction_id="space-mountain", queue_type=QueueType.RETURN_TIME, wait_time=None,
                        status=OperatingStatus.OPERATING),
            WaitTimeDTO(attraction_id="haunted-mansion", queue_type=QueueType.STANDBY, wait_time=25,
                        status=OperatingStatus.OPERATING),
        ],
        show_times=[
            ShowDTO(id="festival-of-fantasy", name="Festival of Fantasy Parade", showtimes=parade_slots),
        ],
        entities=[
            EntityDTO(id="space-mountain", name="Space Mountain", entity_type=EntityType.ATTRACTION,
                      status=OperatingStatus.OPERATING),
            EntityDTO(id="haunted-mansion", name="Haunted Mansion", entity_type=EntityType.ATTRACTION,
                      status=OperatingStatus.OPERATING),
            EntityDTO(id="festival-of-fantasy", name="Festival of Fantasy Parade", entity_type=EntityType.SHOW,
                      status=OperatingStatus.OPERATING, showtimes=parade_slots),
            EntityDTO(id="be-our-guest", name="Be Our Guest Restaurant", entity_type=EntityType.RESTAURANT,
                      status=OperatingStatus.CLOSED),
        ],
    )


@pytest.fixture
def sample_schedule():
    """Two schedule days, the first with a purchasable add-on."""
    return [
        ScheduleEntryDTO(
            date="2025-06-27",
            type=ParkScheduleType.OPERATING,
            opening_time="2025-06-27T09:00:00-04:00",
            closing_time="2025-06-27T23:00:00-04:00",
            purchases=[
                PurchaseDTO(id="lightning-lane-mk", name="Lightning Lane Multi Pass",
                            type=PurchaseType.PACKAGE, available=True,
                            price_amount=2900, price_currency="USD", price_formatted="$29.00"),
            ]
        ),
        ScheduleEntryDTO(
            date="2025-06-28",
            type=ParkScheduleType.TICKETED_EVENT,
            opening_time="2025-06-28T19:00:00-04:00",
            closing_time="2025-06-28T23:59:00-04:00",
            description="Mickey's Very Merry Christmas Party",
        ),
    ]


@pytest.fixture
def fake_client(sample_park_groups, park_details, sample_children, sample_live_data, sample_schedule):
    """
    Mock ThemeParksWikiClient returning the sample data.

    Individual tests reassign return_value/side_effect to simulate upstream changes.
    """
    client = Mock(spec=ThemeParksWikiClient)
    client.fetch_park_groups.return_value = sample_park_groups
    client.fetch_park.side_effect = lambda park_id: park_details[park_id]
    client.fetch_current_park_status.return_value = "OPERATING"
    client.fetch_park_entities.side_effect = lambda park_id: sample_children if park_id == "mk" else []
    client.fetch_live_data.side_effect = lambda park_id: sample_live_data if park_id == "mk" else LiveDataDTO()
    client.fetch_wait_times.side_effect = (
        lambda park_id: sample_live_data.wait_times if park_id == "mk" else []
    )
    client.fetch_park_schedule.side_effect = lambda park_id: sample_schedule if park_id == "mk" else []
    return client


@pytest.fixture
def fake_location_service():
    """Location service stub that reports nothing to do."""
    service = Mock()
    service.get_location_stats.return_value = {
        'total': 0, 'with_coordinates': 0, 'with_full_location': 0, 'needing_update': 0
    }
    return service


# ============================================================================
# Logging Fixtures
# ============================================================================

@pytest.fixture
def parkfan_caplog(caplog):
    """
    caplog wired directly to the parkfan logger.

    The application logger does not propagate to root, so caplog's handler
    is attached to it for the duration of the test.
    """
    parkfan_logger.addHandler(caplog.handler)
    yield caplog
    parkfan_logger.removeHandler(caplog.handler)
