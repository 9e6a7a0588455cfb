"""
Park Fan Sync - Live Sync
Partial, high-frequency passes over live data: park status, wait times and
attraction/restaurant status. Nothing is deactivated here; these passes only
update current values and append history on change.
"""

import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import select

from ..collector.themeparks_wiki_client import (
    ThemeParksWikiClient, ThemeParksWikiError, LiveDataDTO, get_themeparks_wiki_client
)
from ..database.connection import get_db_session
from ..models import (
    Park, Attraction, Restaurant, WaitTime, AttractionHistory, RestaurantHistory, ParkStatusHistory,
    EntityType, OperatingStatus, QueueType
)
from ..utils.config import SYNC_MAX_WORKERS
from ..utils.datetime_helpers import utc_now
from ..utils.fanout import run_isolated, summarize
from ..utils.logger import logger, log_sync_start, log_sync_complete
from .history_recorder import (
    HistoryRecorder, WAIT_TIME_FIELDS, ATTRACTION_HISTORY_FIELDS,
    RESTAURANT_HISTORY_FIELDS, PARK_STATUS_FIELDS
)
from .reconciler import ParkRef, SessionScope, load_park_refs


@dataclass
class ParkLiveMetrics:
    """Aggregates computed from one live payload."""
    avg_wait_time: Optional[int] = None
    max_wait_time: Optional[int] = None
    total_attractions_open: int = 0
    total_attractions_closed: int = 0


def compute_live_metrics(live: LiveDataDTO) -> ParkLiveMetrics:
    """
    Summarize a park's live data.

    Wait statistics use STANDBY queues of operating entities. Open/closed
    counts cover ATTRACTION entities that report a status.
    """
    waits = [
        wt.wait_time for wt in live.wait_times
        if wt.queue_type == QueueType.STANDBY
        and wt.status == OperatingStatus.OPERATING
        and wt.wait_time is not None
    ]

    rides = [e for e in live.entities if e.entity_type == EntityType.ATTRACTION and e.status is not None]
    open_count = sum(1 for e in rides if e.status == OperatingStatus.OPERATING)

    return ParkLiveMetrics(
        avg_wait_time=round(sum(waits) / len(waits)) if waits else None,
        max_wait_time=max(waits) if waits else None,
        total_attractions_open=open_count,
        total_attractions_closed=len(rides) - open_count,
    )


class LiveSync:
    """
    Live-data passes, each fanned out per park.

    Example:
        >>> live = LiveSync()
        >>> live.sync_wait_times()
        {'succeeded': 84, 'failed': 1}
    """

    def __init__(
        self,
        client: Optional[ThemeParksWikiClient] = None,
        session_scope: SessionScope = get_db_session,
        max_workers: int = SYNC_MAX_WORKERS,
        recorder: Optional[HistoryRecorder] = None
    ):
        self.client = client or get_themeparks_wiki_client()
        self.session_scope = session_scope
        self.max_workers = max_workers
        self.recorder = recorder or HistoryRecorder()

    def _fan_out(self, job: str, fn) -> Dict[str, int]:
        start = time.time()
        parks = load_park_refs(self.session_scope)
        log_sync_start(job, len(parks))

        results = run_isolated(parks, fn, max_workers=self.max_workers, describe=lambda p: f"park {p.name}")

        counts = summarize(results)
        log_sync_complete(job, round(time.time() - start, 2), **counts)
        return counts

    # ------------------------------------------------------------------
    # Park status
    # ------------------------------------------------------------------

    def sync_park_status(self) -> Dict[str, int]:
        return self._fan_out("park_status", self._sync_one_park_status)

    def _sync_one_park_status(self, park: ParkRef) -> bool:
        """
        Refresh a park's operating status and record a status snapshot.

        Returns:
            True if a history row was written
        """
        status = self.client.fetch_current_park_status(park.external_id)

        try:
            metrics = compute_live_metrics(self.client.fetch_live_data(park.external_id))
        except ThemeParksWikiError as e:
            metrics = None
            logger.debug(f"No live metrics for park {park.name}: {e}")

        if status is None and metrics is None:
            return False

        with self.session_scope() as session:
            row = session.get(Park, park.id)
            if row is None:
                return False

            if status and status != row.operating_status:
                row.operating_status = status
                row.last_synced = utc_now()
                logger.debug(f"Updated status for park {park.name}: {status}")

            metrics = metrics or ParkLiveMetrics()
            written = self.recorder.record(
                session, ParkStatusHistory,
                key={'park_id': park.id},
                observed={
                    'operating_status': row.operating_status,
                    'is_at_capacity': row.is_at_capacity,
                    'avg_wait_time': metrics.avg_wait_time,
                    'max_wait_time': metrics.max_wait_time,
                    'total_attractions_open': metrics.total_attractions_open,
                    'total_attractions_closed': metrics.total_attractions_closed,
                },
                compare_fields=PARK_STATUS_FIELDS
            )

        return written is not None

    # ------------------------------------------------------------------
    # Wait times
    # ------------------------------------------------------------------

    def sync_wait_times(self) -> Dict[str, int]:
        return self._fan_out("wait_times", self._sync_park_wait_times)

    def _sync_park_wait_times(self, park: ParkRef) -> int:
        """
        Record changed wait times of one park.

        Returns:
            Number of WaitTime rows written
        """
        wait_times = self.client.fetch_wait_times(park.external_id)
        if not wait_times:
            return 0

        written = 0
        now = utc_now()

        with self.session_scope() as session:
            attraction_ids = self._ids_by_external_id(session, Attraction, park.id)
            seen_keys = set()

            for wt in wait_times:
                attraction_id = attraction_ids.get(wt.attraction_id)
                if attraction_id is None:
                    continue

                # One observation per history key and pass; the first one wins
                if (attraction_id, wt.queue_type) in seen_keys:
                    continue
                seen_keys.add((attraction_id, wt.queue_type))

                row = self.recorder.record(
                    session, WaitTime,
                    key={'attraction_id': attraction_id, 'queue_type': wt.queue_type},
                    observed={'wait_time_minutes': wt.wait_time, 'status': wt.status},
                    compare_fields=WAIT_TIME_FIELDS,
                    recorded_at=now
                )
                if row is not None:
                    written += 1

        logger.debug(f"Recorded {written} wait time changes for park {park.name}")
        return written

    # ------------------------------------------------------------------
    # Attraction and restaurant status
    # ------------------------------------------------------------------

    def sync_attraction_status(self) -> Dict[str, int]:
        return self._fan_out("attraction_status", self._sync_park_attraction_status)

    def _sync_park_attraction_status(self, park: ParkRef) -> int:
        """
        Update changed attraction/restaurant statuses of one park.

        Returns:
            Number of entities whose status changed
        """
        live = self.client.fetch_live_data(park.external_id)
        changed = 0
        now = utc_now()

        with self.session_scope() as session:
            attractions = self._rows_by_external_id(session, Attraction, park.id)
            restaurants = self._rows_by_external_id(session, Restaurant, park.id)

            for entity in live.entities:
                if entity.status is None:
                    continue

                attraction = attractions.get(entity.id)
                if attraction is not None:
                    if attraction.status != entity.status:
                        attraction.status = entity.status
                        attraction.last_synced = now
                        changed += 1
                        logger.debug(f"Updated status for attraction {attraction.name}: {entity.status.value}")

                    self.recorder.record(
                        session, AttractionHistory,
                        key={'attraction_id': attraction.id},
                        observed={
                            'name': attraction.name,
                            'entity_type': attraction.entity_type,
                            'status': attraction.status,
                            'latitude': attraction.latitude,
                            'longitude': attraction.longitude,
                            'is_active_attraction': attraction.is_active,
                        },
                        compare_fields=ATTRACTION_HISTORY_FIELDS,
                        recorded_at=now
                    )
                    continue

                restaurant = restaurants.get(entity.id)
                if restaurant is not None:
                    if restaurant.availability_status != entity.status.value:
                        restaurant.availability_status = entity.status.value
                        restaurant.last_synced = now
                        changed += 1

                    self.recorder.record(
                        session, RestaurantHistory,
                        key={'restaurant_id': restaurant.id},
                        observed={
                            'name': restaurant.name,
                            'latitude': restaurant.latitude,
                            'longitude': restaurant.longitude,
                            'is_active_restaurant': restaurant.is_active,
                            'availability_status': restaurant.availability_status,
                            'accepts_reservations': restaurant.accepts_reservations,
                        },
                        compare_fields=RESTAURANT_HISTORY_FIELDS,
                        recorded_at=now
                    )

        return changed

    @staticmethod
    def _ids_by_external_id(session, model, park_id: str) -> Dict[str, str]:
        return dict(session.execute(
            select(model.external_id, model.id).where(model.park_id == park_id)
        ).all())

    @staticmethod
    def _rows_by_external_id(session, model, park_id: str) -> Dict[str, object]:
        rows: List = session.execute(select(model).where(model.park_id == park_id)).scalars().all()
        return {row.external_id: row for row in rows}
