"""
Park Fan Sync - Entity Reconciler
Full synchronization pass: park groups, parks, locations, attractions/shows,
restaurants and schedules.

Every category follows the same three phases:

1. Fetch the authoritative list from ThemeParks.wiki. A failure here is
   fatal for the category and propagates to the caller.
2. Reconcile each item (upsert by external_id). Items fail independently;
   a failure is logged and the rest of the batch continues.
3. Deactivate rows whose external_id was not fetched. This is one bulk
   statement, skipped when nothing was fetched.

Parks fan out across a thread pool; work inside one park is sequential,
each item in its own short transaction.
"""

import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, ContextManager, Dict, Iterable, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..collector.themeparks_wiki_client import (
    ThemeParksWikiClient, ThemeParksWikiError, ParkSummaryDTO, EntityDTO, ShowDTO,
    ScheduleEntryDTO, PurchaseDTO, LiveDataDTO, get_themeparks_wiki_client
)
from ..database.connection import get_db_session, is_duplicate_key_error
from ..database.repositories.entity_repository import EntityRepository
from ..models import (
    ParkGroup, Park, Attraction, Restaurant, ShowTime, ParkSchedule, Purchase, PurchaseHistory,
    EntityType
)
from ..utils.config import SYNC_MAX_WORKERS
from ..utils.datetime_helpers import extract_date, extract_time, to_time_of_day, parse_instant, utc_now
from ..utils.fanout import run_isolated, run_sequential, summarize
from ..utils.logger import logger, log_sync_start, log_sync_complete
from ..utils.slug import to_slug
from .history_recorder import HistoryRecorder, PURCHASE_HISTORY_FIELDS
from .park_location_service import ParkLocationService

SessionScope = Callable[[], ContextManager[Session]]


@dataclass(frozen=True)
class ParkRef:
    """Detached park identity handed to worker threads."""
    id: str
    external_id: str
    name: str


def load_park_refs(session_scope: SessionScope, active_only: bool = True) -> List[ParkRef]:
    """Load (id, external_id, name) of parks to process."""
    with session_scope() as session:
        stmt = select(Park.id, Park.external_id, Park.name).order_by(Park.name)
        if active_only:
            stmt = stmt.where(Park.is_active.is_(True))
        return [ParkRef(*row) for row in session.execute(stmt)]


@dataclass(frozen=True)
class ScheduleDay:
    """A written schedule day and the purchases it lists."""
    schedule_id: str
    schedule_date: date
    purchases: List[PurchaseDTO]


@dataclass(frozen=True)
class PurchaseOffer:
    schedule_id: str
    schedule_date: date
    purchase: PurchaseDTO


def select_purchase_offers(days: Iterable[ScheduleDay]) -> Dict[str, PurchaseOffer]:
    """
    Pick one offer per purchase id across a park's schedule days.

    ThemeParks.wiki reuses a product's purchase id on every day it is sold,
    often at a different price per day. Writing each day in turn would flip
    the stored price within one pass, so the earliest day listing the id wins.
    """
    offers: Dict[str, PurchaseOffer] = {}
    for day in days:
        for purchase in day.purchases:
            current = offers.get(purchase.id)
            if current is None or day.schedule_date < current.schedule_date:
                offers[purchase.id] = PurchaseOffer(day.schedule_id, day.schedule_date, purchase)
    return offers


class Reconciler:
    """
    Drives a full reconciliation pass.

    Example:
        >>> reconciler = Reconciler()
        >>> reconciler.sync_all()
    """

    def __init__(
        self,
        client: Optional[ThemeParksWikiClient] = None,
        location_service: Optional[ParkLocationService] = None,
        session_scope: SessionScope = get_db_session,
        max_workers: int = SYNC_MAX_WORKERS,
        recorder: Optional[HistoryRecorder] = None
    ):
        self.client = client or get_themeparks_wiki_client()
        self.session_scope = session_scope
        self.location_service = location_service or ParkLocationService(session_scope=session_scope)
        self.max_workers = max_workers
        self.recorder = recorder or HistoryRecorder()

    def sync_all(self):
        """Run every category in dependency order."""
        logger.info("--- Starting full sync ---")
        start = time.time()

        self.sync_park_groups()
        self.sync_parks()
        self.update_park_locations()
        self.sync_attractions_and_shows()
        self.sync_schedules()

        logger.info("--- Full sync completed ---", extra={"duration_seconds": round(time.time() - start, 2)})

    # ------------------------------------------------------------------
    # Park groups
    # ------------------------------------------------------------------

    def sync_park_groups(self) -> Dict[str, int]:
        start = time.time()
        groups = self.client.fetch_park_groups()
        log_sync_start("park_groups", len(groups))

        results = run_isolated(
            groups, self._reconcile_park_group,
            max_workers=self.max_workers,
            describe=lambda g: f"park group {g.id}"
        )

        with self.session_scope() as session:
            EntityRepository(session, ParkGroup).deactivate_missing([g.id for g in groups])

        counts = summarize(results)
        log_sync_complete("park_groups", round(time.time() - start, 2), **counts)
        return counts

    def _reconcile_park_group(self, group) -> str:
        with self.session_scope() as session:
            group_id, _ = EntityRepository(session, ParkGroup).upsert(group.id, {
                'name': group.name,
                'slug': to_slug(group.name),
                'is_active': True,
                'last_synced': utc_now(),
            })
        return group_id

    # ------------------------------------------------------------------
    # Parks
    # ------------------------------------------------------------------

    def sync_parks(self) -> Dict[str, int]:
        start = time.time()
        groups = self.client.fetch_park_groups()
        parks = [park for group in groups for park in group.parks]
        log_sync_start("parks", len(parks))

        results = run_isolated(
            parks, self._reconcile_park,
            max_workers=self.max_workers,
            describe=lambda p: f"park {p.id}"
        )

        with self.session_scope() as session:
            EntityRepository(session, Park).deactivate_missing([p.id for p in parks])

        counts = summarize(results)
        log_sync_complete("parks", round(time.time() - start, 2), **counts)
        return counts

    def _reconcile_park(self, summary: ParkSummaryDTO) -> str:
        """
        Upsert one park from its detailed document.

        If the detailed fetch fails the park is still written from the
        destination listing (name and group only); timezone and coordinates
        already stored are kept.
        """
        fields = {
            'name': summary.name,
            'slug': to_slug(summary.name),
            'is_active': True,
            'last_synced': utc_now(),
        }

        try:
            detail = self.client.fetch_park(summary.id)
        except ThemeParksWikiError as e:
            detail = None
            logger.warning(
                f"Falling back to destination data for park {summary.id}: {e}",
                extra={"park_external_id": summary.id, "degraded": True}
            )

        if detail is not None:
            name = detail.name or summary.name
            fields.update(name=name, slug=to_slug(name), timezone=detail.timezone or 'UTC')
            if detail.latitude is not None:
                fields['latitude'] = detail.latitude
            if detail.longitude is not None:
                fields['longitude'] = detail.longitude

            current_status = self.client.fetch_current_park_status(summary.id)
            if current_status:
                fields['operating_status'] = current_status

        with self.session_scope() as session:
            if summary.destination_id:
                group_id = EntityRepository(session, ParkGroup).get_id_by_external_id(summary.destination_id)
                if group_id:
                    fields['park_group_id'] = group_id

            park_id, created = EntityRepository(session, Park).upsert(summary.id, fields)

        if created:
            logger.info(f"Created park {fields['name']}", extra={"park_id": park_id})
        return park_id

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def update_park_locations(self):
        """Geocode parks that have coordinates but no complete location."""
        try:
            stats_before = self.location_service.get_location_stats()
            logger.info(f"Parks needing location updates: {stats_before['needing_update']}")

            if stats_before['needing_update'] > 0:
                self.location_service.update_all_parks_without_location()
                stats_after = self.location_service.get_location_stats()
                logger.info(
                    f"Location update completed: {stats_after['with_full_location']} parks "
                    f"now have complete location data"
                )
            else:
                logger.debug("No parks need location updates")
        except Exception as e:
            logger.error(f"Park location update failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Attractions, restaurants and shows
    # ------------------------------------------------------------------

    def sync_attractions_and_shows(self) -> Dict[str, int]:
        start = time.time()
        parks = load_park_refs(self.session_scope)
        log_sync_start("attractions_and_shows", len(parks))

        results = run_isolated(
            parks, self._sync_park_children,
            max_workers=self.max_workers,
            describe=lambda p: f"park {p.name}"
        )

        counts = summarize(results)
        log_sync_complete("attractions_and_shows", round(time.time() - start, 2), **counts)
        return counts

    def _sync_park_children(self, park: ParkRef):
        children = self.client.fetch_park_entities(park.external_id)
        attractions = [c for c in children if c.entity_type == EntityType.ATTRACTION]
        restaurants = [c for c in children if c.entity_type == EntityType.RESTAURANT]

        try:
            live = self.client.fetch_live_data(park.external_id)
        except ThemeParksWikiError as e:
            live = None
            logger.debug(f"Failed to fetch live data for park {park.name}: {e}")

        live_by_id = {entity.id: entity for entity in live.entities} if live else {}

        run_sequential(
            attractions,
            lambda attr: self._reconcile_attraction(park, attr, live_by_id.get(attr.id)),
            describe=lambda attr: f"attraction {attr.id}"
        )
        with self.session_scope() as session:
            EntityRepository(session, Attraction).deactivate_missing(
                [a.id for a in attractions],
                scope={'park_id': park.id, 'entity_type': EntityType.ATTRACTION}
            )

        run_sequential(
            restaurants,
            lambda rest: self._reconcile_restaurant(park, rest, live_by_id.get(rest.id)),
            describe=lambda rest: f"restaurant {rest.id}"
        )
        with self.session_scope() as session:
            EntityRepository(session, Restaurant).deactivate_missing(
                [r.id for r in restaurants],
                scope={'park_id': park.id}
            )

        if live is None:
            logger.warning(f"Skipping show times for park {park.name}: live data unavailable")
            return

        self.sync_show_times(park, live)

    def _reconcile_attraction(self, park: ParkRef, attraction: EntityDTO, live: Optional[EntityDTO]) -> str:
        fields = {
            'park_id': park.id,
            'name': attraction.name,
            'slug': to_slug(attraction.name),
            'entity_type': attraction.entity_type,
            'latitude': attraction.latitude,
            'longitude': attraction.longitude,
            'is_active': True,
            'last_synced': utc_now(),
        }
        if live is not None and live.status is not None:
            fields['status'] = live.status

        with self.session_scope() as session:
            attraction_id, _ = EntityRepository(session, Attraction).upsert(attraction.id, fields)
        return attraction_id

    def _reconcile_restaurant(self, park: ParkRef, restaurant: EntityDTO, live: Optional[EntityDTO]) -> str:
        fields = {
            'park_id': park.id,
            'name': restaurant.name,
            'slug': to_slug(restaurant.name),
            'latitude': restaurant.latitude,
            'longitude': restaurant.longitude,
            'is_active': True,
            'last_synced': utc_now(),
        }
        if live is not None and live.status is not None:
            fields['availability_status'] = live.status.value

        with self.session_scope() as session:
            restaurant_id, _ = EntityRepository(session, Restaurant).upsert(restaurant.id, fields)
        return restaurant_id

    def sync_show_times(self, park: ParkRef, live: LiveDataDTO):
        """Replace the show times of every show in the park's live data."""
        run_sequential(
            live.show_times,
            lambda show: self._replace_show_times(park, show),
            describe=lambda show: f"show {show.id}"
        )

    def _replace_show_times(self, park: ParkRef, show: ShowDTO) -> int:
        """
        Hard-replace a show's ShowTime rows with the latest fetch.

        Shows only present in live data are created as SHOW attractions.

        Returns:
            Number of show times written
        """
        now = utc_now()

        with self.session_scope() as session:
            repo = EntityRepository(session, Attraction)
            attraction = repo.get_by_external_id(show.id)

            if attraction is None:
                logger.debug(f"Creating new show entity for external ID: {show.id}")
                attraction_id, _ = repo.upsert(show.id, {
                    'park_id': park.id,
                    'name': show.name,
                    'slug': to_slug(show.name),
                    'entity_type': EntityType.SHOW,
                    'is_active': True,
                    'last_synced': now,
                })
            else:
                attraction_id = attraction.id

            session.execute(delete(ShowTime).where(ShowTime.attraction_id == attraction_id))

            seen = set()
            for slot in show.showtimes:
                start_time = parse_instant(slot.start_time)
                end_time = parse_instant(slot.end_time)
                if start_time is None or end_time is None or (start_time, end_time) in seen:
                    continue
                seen.add((start_time, end_time))

                session.add(ShowTime(
                    attraction_id=attraction_id,
                    start_time=start_time,
                    end_time=end_time,
                    show_type=slot.show_type,
                    is_active=True,
                    last_synced=now,
                ))

        return len(seen)

    # ------------------------------------------------------------------
    # Schedules and purchases
    # ------------------------------------------------------------------

    def sync_schedules(self) -> Dict[str, int]:
        start = time.time()
        parks = load_park_refs(self.session_scope)
        log_sync_start("schedules", len(parks))

        results = run_isolated(
            parks, self._sync_park_schedule,
            max_workers=self.max_workers,
            describe=lambda p: f"park {p.name}"
        )

        counts = summarize(results)
        log_sync_complete("schedules", round(time.time() - start, 2), **counts)
        return counts

    def _sync_park_schedule(self, park: ParkRef):
        entries = self.client.fetch_park_schedule(park.external_id)

        # One day at a time: concurrent writes for the same park+date collide
        results = run_sequential(
            entries,
            lambda entry: self._reconcile_schedule_entry(park, entry),
            describe=lambda entry: f"schedule {park.name} {entry.date}"
        )

        offers = select_purchase_offers(r.value for r in results if r.success and r.value)
        now = utc_now()

        run_sequential(
            offers.values(),
            lambda offer: self._reconcile_purchase(offer, now),
            describe=lambda offer: f"purchase {park.name} {offer.purchase.id}"
        )

        with self.session_scope() as session:
            EntityRepository(session, Purchase).deactivate_missing(
                offers.keys(),
                criteria=[Purchase.park_schedule_id.in_(
                    select(ParkSchedule.id).where(ParkSchedule.park_id == park.id)
                )]
            )

    def _reconcile_schedule_entry(self, park: ParkRef, entry: ScheduleEntryDTO) -> Optional[ScheduleDay]:
        """
        Upsert one schedule day.

        The day is taken from the opening time literal when present, else
        from the entry's date. Duplicate-key collisions are skipped.

        Returns:
            The written day with the purchases it lists, or None when skipped
        """
        schedule_date = extract_date(entry.opening_time) if entry.opening_time else extract_date(entry.date)
        if schedule_date is None:
            logger.warning(f"Skipping schedule entry without a usable date for park {park.name}: {entry.date}")
            return None

        with self.session_scope() as session:
            try:
                schedule = session.execute(
                    select(ParkSchedule).where(
                        ParkSchedule.park_id == park.id,
                        ParkSchedule.schedule_date == schedule_date
                    )
                ).scalar_one_or_none()

                if schedule is None:
                    schedule = ParkSchedule(park_id=park.id, schedule_date=schedule_date)
                    session.add(schedule)

                schedule.opening_time = to_time_of_day(extract_time(entry.opening_time))
                schedule.closing_time = to_time_of_day(extract_time(entry.closing_time))
                schedule.schedule_type = entry.type
                schedule.description = entry.description
                schedule.is_special = False
                schedule.last_synced = utc_now()
                session.flush()

            except IntegrityError as e:
                if not is_duplicate_key_error(e):
                    raise
                session.rollback()
                logger.debug(f"Skipping duplicate schedule for park {park.name} on date {schedule_date}")
                return None

            return ScheduleDay(schedule_id=schedule.id, schedule_date=schedule_date, purchases=entry.purchases)

    def _reconcile_purchase(self, offer: PurchaseOffer, now):
        purchase = offer.purchase

        with self.session_scope() as session:
            purchase_id, _ = EntityRepository(session, Purchase).upsert(purchase.id, {
                'park_schedule_id': offer.schedule_id,
                'name': purchase.name,
                'type': purchase.type,
                'price_amount': purchase.price_amount,
                'price_currency': purchase.price_currency,
                'price_formatted': purchase.price_formatted,
                'available': purchase.available,
                'is_active': True,
                'last_synced': now,
            })

            self.recorder.record(
                session, PurchaseHistory,
                key={'purchase_id': purchase_id},
                observed={
                    'name': purchase.name,
                    'type': purchase.type,
                    'price_amount': purchase.price_amount,
                    'price_currency': purchase.price_currency,
                    'price_formatted': purchase.price_formatted,
                    'available': purchase.available,
                },
                compare_fields=PURCHASE_HISTORY_FIELDS,
                recorded_at=now
            )
