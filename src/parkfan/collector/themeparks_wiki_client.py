"""
Park Fan Sync - ThemeParks.wiki API Client
Fetches destinations, park entities, live data and schedules with retry logic
using tenacity, and turns raw JSON into typed DTOs.

API Documentation: https://api.themeparks.wiki/docs/v1/
"""

import requests
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .enum_mapping import (
    map_entity_type, map_operating_status, map_show_type, map_schedule_type,
    map_purchase_type, parse_queue_type
)
from ..models.enums import (
    EntityType, OperatingStatus, QueueType, ShowType, ParkScheduleType, PurchaseType
)
from ..utils.config import (
    THEMEPARKS_WIKI_API_BASE_URL, HTTP_TIMEOUT_SECONDS, HTTP_MAX_REDIRECTS,
    MAX_RETRY_ATTEMPTS, RETRY_BACKOFF_MULTIPLIER
)
from ..utils.datetime_helpers import utc_now
from ..utils.logger import logger


class ThemeParksWikiError(Exception):
    """Base class for upstream fetch failures."""
    pass


class ParkGroupFetchError(ThemeParksWikiError):
    pass


class ParkFetchError(ThemeParksWikiError):
    pass


class EntityFetchError(ThemeParksWikiError):
    pass


class LiveDataFetchError(ThemeParksWikiError):
    pass


class ScheduleFetchError(ThemeParksWikiError):
    pass


@dataclass
class ParkSummaryDTO:
    """Park reference nested in a destination listing."""
    id: str
    name: str
    destination_id: Optional[str] = None


@dataclass
class ParkGroupDTO:
    id: str
    name: str
    parks: List[ParkSummaryDTO] = field(default_factory=list)


@dataclass
class ParkDTO:
    """Detailed park entity document."""
    id: str
    name: str
    timezone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    entity_type: EntityType = EntityType.PARK
    parent_id: Optional[str] = None
    destination_id: Optional[str] = None


@dataclass
class ShowTimeSlotDTO:
    start_time: str
    end_time: str
    show_type: ShowType = ShowType.REGULAR


@dataclass
class EntityDTO:
    """Child or live entity (attraction, show, restaurant, ...)."""
    id: str
    name: str
    entity_type: EntityType
    park_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: Optional[OperatingStatus] = None
    last_updated: Optional[str] = None
    queue: Dict[str, Any] = field(default_factory=dict)
    showtimes: List[ShowTimeSlotDTO] = field(default_factory=list)


@dataclass
class WaitTimeDTO:
    attraction_id: str
    queue_type: QueueType
    wait_time: Optional[int]
    status: OperatingStatus
    last_updated: Optional[str] = None


@dataclass
class ShowDTO:
    """A show with its upcoming performance slots."""
    id: str
    name: str
    showtimes: List[ShowTimeSlotDTO]
    last_updated: Optional[str] = None


@dataclass
class LiveDataDTO:
    wait_times: List[WaitTimeDTO] = field(default_factory=list)
    show_times: List[ShowDTO] = field(default_factory=list)
    entities: List[EntityDTO] = field(default_factory=list)


@dataclass
class PurchaseDTO:
    id: str
    name: str
    type: PurchaseType
    available: bool = False
    price_amount: Optional[int] = None
    price_currency: Optional[str] = None
    price_formatted: Optional[str] = None


@dataclass
class ScheduleEntryDTO:
    date: str
    type: ParkScheduleType
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    description: Optional[str] = None
    purchases: List[PurchaseDTO] = field(default_factory=list)


def _coordinates(payload: Dict) -> tuple:
    # Zero coordinates are treated as missing, as upstream uses them for "unknown"
    location = payload.get("location") or {}
    return (location.get("latitude") or None, location.get("longitude") or None)


def _parse_showtimes(raw: Optional[List[Dict]]) -> List[ShowTimeSlotDTO]:
    return [
        ShowTimeSlotDTO(
            start_time=slot["startTime"],
            end_time=slot["endTime"],
            show_type=map_show_type(slot.get("type"))
        )
        for slot in (raw or [])
        if slot.get("startTime") and slot.get("endTime")
    ]


class ThemeParksWikiClient:
    """
    Client for ThemeParks.wiki API with automatic retry logic.

    Implements exponential backoff for transient failures (network, timeouts).
    Every other failure (non-2xx, malformed payload) is raised as the
    ThemeParksWikiError subclass of the resource being fetched.
    """

    def __init__(self, base_url: str = THEMEPARKS_WIKI_API_BASE_URL, timeout: int = HTTP_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.max_redirects = HTTP_MAX_REDIRECTS
        self.session.headers.update({
            'User-Agent': 'ParkFanSync/1.0 (Data Collection Bot)',
            'Accept': 'application/json'
        })

    @retry(
        stop=stop_after_attempt(MAX_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=RETRY_BACKOFF_MULTIPLIER, min=4, max=60),
        retry=retry_if_exception_type((requests.Timeout, requests.ConnectionError)),
        reraise=True
    )
    def _get_json(self, path: str) -> Dict:
        """
        GET a path below the base URL and decode the JSON body.

        Raises:
            requests.HTTPError: If API returns error status
            requests.Timeout: If request times out (after retries)
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"Fetching {url}")

        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()

        return response.json()

    def fetch_park_groups(self) -> List[ParkGroupDTO]:
        """
        Fetch all destinations (park groups) with their nested parks.

        Raises:
            ParkGroupFetchError: On any fetch or payload failure
        """
        try:
            data = self._get_json("/destinations")
            groups = [
                ParkGroupDTO(
                    id=dest["id"],
                    name=dest["name"],
                    parks=[
                        ParkSummaryDTO(id=park["id"], name=park["name"], destination_id=dest["id"])
                        for park in dest.get("parks", [])
                    ]
                )
                for dest in data["destinations"]
            ]
        except Exception as e:
            logger.error(f"Failed to fetch park groups: {e}")
            raise ParkGroupFetchError("Failed to fetch park groups from ThemeParks.wiki API") from e

        logger.info(f"Fetched {len(groups)} destinations from ThemeParks.wiki")
        return groups

    def fetch_park(self, park_id: str) -> ParkDTO:
        """
        Fetch the detailed entity document of a park.

        Raises:
            ParkFetchError: On any fetch or payload failure
        """
        try:
            data = self._get_json(f"/entity/{park_id}")
            latitude, longitude = _coordinates(data)
            return ParkDTO(
                id=data["id"],
                name=data["name"],
                timezone=data.get("timezone"),
                latitude=latitude,
                longitude=longitude,
                entity_type=map_entity_type(data.get("entityType") or EntityType.PARK.value),
                parent_id=data.get("parentId"),
                destination_id=data.get("destinationId"),
            )
        except Exception as e:
            logger.error(f"Failed to fetch park details for ID: {park_id}: {e}")
            raise ParkFetchError(f"Failed to fetch park details for ID: {park_id}") from e

    def fetch_entity(self, entity_id: str) -> EntityDTO:
        """
        Fetch any entity document. A missing entityType maps to OTHER.

        Raises:
            EntityFetchError: On any fetch or payload failure
        """
        try:
            data = self._get_json(f"/entity/{entity_id}")
            latitude, longitude = _coordinates(data)
            return EntityDTO(
                id=data["id"],
                name=data["name"],
                entity_type=map_entity_type(data.get("entityType")),
                park_id=data.get("parentId"),
                latitude=latitude,
                longitude=longitude,
            )
        except Exception as e:
            logger.error(f"Failed to fetch entity details for ID: {entity_id}: {e}")
            raise EntityFetchError(f"Failed to fetch entity details for ID: {entity_id}") from e

    def fetch_park_entities(self, park_id: str) -> List[EntityDTO]:
        """
        Fetch all children (attractions, shows, restaurants, ...) of a park.

        Raises:
            EntityFetchError: On any fetch or payload failure
        """
        try:
            data = self._get_json(f"/entity/{park_id}/children")
            entities = []
            for child in data["children"]:
                latitude, longitude = _coordinates(child)
                entities.append(EntityDTO(
                    id=child["id"],
                    name=child["name"],
                    entity_type=map_entity_type(child.get("entityType")),
                    park_id=child.get("parentId"),
                    latitude=latitude,
                    longitude=longitude,
                ))
        except Exception as e:
            logger.error(f"Failed to fetch entities for park ID: {park_id}: {e}")
            raise EntityFetchError(f"Failed to fetch entities for park ID: {park_id}") from e

        logger.debug(f"Fetched {len(entities)} children for park {park_id}")
        return entities

    def fetch_attractions(self, park_id: str) -> List[EntityDTO]:
        """Children of a park with entityType ATTRACTION."""
        return [
            entity for entity in self.fetch_park_entities(park_id)
            if entity.entity_type == EntityType.ATTRACTION
        ]

    def fetch_restaurants(self, park_id: str) -> List[EntityDTO]:
        """Children of a park with entityType RESTAURANT."""
        return [
            entity for entity in self.fetch_park_entities(park_id)
            if entity.entity_type == EntityType.RESTAURANT
        ]

    def fetch_live_data(self, park_id: str) -> LiveDataDTO:
        """
        Fetch live data for a park and split it into wait times, shows and entities.

        A wait time is emitted for every queue entry that carries a waitTime
        key (its value may be null). Queue names outside QueueType are
        skipped. Entities without a status default their
        wait-time status to OPERATING.

        Raises:
            LiveDataFetchError: On any fetch or payload failure
        """
        try:
            data = self._get_json(f"/entity/{park_id}/live")
            live = LiveDataDTO()

            for item in data["liveData"]:
                raw_status = item.get("status")
                status = map_operating_status(raw_status) if raw_status else None
                queue = item.get("queue") or {}

                entity = EntityDTO(
                    id=item["id"],
                    name=item["name"],
                    entity_type=map_entity_type(item.get("entityType")),
                    park_id=item.get("parkId"),
                    status=status,
                    last_updated=item.get("lastUpdated"),
                    queue=queue,
                    showtimes=_parse_showtimes(item.get("showtimes")),
                )

                for queue_name, queue_data in queue.items():
                    if not (isinstance(queue_data, dict) and "waitTime" in queue_data):
                        continue
                    queue_type = parse_queue_type(queue_name)
                    if queue_type is None:
                        logger.debug(f"Skipping unknown queue type {queue_name} for {item['id']}")
                        continue
                    live.wait_times.append(WaitTimeDTO(
                        attraction_id=item["id"],
                        queue_type=queue_type,
                        wait_time=queue_data["waitTime"],
                        status=status or OperatingStatus.OPERATING,
                        last_updated=item.get("lastUpdated"),
                    ))

                if entity.showtimes:
                    live.show_times.append(ShowDTO(
                        id=item["id"],
                        name=item["name"],
                        showtimes=entity.showtimes,
                        last_updated=item.get("lastUpdated"),
                    ))

                live.entities.append(entity)
        except Exception as e:
            logger.error(f"Failed to fetch live data for park ID: {park_id}: {e}")
            raise LiveDataFetchError(f"Failed to fetch live data for park ID: {park_id}") from e

        return live

    def fetch_wait_times(self, park_id: str) -> List[WaitTimeDTO]:
        return self.fetch_live_data(park_id).wait_times

    def fetch_show_times(self, park_id: str) -> List[ShowDTO]:
        return self.fetch_live_data(park_id).show_times

    def fetch_park_schedule(self, park_id: str) -> List[ScheduleEntryDTO]:
        """
        Fetch the operating schedule of a park, purchases included.

        Raises:
            ScheduleFetchError: On any fetch or payload failure
        """
        try:
            data = self._get_json(f"/entity/{park_id}/schedule")
            entries = []
            for item in data["schedule"]:
                purchases = []
                for purchase in item.get("purchases") or []:
                    price = purchase.get("price") or {}
                    purchases.append(PurchaseDTO(
                        id=purchase["id"],
                        name=purchase["name"],
                        type=map_purchase_type(purchase.get("type")),
                        available=bool(purchase.get("available", False)),
                        price_amount=price.get("amount"),
                        price_currency=price.get("currency"),
                        price_formatted=price.get("formatted"),
                    ))

                entries.append(ScheduleEntryDTO(
                    date=item["date"],
                    type=map_schedule_type(item.get("type")),
                    opening_time=item.get("openingTime"),
                    closing_time=item.get("closingTime"),
                    description=item.get("description"),
                    purchases=purchases,
                ))
        except Exception as e:
            logger.error(f"Failed to fetch schedule for park ID: {park_id}: {e}")
            raise ScheduleFetchError(f"Failed to fetch schedule for park ID: {park_id}") from e

        return entries

    def fetch_current_park_status(self, park_id: str) -> Optional[str]:
        """
        Determine a park's operating status from its schedule.

        Returns today's (UTC) schedule type, else the type of the most recent
        past entry, else None. Never raises.
        """
        try:
            schedule = self.fetch_park_schedule(park_id)
        except ThemeParksWikiError as e:
            logger.debug(f"Could not determine current status for park {park_id}: {e}")
            return None

        today = utc_now().date().isoformat()

        for entry in schedule:
            if entry.date == today:
                return entry.type.value

        past = sorted((e for e in schedule if e.date <= today), key=lambda e: e.date, reverse=True)
        return past[0].type.value if past else None

    def close(self):
        """Close the HTTP session."""
        self.session.close()


# Singleton instance
_client: Optional[ThemeParksWikiClient] = None


def get_themeparks_wiki_client() -> ThemeParksWikiClient:
    """
    Get or create singleton ThemeParks.wiki API client.

    Returns:
        ThemeParksWikiClient instance
    """
    global _client
    if _client is None:
        _client = ThemeParksWikiClient()
    return _client
