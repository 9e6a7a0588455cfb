"""
Park Fan Sync - Geocoding Client
Reverse geocoding of park coordinates into country, city and continent.

BigDataCloud is tried first (consistent English names); OpenStreetMap
Nominatim is the fallback. Neither needs an API key. Failures never reach the
caller: when both providers fail the result is an empty GeolocationData.
"""

import re
import time
import requests
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..utils.config import (
    GEOCODING_USER_AGENT, GEOCODING_BATCH_SIZE, GEOCODING_DELAY_MS, HTTP_TIMEOUT_SECONDS
)
from ..utils.fanout import run_isolated
from ..utils.logger import logger

Coordinate = Tuple[float, float]

_PARENTHESIZED = re.compile(r'\s*\([^)]*\)\s*')

_CONTINENT_COUNTRIES = {
    'Europe': (
        'de fr es it gb nl be at ch pt pl cz sk hu ro bg gr hr si rs ba me mk al '
        'tr ru ua by lt lv ee fi se no dk is ie'
    ),
    'Asia': (
        'jp cn tw kr kp th vn ph id my sg in pk bd lk mm kh la mn uz kz kg tj tm '
        'af ir iq sa ae qa kw bh om ye jo lb sy il ps'
    ),
    'North America': 'us ca mx gt bz sv hn ni cr pa cu jm ht do',
    'South America': 'br ar cl co ve pe ec uy py bo gy sr gf',
    'Africa': (
        'eg ma dz tn ly sd za ng ke gh et ug tz mz mg cm ci ne bf ml mw zm sn td '
        'so rw bi dj cf sl tg er lr mr'
    ),
    'Oceania': 'au nz pg fj nc sb vu pf ws ki to fm mh pw nr tv',
}

CONTINENT_BY_COUNTRY_CODE: Dict[str, str] = {
    code: continent
    for continent, codes in _CONTINENT_COUNTRIES.items()
    for code in codes.split()
}


@dataclass
class GeolocationData:
    """Resolved location; every field is None when nothing could be resolved."""
    country: Optional[str] = None
    city: Optional[str] = None
    continent: Optional[str] = None
    country_code: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any((self.country, self.city, self.continent, self.country_code))


def clean_country_name(name: Optional[str]) -> Optional[str]:
    """
    Remove parenthesized qualifiers from a country name.

    Example:
        >>> clean_country_name("Korea (Republic of)")
        'Korea'
    """
    if not name or not name.strip():
        return name or None
    return _PARENTHESIZED.sub('', name).strip()


def continent_for_country_code(country_code: Optional[str]) -> Optional[str]:
    if not country_code:
        return None
    return CONTINENT_BY_COUNTRY_CODE.get(country_code.lower())


class GeocodingClient:
    """Reverse geocoding with a BigDataCloud -> Nominatim fallback chain."""

    BIGDATACLOUD_URL = "https://api.bigdatacloud.net/data/reverse-geocode-client"
    NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"

    def __init__(self, user_agent: str = GEOCODING_USER_AGENT, timeout: int = HTTP_TIMEOUT_SECONDS):
        """
        Initialize geocoding client.

        Args:
            user_agent: User-Agent header (required by Nominatim ToS)
            timeout: Per-request timeout in seconds
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = requests.Session()

    def reverse_geocode(self, lat: float, lng: float) -> GeolocationData:
        """
        Convert lat/lng coordinates to country, city and continent.

        Returns:
            GeolocationData, empty if every provider failed
        """
        result = self._reverse_geocode_bigdatacloud(lat, lng)
        if result is not None:
            return result

        logger.warning(f"BigDataCloud geocoding failed for ({lat}, {lng}), falling back to Nominatim")

        result = self._reverse_geocode_nominatim(lat, lng)
        if result is not None:
            return result

        logger.error(f"All geocoding services failed for ({lat}, {lng})")
        return GeolocationData()

    def _reverse_geocode_bigdatacloud(self, lat: float, lng: float) -> Optional[GeolocationData]:
        try:
            response = self.session.get(
                self.BIGDATACLOUD_URL,
                params={
                    'latitude': lat,
                    'longitude': lng,
                    'localityLanguage': 'en'
                },
                timeout=self.timeout
            )

            if response.status_code != 200:
                logger.warning(f"BigDataCloud returned {response.status_code} for ({lat}, {lng})")
                return None

            data = response.json()
            return GeolocationData(
                country=clean_country_name(data.get('countryName')),
                city=data.get('city') or data.get('locality') or None,
                continent=data.get('continent') or None,
                country_code=data.get('countryCode') or None,
            )

        except requests.exceptions.Timeout:
            logger.warning(f"BigDataCloud timeout for ({lat}, {lng})")
            return None
        except Exception as e:
            logger.warning(f"BigDataCloud request failed for ({lat}, {lng}): {e}")
            return None

    def _reverse_geocode_nominatim(self, lat: float, lng: float) -> Optional[GeolocationData]:
        try:
            response = self.session.get(
                self.NOMINATIM_URL,
                params={
                    'lat': lat,
                    'lon': lng,
                    'format': 'json',
                    'addressdetails': 1,
                    'zoom': 10
                },
                headers={
                    'User-Agent': self.user_agent,
                    'Accept-Language': 'en'
                },
                timeout=self.timeout
            )

            if response.status_code != 200:
                logger.warning(f"Nominatim returned {response.status_code} for ({lat}, {lng})")
                return None

            address = response.json().get('address', {})

            # Different countries use different address fields
            city = (
                address.get('city') or
                address.get('town') or
                address.get('village') or
                address.get('municipality')
            )
            country_code = address.get('country_code')

            return GeolocationData(
                country=clean_country_name(address.get('country')),
                city=city or None,
                continent=continent_for_country_code(country_code),
                country_code=country_code.upper() if country_code else None,
            )

        except requests.exceptions.Timeout:
            logger.warning(f"Nominatim timeout for ({lat}, {lng})")
            return None
        except Exception as e:
            logger.warning(f"Nominatim request failed for ({lat}, {lng}): {e}")
            return None

    def _resolve_batch(self, batch: Sequence[Tuple[int, Coordinate]]) -> Dict[int, GeolocationData]:
        results = run_isolated(
            batch,
            lambda indexed: self.reverse_geocode(*indexed[1]),
            max_workers=len(batch),
            describe=lambda indexed: f"coordinate {indexed[1]}"
        )
        return {
            r.item[0]: (r.value if r.success else GeolocationData())
            for r in results
        }

    def resolve_many(
        self,
        coordinates: Sequence[Coordinate],
        delay_ms: int = GEOCODING_DELAY_MS,
        batch_size: int = GEOCODING_BATCH_SIZE
    ) -> List[GeolocationData]:
        """
        Reverse geocode many coordinates in rate-limited batches.

        Calls within a batch run concurrently; consecutive batch starts are at
        least delay_ms apart. A failed coordinate yields an empty result.

        Args:
            coordinates: (latitude, longitude) pairs
            delay_ms: Minimum time between batch starts
            batch_size: Concurrent requests per batch

        Returns:
            One GeolocationData per coordinate, in input order
        """
        indexed = list(enumerate(coordinates))
        resolved: Dict[int, GeolocationData] = {}
        batch_size = max(1, batch_size)

        for start in range(0, len(indexed), batch_size):
            batch = indexed[start:start + batch_size]
            batch_started = time.monotonic()

            resolved.update(self._resolve_batch(batch))

            if start + batch_size < len(indexed) and delay_ms > 0:
                remaining = delay_ms / 1000.0 - (time.monotonic() - batch_started)
                if remaining > 0:
                    time.sleep(remaining)

        return [resolved.get(i, GeolocationData()) for i in range(len(indexed))]

    def resolve_parallel(self, coordinates: Sequence[Coordinate]) -> List[GeolocationData]:
        """
        Reverse geocode every coordinate at once, without rate limiting.

        Only suitable for small inputs.
        """
        logger.debug(f"Processing {len(coordinates)} coordinates in full parallel mode")
        indexed = list(enumerate(coordinates))
        if not indexed:
            return []
        resolved = self._resolve_batch(indexed)
        return [resolved.get(i, GeolocationData()) for i in range(len(indexed))]

    def close(self):
        """Close the HTTP session."""
        self.session.close()
