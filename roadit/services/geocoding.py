# roadit/services/geocoding.py
import logging
import math
from typing import Optional

import requests

from roadit.core.config import GeocodingConfig
from roadit.schemas.issue import Municipality
from roadit.services.errors import MissingCredentials, UpstreamError

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
LOCALITY_TYPES = ("locality", "administrative_area_level_2")

# City names as the geocoder reports them -> municipal body responsible for them
CITY_BODIES = {
    "new delhi": Municipality.NDMC,
    "delhi": Municipality.NDMC,
    "mumbai": Municipality.BMC,
    "bombay": Municipality.BMC,
    "bengaluru": Municipality.BBMP,
    "bangalore": Municipality.BBMP,
    "bangalore urban": Municipality.BBMP,
    "kolkata": Municipality.KMC,
    "calcutta": Municipality.KMC,
    "chennai": Municipality.GCC,
    "madras": Municipality.GCC,
    "hyderabad": Municipality.GHMC,
}


class InvalidLocation(ValueError):
    pass


class GeocodingFailed(UpstreamError):
    pass


def match_municipality(name: Optional[str]) -> Optional[Municipality]:
    if not name:
        return None
    key = name.strip()
    if key.upper() in Municipality.__members__:
        return Municipality[key.upper()]
    return CITY_BODIES.get(key.lower())


def _check_coordinates(lat: float, lng: float):
    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        raise InvalidLocation("Invalid location.")
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidLocation("Invalid location.")
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise InvalidLocation("Invalid location.")
    return lat, lng


class MunicipalityResolver:
    """Names the municipal body for a coordinate with the Google Geocoding API."""

    def __init__(self, config: GeocodingConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def resolve(self, lat: float, lng: float) -> str:
        lat, lng = _check_coordinates(lat, lng)
        if not self.config.api_key:
            raise MissingCredentials("GOOGLE_MAPS_API_KEY")

        try:
            r = self.session.get(
                self.config.endpoint,
                params={"latlng": f"{lat},{lng}", "key": self.config.api_key},
                timeout=self.config.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to get municipality from coordinates: {e}")
            raise GeocodingFailed("An external service error occurred while finding the municipality.") from e

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return UNKNOWN
        if status != "OK":
            logger.error(f"Geocoding API error: {status} - {data.get('error_message', '')}")
            raise GeocodingFailed("Could not find municipality due to a mapping service error.")

        results = data.get("results") or []
        if not results:
            return UNKNOWN
        first = results[0]
        for component in first.get("address_components", []):
            if any(t in component.get("types", []) for t in LOCALITY_TYPES):
                return component.get("long_name") or UNKNOWN
        return first.get("formatted_address") or UNKNOWN
