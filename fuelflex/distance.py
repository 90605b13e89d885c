# --- fuelflex/distance.py ----------------------------------------------------
# Great-circle distance and travel-time lookups.

from dataclasses import dataclass
from typing import Optional
import logging
import math

import aiohttp

from .errors import DistanceUnavailable

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
DEFAULT_SPEED_KMH = 50.0
DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def as_param(self) -> str:
        return f"{self.latitude},{self.longitude}"


@dataclass(frozen=True)
class DistanceResult:
    distance_km: float
    travel_time_hours: float
    distance_text: Optional[str] = None
    duration_text: Optional[str] = None


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    # longitude is meaningless at a pole
    if abs(a.latitude) == 90.0 and a.latitude == b.latitude:
        return 0.0
    to = math.pi / 180.0
    dlat = (b.latitude - a.latitude) * to
    dlon = (b.longitude - a.longitude) * to
    h = math.sin(dlat / 2) ** 2 + math.cos(a.latitude * to) * math.cos(b.latitude * to) * math.sin(dlon / 2) ** 2
    # rounding can push antipodal points just past 1.0
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def calculate_distance(a: Coordinates, b: Coordinates, avg_speed_kmh: float = DEFAULT_SPEED_KMH) -> DistanceResult:
    """Straight-line distance plus travel time at a constant average speed.

    The constant speed stands in for a routing/traffic-aware service: it
    ignores road networks entirely. Ranges are not checked here; callers
    validate coordinates first.
    """
    km = haversine_km(a, b)
    return DistanceResult(distance_km=km, travel_time_hours=km / avg_speed_kmh)


class HaversineDistanceProvider:
    """Local provider; never fails for numeric input."""

    def __init__(self, avg_speed_kmh: float = DEFAULT_SPEED_KMH):
        if avg_speed_kmh <= 0:
            raise ValueError("avg_speed_kmh must be positive")
        self.avg_speed_kmh = avg_speed_kmh

    async def get_distance(self, origin: Coordinates, destination: Coordinates) -> DistanceResult:
        return calculate_distance(origin, destination, self.avg_speed_kmh)


def parse_distance_matrix(data: dict) -> DistanceResult:
    """Turn a Distance Matrix JSON payload into a DistanceResult."""
    if not isinstance(data, dict):
        raise DistanceUnavailable("Distance Matrix returned a non-object payload")
    status = data.get("status")
    if status != "OK":
        raise DistanceUnavailable(
            f"Distance Matrix request failed: {status} - {data.get('error_message', 'Unknown error')}"
        )

    rows = data.get("rows") or []
    elements = rows[0].get("elements") if rows else None
    if not elements:
        raise DistanceUnavailable("Distance Matrix returned no distance/duration elements")

    element = elements[0]
    if element.get("status") != "OK":
        raise DistanceUnavailable(f"Could not compute route: {element.get('status')}")

    try:
        meters = element["distance"]["value"]
        seconds = element["duration"]["value"]
    except (KeyError, TypeError) as e:
        raise DistanceUnavailable("Malformed Distance Matrix element", cause=e)

    return DistanceResult(
        distance_km=round(meters / 1000, 2),
        travel_time_hours=round(seconds / 3600, 1),
        distance_text=element["distance"].get("text"),
        duration_text=element["duration"].get("text"),
    )


class GoogleDistanceMatrixProvider:
    """Road distance and duration from the Google Distance Matrix API."""

    def __init__(self, api_key: str, region: str = "IN", url: str = DISTANCE_MATRIX_URL):
        if not api_key:
            raise ValueError("GOOGLE_MAPS_API_KEY is required for the Distance Matrix provider")
        self.api_key = api_key
        self.region = region
        self.url = url

    async def get_distance(self, origin: Coordinates, destination: Coordinates) -> DistanceResult:
        params = {
            "origins": origin.as_param(),
            "destinations": destination.as_param(),
            "units": "metric",
            "region": self.region,
            "key": self.api_key,
        }
        logger.info("Requesting road distance %s -> %s", params["origins"], params["destinations"])
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(self.url, params=params) as response:
                    if response.status != 200:
                        raise DistanceUnavailable(f"Distance Matrix HTTP {response.status}")
                    data = await response.json()
        except aiohttp.ClientError as e:
            raise DistanceUnavailable(f"Distance Matrix request error: {e}", cause=e)
        except ValueError as e:
            raise DistanceUnavailable("Distance Matrix returned invalid JSON", cause=e)

        result = parse_distance_matrix(data)
        logger.info("Road distance %.2f km, %.1f h", result.distance_km, result.travel_time_hours)
        return result
