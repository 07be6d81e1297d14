"""
Real travel time between service addresses via the Google Distance Matrix API.

A route is the worker's ordered stops for a day, optionally preceded by the worker's home.
The home -> first stop segment is reported but not counted in the totals.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

import httpx

from sad.config import settings

logger = logging.getLogger(__name__)

DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
TRAVEL_MODES = ("DRIVING", "WALKING", "TRANSIT")
COUNTRY = "España"


@dataclass
class AddressInfo:
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None


@dataclass
class TravelTimeResult:
    duration: int = 0  # seconds
    distance: int = 0  # meters
    success: bool = False
    error_message: str | None = None


@dataclass
class RouteSegment:
    from_index: int
    to_index: int
    duration: int
    distance: int
    success: bool
    error_message: str | None = None


@dataclass
class RouteTravelTime:
    segments: list[RouteSegment] = field(default_factory=list)
    total_duration: int = 0
    total_distance: int = 0
    successful_segments: int = 0

    @property
    def total_segments(self) -> int:
        return len(self.segments)

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["total_segments"] = self.total_segments
        out["total_duration_text"] = format_duration(self.total_duration)
        out["total_distance_text"] = format_distance(self.total_distance)
        return out


def default_location() -> str:
    return f"{settings.default_city}, {COUNTRY}"


def build_full_address(info: AddressInfo) -> str:
    """Join address, postal code and city; fall back to the default city; ensure the country is present."""
    parts = [p.strip() for p in (info.address, info.postal_code, info.city) if p and p.strip()]
    if not parts:
        return default_location()
    full = ", ".join(parts)
    if COUNTRY.lower() not in full.lower():
        return f"{full}, {COUNTRY}"
    return full


def _distance_matrix(origin: str, destination: str, mode: str, *, transport: httpx.BaseTransport | None = None) -> TravelTimeResult:
    api_key = settings.google_maps_api_key
    if not api_key:
        return TravelTimeResult(error_message="GOOGLE_MAPS_API_KEY no configurada")
    params = {
        "origins": origin,
        "destinations": destination,
        "mode": mode.lower(),
        "language": "es",
        "key": api_key,
    }
    try:
        with httpx.Client(timeout=10.0, transport=transport) as c:
            r = c.get(DISTANCE_MATRIX_URL, params=params)
        r.raise_for_status()
        body = r.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Distance Matrix request failed: %s", e)
        return TravelTimeResult(error_message=f"Error al consultar Google Maps: {e}")
    if body.get("status") != "OK":
        return TravelTimeResult(error_message=body.get("error_message") or f"Google Maps status {body.get('status')}")
    try:
        element = body["rows"][0]["elements"][0]
    except (KeyError, IndexError):
        return TravelTimeResult(error_message="Respuesta de Google Maps sin resultados")
    if element.get("status") != "OK":
        return TravelTimeResult(error_message=f"Ruta no disponible ({element.get('status')})")
    duration = (element.get("duration") or {}).get("value")
    distance = (element.get("distance") or {}).get("value")
    if not duration or not distance:
        return TravelTimeResult(error_message="Error desconocido al calcular tiempo de viaje")
    return TravelTimeResult(duration=int(duration), distance=int(distance), success=True)


def calculate_travel_time(
    from_address: AddressInfo,
    to_address: AddressInfo,
    mode: str = "DRIVING",
    *,
    transport: httpx.BaseTransport | None = None,
) -> TravelTimeResult:
    origin = build_full_address(from_address)
    destination = build_full_address(to_address)
    if origin == default_location():
        return TravelTimeResult(error_message="Dirección de origen no válida o incompleta")
    if destination == default_location():
        return TravelTimeResult(error_message="Dirección de destino no válida o incompleta")
    return _distance_matrix(origin, destination, mode, transport=transport)


def calculate_route_travel_time(
    stops: list[AddressInfo],
    worker_start: AddressInfo | None = None,
    mode: str = "DRIVING",
    *,
    transport: httpx.BaseTransport | None = None,
) -> RouteTravelTime:
    """One segment per consecutive pair of stops; failed segments are reported and not summed."""
    all_stops = [worker_start, *stops] if worker_start else list(stops)
    route = RouteTravelTime()
    for i in range(len(all_stops) - 1):
        result = calculate_travel_time(all_stops[i], all_stops[i + 1], mode, transport=transport)
        route.segments.append(
            RouteSegment(
                from_index=i,
                to_index=i + 1,
                duration=result.duration,
                distance=result.distance,
                success=result.success,
                error_message=result.error_message,
            )
        )
        if not result.success:
            logger.info("Segment %s failed: %s", i + 1, result.error_message)
            continue
        route.successful_segments += 1
        if worker_start is not None and i == 0:
            continue
        route.total_duration += result.duration
        route.total_distance += result.distance
    return route


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{round(seconds)}s"
    minutes = int(seconds // 60)
    remaining_seconds = seconds % 60
    if minutes < 60:
        return f"{minutes}m {round(remaining_seconds)}s" if remaining_seconds > 0 else f"{minutes}m"
    hours = minutes // 60
    remaining_minutes = minutes % 60
    return f"{hours}h {remaining_minutes}m" if remaining_minutes > 0 else f"{hours}h"


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"
