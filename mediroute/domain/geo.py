import math
from typing import Iterable, List, Optional, Tuple
from mediroute.domain.models import AmbulanceSnapshot, TrafficSignal
from mediroute.domain import config

def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine great-circle distance in meters; NaN for non-finite input"""
    if not all(math.isfinite(v) for v in (lat1, lng1, lat2, lng2)):
        return math.nan

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Clamp against rounding for antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * config.EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))

def initial_bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Compass bearing in degrees from point 1 towards point 2"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lng2 - lng1)
    x = math.sin(d_lambda) * math.cos(phi2)
    y = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return (math.degrees(math.atan2(x, y)) + 360.0) % 360.0

def destination_point(lat: float, lng: float, bearing_degrees: float, distance_m: float) -> Tuple[float, float]:
    """Point reached travelling distance_m along a great circle from (lat, lng)"""
    delta = distance_m / config.EARTH_RADIUS_M
    theta = math.radians(bearing_degrees)
    phi1 = math.radians(lat)
    lambda1 = math.radians(lng)

    phi2 = math.asin(math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2)
    )
    # Normalize longitude to [-180, 180)
    lng2 = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return math.degrees(phi2), lng2

def has_position(lat: Optional[float], lng: Optional[float]) -> bool:
    return lat is not None and lng is not None and math.isfinite(lat) and math.isfinite(lng)

def nearest_signals(
    ambulance: AmbulanceSnapshot,
    signals: Iterable[TrafficSignal],
    limit: Optional[int] = None
) -> List[Tuple[TrafficSignal, float]]:
    if not has_position(ambulance.currentLat, ambulance.currentLng):
        return []

    ranked = []
    for signal in signals:
        if not has_position(signal.locationLat, signal.locationLng):
            continue
        d = distance_meters(ambulance.currentLat, ambulance.currentLng, signal.locationLat, signal.locationLng)
        ranked.append((signal, d))

    ranked.sort(key=lambda pair: (pair[1], pair[0].id))
    if limit is not None:
        ranked = ranked[:limit]
    return ranked
