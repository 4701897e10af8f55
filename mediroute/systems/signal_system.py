from typing import Optional
from mediroute.domain.models import (
    AmbulanceSnapshot, LightState, RouteDirection, SignalDirections, SignalResolution,
    SignalStatus, TrafficSignal
)
from mediroute.domain.heading import classify_heading
from mediroute.domain import config

def default_directions() -> SignalDirections:
    """Normal traffic pattern: N-S axis green, E-W axis red"""
    return SignalDirections(
        NS=LightState.GREEN,
        SN=LightState.GREEN,
        EW=LightState.RED,
        WE=LightState.RED
    )

class SignalSystem:
    def __init__(self, activate_distance: Optional[float] = None, prepare_distance: Optional[float] = None):
        self.activate_distance = config.ACTIVATE_DISTANCE if activate_distance is None else activate_distance
        self.prepare_distance = config.PREPARE_DISTANCE if prepare_distance is None else prepare_distance

    def resolve(self, signal: TrafficSignal, ambulance: AmbulanceSnapshot, distance_meters: float) -> SignalResolution:
        status = self._status_for(ambulance, distance_meters)
        if status == SignalStatus.NORMAL:
            return SignalResolution(status=status, directions=default_directions(), priorityDirection=None)

        route_direction = ambulance.routeDirection or classify_heading(ambulance.headingDegrees)
        return SignalResolution(
            status=status,
            directions=self._priority_directions(route_direction, status),
            priorityDirection=route_direction
        )

    def _status_for(self, ambulance: AmbulanceSnapshot, distance_meters: float) -> SignalStatus:
        # Thresholds are inclusive
        if not ambulance.is_emergency_active:
            return SignalStatus.NORMAL
        if distance_meters <= self.activate_distance:
            return SignalStatus.PRIORITY
        if distance_meters <= self.prepare_distance:
            return SignalStatus.PREPARE
        return SignalStatus.NORMAL

    def _priority_directions(self, route_direction: RouteDirection, status: SignalStatus) -> SignalDirections:
        granted = LightState.GREEN if status == SignalStatus.PRIORITY else LightState.BLINK_GREEN
        lights = {
            "NS": LightState.RED,
            "SN": LightState.RED,
            "EW": LightState.RED,
            "WE": LightState.RED,
        }
        # N_S -> NS, S_N -> SN, ...
        lights[route_direction.value.replace("_", "")] = granted
        return SignalDirections(**lights)
