from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

class EmergencyStatus(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    RESPONDING = "responding"

class SignalStatus(str, Enum):
    NORMAL = "normal"
    PREPARE = "prepare"
    PRIORITY = "priority"

class LightState(str, Enum):
    GREEN = "GREEN"
    RED = "RED"
    BLINK_GREEN = "BLINK_GREEN"

class RouteDirection(str, Enum):
    N_S = "N_S"  # North -> South
    S_N = "S_N"  # South -> North
    E_W = "E_W"  # East -> West
    W_E = "W_E"  # West -> East

class AmbulanceSnapshot(BaseModel):
    id: str
    vehicleNumber: Optional[str] = None
    currentLat: Optional[float] = None
    currentLng: Optional[float] = None
    headingDegrees: float = 0.0
    speedKmh: float = 0.0
    emergencyStatus: EmergencyStatus = EmergencyStatus.INACTIVE
    routeDirection: Optional[RouteDirection] = None
    destinationLat: Optional[float] = None
    destinationLng: Optional[float] = None
    destinationName: Optional[str] = None
    lastUpdated: Optional[datetime] = None

    @property
    def is_emergency_active(self) -> bool:
        return self.emergencyStatus in (EmergencyStatus.ACTIVE, EmergencyStatus.RESPONDING)

class SignalDirections(BaseModel):
    NS: LightState
    SN: LightState
    EW: LightState
    WE: LightState

class TrafficSignal(BaseModel):
    id: str
    signalName: str = ""
    locationLat: Optional[float] = None
    locationLng: Optional[float] = None
    currentStatus: SignalStatus = SignalStatus.NORMAL
    directionNS: LightState = LightState.GREEN
    directionSN: LightState = LightState.GREEN
    directionEW: LightState = LightState.RED
    directionWE: LightState = LightState.RED
    priorityDirection: Optional[RouteDirection] = None
    activatedBy: Optional[str] = None
    lastUpdated: Optional[datetime] = None

class SignalActivation(BaseModel):
    id: Optional[str] = None
    signalId: str
    ambulanceId: str
    activationType: SignalStatus
    distanceMeters: float
    activatedAt: Optional[datetime] = None

class SignalResolution(BaseModel):
    status: SignalStatus
    directions: SignalDirections
    priorityDirection: Optional[RouteDirection] = None

class SignalUpdate(BaseModel):
    """Write payload for one signal after a status recomputation"""
    currentStatus: SignalStatus
    directionNS: LightState
    directionSN: LightState
    directionEW: LightState
    directionWE: LightState
    priorityDirection: Optional[RouteDirection] = None
    activatedBy: Optional[str] = None
    lastUpdated: datetime

class ScanReport(BaseModel):
    ambulanceId: str
    skippedInactive: bool = False
    updated: int = 0
    activated: int = 0
    skipped: int = 0
    failed: int = 0
    statuses: Dict[str, SignalStatus] = {}

# API/Request Models

class LocationUpdate(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    heading: float = 0.0
    speed: float = Field(default=0.0, ge=0, description="Speed in km/h")

class EmergencyToggle(BaseModel):
    status: EmergencyStatus

class DestinationUpdate(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    name: str

class NearbySignal(BaseModel):
    signal: TrafficSignal
    distanceMeters: float

class ResetResult(BaseModel):
    signalsReset: int

class MediBotRequest(BaseModel):
    question: str = ""

class MediBotReply(BaseModel):
    reply: str

class ServiceStatus(BaseModel):
    status: str
    signals: int
    ambulances: int
    activeEmergencies: List[str]
