from abc import ABC, abstractmethod
from typing import Any
from mediroute.domain.models import AmbulanceSnapshot, EmergencyStatus

class Command(ABC):
    @abstractmethod
    def execute(self, kernel: Any):
        pass

class UpdateLocationCommand(Command):
    def __init__(self, ambulance_id: str, lat: float, lng: float, heading: float = 0.0, speed: float = 0.0):
        self.ambulance_id = ambulance_id
        self.lat = lat
        self.lng = lng
        self.heading = heading
        self.speed = speed

    def execute(self, kernel: Any):
        return kernel.update_location(self.ambulance_id, self.lat, self.lng, self.heading, self.speed)

class SetEmergencyStatusCommand(Command):
    def __init__(self, ambulance_id: str, status: EmergencyStatus):
        self.ambulance_id = ambulance_id
        self.status = status

    def execute(self, kernel: Any):
        return kernel.set_emergency_status(self.ambulance_id, self.status)

class ScanSignalsCommand(Command):
    """Scan trigger carrying the snapshot it was produced from"""

    def __init__(self, ambulance: AmbulanceSnapshot, source: str = "push"):
        self.ambulance = ambulance
        self.source = source

    def execute(self, kernel: Any):
        return kernel.scan(self.ambulance, source=self.source)

class ResetSignalsCommand(Command):
    def execute(self, kernel: Any):
        return kernel.reset_signals()
