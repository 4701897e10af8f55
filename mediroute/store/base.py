from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from mediroute.domain.models import AmbulanceSnapshot, SignalActivation, SignalUpdate, TrafficSignal

class StoreError(Exception):
    """Raised when a read or write against the backing store fails"""

class NotFoundError(StoreError):
    pass

class SignalStore(ABC):
    # Signals

    @abstractmethod
    def list_signals(self) -> List[TrafficSignal]:
        pass

    @abstractmethod
    def get_signal(self, signal_id: str) -> TrafficSignal:
        pass

    @abstractmethod
    def add_signal(self, signal: TrafficSignal) -> TrafficSignal:
        pass

    @abstractmethod
    def update_signal(self, signal_id: str, update: SignalUpdate) -> TrafficSignal:
        pass

    @abstractmethod
    def reset_signals(self, timestamp: datetime) -> int:
        pass

    # Activation log

    @abstractmethod
    def record_activation(self, activation: SignalActivation) -> SignalActivation:
        pass

    @abstractmethod
    def list_activations(
        self,
        signal_id: Optional[str] = None,
        ambulance_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[SignalActivation]:
        pass

    # Ambulances

    @abstractmethod
    def list_ambulances(self) -> List[AmbulanceSnapshot]:
        pass

    @abstractmethod
    def get_ambulance(self, ambulance_id: str) -> AmbulanceSnapshot:
        pass

    @abstractmethod
    def save_ambulance(self, ambulance: AmbulanceSnapshot) -> AmbulanceSnapshot:
        pass
