import itertools
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional
from mediroute.domain.models import (
    AmbulanceSnapshot, LightState, SignalActivation, SignalStatus, SignalUpdate, TrafficSignal
)
from mediroute.store.base import NotFoundError, SignalStore

class InMemoryStore(SignalStore):
    """Process-local store; every read returns a copy"""

    def __init__(self):
        self._lock = threading.RLock()
        self._signals: Dict[str, TrafficSignal] = {}
        self._ambulances: Dict[str, AmbulanceSnapshot] = {}
        self._activations: List[SignalActivation] = []
        self._activation_ids = itertools.count(1)

    def list_signals(self) -> List[TrafficSignal]:
        with self._lock:
            return [s.model_copy() for s in sorted(self._signals.values(), key=lambda s: (s.signalName, s.id))]

    def get_signal(self, signal_id: str) -> TrafficSignal:
        with self._lock:
            signal = self._signals.get(signal_id)
            if signal is None:
                raise NotFoundError(f"Signal {signal_id} not found")
            return signal.model_copy()

    def add_signal(self, signal: TrafficSignal) -> TrafficSignal:
        with self._lock:
            self._signals[signal.id] = signal.model_copy()
            return signal.model_copy()

    def update_signal(self, signal_id: str, update: SignalUpdate) -> TrafficSignal:
        with self._lock:
            signal = self._signals.get(signal_id)
            if signal is None:
                raise NotFoundError(f"Signal {signal_id} not found")
            updated = signal.model_copy(update=update.model_dump())
            self._signals[signal_id] = updated
            return updated.model_copy()

    def reset_signals(self, timestamp: datetime) -> int:
        with self._lock:
            for signal_id, signal in self._signals.items():
                self._signals[signal_id] = signal.model_copy(update={
                    "currentStatus": SignalStatus.NORMAL,
                    "directionNS": LightState.GREEN,
                    "directionSN": LightState.GREEN,
                    "directionEW": LightState.RED,
                    "directionWE": LightState.RED,
                    "priorityDirection": None,
                    "activatedBy": None,
                    "lastUpdated": timestamp,
                })
            return len(self._signals)

    def record_activation(self, activation: SignalActivation) -> SignalActivation:
        with self._lock:
            stored = activation.model_copy(update={
                "id": activation.id or str(next(self._activation_ids)),
                "activatedAt": activation.activatedAt or datetime.now(timezone.utc),
            })
            self._activations.append(stored)
            return stored.model_copy()

    def list_activations(
        self,
        signal_id: Optional[str] = None,
        ambulance_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[SignalActivation]:
        with self._lock:
            rows = [
                a for a in reversed(self._activations)
                if (signal_id is None or a.signalId == signal_id)
                and (ambulance_id is None or a.ambulanceId == ambulance_id)
            ]
            if limit is not None:
                rows = rows[:limit]
            return [a.model_copy() for a in rows]

    def list_ambulances(self) -> List[AmbulanceSnapshot]:
        with self._lock:
            return [a.model_copy() for a in self._ambulances.values()]

    def get_ambulance(self, ambulance_id: str) -> AmbulanceSnapshot:
        with self._lock:
            ambulance = self._ambulances.get(ambulance_id)
            if ambulance is None:
                raise NotFoundError(f"Ambulance {ambulance_id} not found")
            return ambulance.model_copy()

    def save_ambulance(self, ambulance: AmbulanceSnapshot) -> AmbulanceSnapshot:
        with self._lock:
            self._ambulances[ambulance.id] = ambulance.model_copy()
            return ambulance.model_copy()
