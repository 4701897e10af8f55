import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence, Tuple
from mediroute.domain.models import (
    AmbulanceSnapshot, EmergencyStatus, ScanReport, ServiceStatus, TrafficSignal
)
from mediroute.domain.state import DispatchState
from mediroute.domain.heading import classify_heading
from mediroute.domain import config
from mediroute.application.commands import Command, ScanSignalsCommand
from mediroute.arbitration.priority_scanner import PriorityScanner
from mediroute.arbitration.signal_resetter import SignalResetter
from mediroute.kernel.command_queue import CommandQueue
from mediroute.store.base import NotFoundError, SignalStore
from mediroute.store.memory import InMemoryStore
from mediroute.systems.signal_system import SignalSystem

logger = logging.getLogger(__name__)

class DispatchKernel:
    """
    Owns the trigger queue and applies scans in order.

    Location pushes and the polling fallback both enqueue ScanSignalsCommand.
    run_tick drains the queue serially, so scans for one ambulance never
    overlap, and a trigger built from a snapshot older than the last one
    applied for that ambulance is dropped.
    """

    def __init__(self, store: Optional[SignalStore] = None, signal_system: Optional[SignalSystem] = None):
        self.store = store or InMemoryStore()
        self.state = DispatchState()
        self.command_queue = CommandQueue()
        self.scanner = PriorityScanner(self.store, signal_system)
        self.resetter = SignalResetter(self.store)
        self.initialized = False
        self._tick_lock = threading.Lock()
        # Serializes read-modify-write of ambulance records across request threads
        self._ambulance_lock = threading.Lock()

    def initialize(self, seed_signals: Optional[Sequence[Tuple[str, float, float]]] = None):
        if seed_signals is None:
            seed_signals = config.SEED_SIGNALS

        if not self.store.list_signals():
            for i, (name, lat, lng) in enumerate(seed_signals, start=1):
                self.store.add_signal(TrafficSignal(
                    id=f"SIG-{100 + i}",
                    signalName=name,
                    locationLat=lat,
                    locationLng=lng,
                    lastUpdated=datetime.now(timezone.utc)
                ))
            logger.info("Seeded %d traffic signals", len(seed_signals))

        self.initialized = True
        logger.info("Dispatch kernel initialized")

    def queue_command(self, command: Command):
        self.command_queue.add(command)

    def run_tick(self) -> List[Any]:
        if not self.initialized:
            self.initialize()

        results = []
        with self._tick_lock:
            commands = self.command_queue.pop_all()
            while commands:
                cmd = commands.popleft()
                try:
                    results.append(cmd.execute(self))
                except Exception:
                    # One bad trigger must not starve the rest of the queue
                    logger.exception("Command %s failed", type(cmd).__name__)
            self.state.tick_id += 1
        return results

    # Producers

    def update_location(
        self,
        ambulance_id: str,
        lat: float,
        lng: float,
        heading: float = 0.0,
        speed: float = 0.0
    ) -> AmbulanceSnapshot:
        with self._ambulance_lock:
            try:
                ambulance = self.store.get_ambulance(ambulance_id)
            except NotFoundError:
                ambulance = AmbulanceSnapshot(id=ambulance_id, vehicleNumber=f"AMB-{ambulance_id[:6].upper()}")
                logger.info("Registered new ambulance %s", ambulance_id)

            updated = ambulance.model_copy(update={
                "currentLat": lat,
                "currentLng": lng,
                "headingDegrees": heading,
                "speedKmh": speed,
                "routeDirection": classify_heading(heading),
                "lastUpdated": self._next_stamp(ambulance),
            })
            saved = self.store.save_ambulance(updated)
        self.queue_command(ScanSignalsCommand(saved, source="push"))
        return saved

    def set_emergency_status(self, ambulance_id: str, status: EmergencyStatus) -> AmbulanceSnapshot:
        with self._ambulance_lock:
            ambulance = self.store.get_ambulance(ambulance_id)
            updated = ambulance.model_copy(update={
                "emergencyStatus": status,
                "lastUpdated": self._next_stamp(ambulance),
            })
            saved = self.store.save_ambulance(updated)
        logger.info("Ambulance %s emergency status -> %s", ambulance_id, status.value)
        self.queue_command(ScanSignalsCommand(saved, source="push"))
        return saved

    def set_destination(self, ambulance_id: str, lat: float, lng: float, name: str) -> AmbulanceSnapshot:
        with self._ambulance_lock:
            ambulance = self.store.get_ambulance(ambulance_id)
            updated = ambulance.model_copy(update={
                "destinationLat": lat,
                "destinationLng": lng,
                "destinationName": name,
                "lastUpdated": self._next_stamp(ambulance),
            })
            return self.store.save_ambulance(updated)

    def poll(self) -> int:
        """Fallback producer: re-trigger every ambulance with an active emergency"""
        queued = 0
        for ambulance in self.store.list_ambulances():
            if ambulance.is_emergency_active:
                self.queue_command(ScanSignalsCommand(ambulance, source="poll"))
                queued += 1
        self.state.last_poll = datetime.now(timezone.utc)
        return queued

    # Consumers

    def scan(self, ambulance: AmbulanceSnapshot, source: str = "push") -> Optional[ScanReport]:
        applied = self.state.last_applied.get(ambulance.id)
        if applied is not None and ambulance.lastUpdated is not None and ambulance.lastUpdated < applied:
            self.state.scans_discarded += 1
            logger.debug("Discarding stale %s trigger for %s", source, ambulance.id)
            return None

        report = self.scanner.scan(ambulance, self.store.list_signals())
        if ambulance.lastUpdated is not None:
            self.state.last_applied[ambulance.id] = ambulance.lastUpdated
        self.state.scans_run += 1
        return report

    def reset_signals(self) -> int:
        return self.resetter.reset_all()

    def get_status(self) -> ServiceStatus:
        ambulances = self.store.list_ambulances()
        return ServiceStatus(
            status="operational",
            signals=len(self.store.list_signals()),
            ambulances=len(ambulances),
            activeEmergencies=sorted(a.id for a in ambulances if a.is_emergency_active)
        )

    def _next_stamp(self, ambulance: AmbulanceSnapshot) -> datetime:
        # Strictly increasing per ambulance so trigger recency is never ambiguous
        now = datetime.now(timezone.utc)
        if ambulance.lastUpdated is not None and now <= ambulance.lastUpdated:
            now = ambulance.lastUpdated + timedelta(microseconds=1)
        return now
