import logging
from datetime import datetime, timezone
from typing import Iterable, Optional
from mediroute.domain.models import (
    AmbulanceSnapshot, ScanReport, SignalActivation, SignalStatus, SignalUpdate, TrafficSignal
)
from mediroute.domain.geo import distance_meters, has_position
from mediroute.store.base import SignalStore, StoreError
from mediroute.systems.signal_system import SignalSystem

logger = logging.getLogger(__name__)

class PriorityScanner:
    """
    Evaluates every signal against one ambulance snapshot and persists the result.

    Each signal is handled independently: a missing position or a failed write
    only affects that signal. Activation rows are edge-triggered, written when a
    signal moves into prepare or priority from a different status.
    """

    def __init__(self, store: SignalStore, signal_system: Optional[SignalSystem] = None):
        self.store = store
        self.signal_system = signal_system or SignalSystem()

    def scan(self, ambulance: AmbulanceSnapshot, signals: Iterable[TrafficSignal]) -> ScanReport:
        report = ScanReport(ambulanceId=ambulance.id)

        if not ambulance.is_emergency_active:
            report.skippedInactive = True
            return report

        if not has_position(ambulance.currentLat, ambulance.currentLng):
            logger.warning("Ambulance %s has no position fix, skipping scan", ambulance.id)
            report.skipped = len(list(signals))
            return report

        for signal in signals:
            self._scan_signal(ambulance, signal, report)

        logger.info(
            "Scan for %s: updated=%d activated=%d skipped=%d failed=%d",
            ambulance.id, report.updated, report.activated, report.skipped, report.failed
        )
        return report

    def _scan_signal(self, ambulance: AmbulanceSnapshot, signal: TrafficSignal, report: ScanReport):
        if not has_position(signal.locationLat, signal.locationLng):
            logger.warning("Signal %s has no valid location, skipping", signal.id)
            report.skipped += 1
            return

        distance = distance_meters(
            ambulance.currentLat, ambulance.currentLng,
            signal.locationLat, signal.locationLng
        )
        resolution = self.signal_system.resolve(signal, ambulance, distance)
        is_priority_state = resolution.status != SignalStatus.NORMAL
        now = datetime.now(timezone.utc)

        update = SignalUpdate(
            currentStatus=resolution.status,
            directionNS=resolution.directions.NS,
            directionSN=resolution.directions.SN,
            directionEW=resolution.directions.EW,
            directionWE=resolution.directions.WE,
            priorityDirection=resolution.priorityDirection,
            activatedBy=ambulance.id if is_priority_state else None,
            lastUpdated=now
        )

        try:
            self.store.update_signal(signal.id, update)
        except StoreError:
            logger.exception("Failed to update signal %s", signal.id)
            report.failed += 1
            return

        report.updated += 1
        report.statuses[signal.id] = resolution.status

        if is_priority_state and resolution.status != signal.currentStatus:
            activation = SignalActivation(
                signalId=signal.id,
                ambulanceId=ambulance.id,
                activationType=resolution.status,
                distanceMeters=distance,
                activatedAt=now
            )
            try:
                self.store.record_activation(activation)
            except StoreError:
                logger.exception("Failed to log %s activation for signal %s", resolution.status.value, signal.id)
                report.failed += 1
                return

            report.activated += 1
            logger.info(
                "Signal %s -> %s for ambulance %s at %.0fm",
                signal.id, resolution.status.value, ambulance.id, distance
            )
