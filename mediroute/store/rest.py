"""
PostgREST-backed store

Talks to the hosted Postgres REST interface (Supabase style: /rest/v1/<table>)
over requests. Column names are snake_case on the wire and mapped to the
camelCase model fields here.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Type
import requests
from pydantic import BaseModel, ValidationError
from mediroute.domain.models import AmbulanceSnapshot, SignalActivation, SignalUpdate, TrafficSignal
from mediroute.domain import config
from mediroute.store.base import NotFoundError, SignalStore, StoreError

logger = logging.getLogger(__name__)

SIGNAL_COLUMNS = {
    "id": "id",
    "signalName": "signal_name",
    "locationLat": "location_lat",
    "locationLng": "location_lng",
    "currentStatus": "current_status",
    "directionNS": "direction_ns",
    "directionSN": "direction_sn",
    "directionEW": "direction_ew",
    "directionWE": "direction_we",
    "priorityDirection": "priority_direction",
    "activatedBy": "activated_by",
    "lastUpdated": "last_updated",
}

ACTIVATION_COLUMNS = {
    "id": "id",
    "signalId": "signal_id",
    "ambulanceId": "ambulance_id",
    "activationType": "activation_type",
    "distanceMeters": "distance_meters",
    "activatedAt": "activated_at",
}

AMBULANCE_COLUMNS = {
    "id": "id",
    "vehicleNumber": "vehicle_number",
    "currentLat": "current_lat",
    "currentLng": "current_lng",
    "headingDegrees": "heading",
    "speedKmh": "speed",
    "emergencyStatus": "emergency_status",
    "routeDirection": "route_direction",
    "destinationLat": "destination_lat",
    "destinationLng": "destination_lng",
    "destinationName": "destination_name",
    "lastUpdated": "last_updated",
}

# Matches every row; PostgREST refuses unfiltered bulk updates
ALL_ROWS_FILTER = "neq.00000000-0000-0000-0000-000000000000"

def to_row(model: BaseModel, columns: Dict[str, str]) -> Dict[str, Any]:
    data = model.model_dump(mode="json", exclude_none=False)
    return {columns[k]: v for k, v in data.items() if k in columns}

def from_row(row: Dict[str, Any], columns: Dict[str, str], model_cls: Type[BaseModel]) -> Any:
    if not isinstance(row, dict):
        raise StoreError(f"Expected a {model_cls.__name__} row, got {type(row).__name__}")
    data = {field: row[column] for field, column in columns.items() if row.get(column) is not None}
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise StoreError(f"Malformed {model_cls.__name__} row: {e}") from e

class PostgrestStore(SignalStore):
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = (base_url or config.SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.SUPABASE_KEY
        self.timeout = timeout or config.STORE_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        })

    def _request(self, method: str, table: str, params: Optional[Dict[str, str]] = None,
                 json: Any = None, headers: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            response = self.session.request(
                method, url, params=params, json=json, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise StoreError(f"{method} {table} failed: {e}") from e

        if not response.content:
            return []
        try:
            body = response.json()
        except ValueError as e:
            raise StoreError(f"{method} {table} returned invalid JSON") from e
        if not isinstance(body, list):
            raise StoreError(f"{method} {table} returned {type(body).__name__}, expected a list of rows")
        return body

    def _one(self, rows: List[Dict[str, Any]], what: str) -> Dict[str, Any]:
        if not rows:
            raise NotFoundError(f"{what} not found")
        return rows[0]

    # Signals

    def list_signals(self) -> List[TrafficSignal]:
        rows = self._request("GET", "traffic_signals", params={"select": "*", "order": "signal_name"})
        return [from_row(r, SIGNAL_COLUMNS, TrafficSignal) for r in rows]

    def get_signal(self, signal_id: str) -> TrafficSignal:
        rows = self._request("GET", "traffic_signals", params={"select": "*", "id": f"eq.{signal_id}"})
        return from_row(self._one(rows, f"Signal {signal_id}"), SIGNAL_COLUMNS, TrafficSignal)

    def add_signal(self, signal: TrafficSignal) -> TrafficSignal:
        row = {k: v for k, v in to_row(signal, SIGNAL_COLUMNS).items() if v is not None}
        rows = self._request("POST", "traffic_signals", json=row)
        return from_row(self._one(rows, "Inserted signal"), SIGNAL_COLUMNS, TrafficSignal)

    def update_signal(self, signal_id: str, update: SignalUpdate) -> TrafficSignal:
        rows = self._request(
            "PATCH", "traffic_signals",
            params={"id": f"eq.{signal_id}"},
            json=to_row(update, SIGNAL_COLUMNS)
        )
        return from_row(self._one(rows, f"Signal {signal_id}"), SIGNAL_COLUMNS, TrafficSignal)

    def reset_signals(self, timestamp: datetime) -> int:
        rows = self._request(
            "PATCH", "traffic_signals",
            params={"id": ALL_ROWS_FILTER},
            json={
                "current_status": "normal",
                "direction_ns": "GREEN",
                "direction_sn": "GREEN",
                "direction_ew": "RED",
                "direction_we": "RED",
                "priority_direction": None,
                "activated_by": None,
                "last_updated": timestamp.isoformat(),
            }
        )
        return len(rows)

    # Activation log

    def record_activation(self, activation: SignalActivation) -> SignalActivation:
        row = {k: v for k, v in to_row(activation, ACTIVATION_COLUMNS).items() if v is not None}
        rows = self._request("POST", "signal_activations", json=row)
        return from_row(self._one(rows, "Inserted activation"), ACTIVATION_COLUMNS, SignalActivation)

    def list_activations(
        self,
        signal_id: Optional[str] = None,
        ambulance_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[SignalActivation]:
        params = {"select": "*", "order": "activated_at.desc"}
        if signal_id is not None:
            params["signal_id"] = f"eq.{signal_id}"
        if ambulance_id is not None:
            params["ambulance_id"] = f"eq.{ambulance_id}"
        if limit is not None:
            params["limit"] = str(limit)
        rows = self._request("GET", "signal_activations", params=params)
        return [from_row(r, ACTIVATION_COLUMNS, SignalActivation) for r in rows]

    # Ambulances

    def list_ambulances(self) -> List[AmbulanceSnapshot]:
        rows = self._request("GET", "ambulances", params={"select": "*", "order": "last_updated.desc"})
        return [from_row(r, AMBULANCE_COLUMNS, AmbulanceSnapshot) for r in rows]

    def get_ambulance(self, ambulance_id: str) -> AmbulanceSnapshot:
        rows = self._request("GET", "ambulances", params={"select": "*", "id": f"eq.{ambulance_id}"})
        return from_row(self._one(rows, f"Ambulance {ambulance_id}"), AMBULANCE_COLUMNS, AmbulanceSnapshot)

    def save_ambulance(self, ambulance: AmbulanceSnapshot) -> AmbulanceSnapshot:
        rows = self._request(
            "POST", "ambulances",
            json=to_row(ambulance, AMBULANCE_COLUMNS),
            headers={"Prefer": "return=representation,resolution=merge-duplicates"}
        )
        return from_row(self._one(rows, f"Ambulance {ambulance.id}"), AMBULANCE_COLUMNS, AmbulanceSnapshot)
