import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from mediroute.kernel.dispatch_kernel import DispatchKernel
from mediroute.domain.models import (
    AmbulanceSnapshot, DestinationUpdate, EmergencyToggle, LocationUpdate, MediBotReply,
    MediBotRequest, NearbySignal, ResetResult, ServiceStatus, SignalActivation, TrafficSignal
)
from mediroute.domain.geo import nearest_signals
from mediroute.domain import config
from mediroute.services.medibot import MediBotClient
from mediroute.store.base import NotFoundError, SignalStore, StoreError
from mediroute.store.memory import InMemoryStore
from mediroute.store.rest import PostgrestStore

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def build_store() -> SignalStore:
    if config.STORE_BACKEND == "postgrest":
        logger.info("Using PostgREST store at %s", config.SUPABASE_URL)
        return PostgrestStore()
    return InMemoryStore()

async def run_dispatch_loop(kernel: DispatchKernel):
    """Drains the trigger queue every TICK_INTERVAL and polls every POLL_INTERVAL"""
    last_poll = 0.0

    while True:
        start_time = time.monotonic()
        # Poll and drain fail independently; the next pass re-evaluates everything
        if start_time - last_poll >= config.POLL_INTERVAL:
            last_poll = start_time
            try:
                await asyncio.to_thread(kernel.poll)
            except Exception:
                logger.exception("Polling fallback failed")
        try:
            await asyncio.to_thread(kernel.run_tick)
        except Exception:
            logger.exception("Dispatch tick failed")

        elapsed = time.monotonic() - start_time
        await asyncio.sleep(max(0.0, config.TICK_INTERVAL - elapsed))

def create_app(
    kernel: Optional[DispatchKernel] = None,
    medibot: Optional[MediBotClient] = None,
    run_loop: bool = True
) -> FastAPI:
    kernel = kernel or DispatchKernel(build_store())
    medibot = medibot or MediBotClient()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: seed signals and start the trigger loop
        await asyncio.to_thread(kernel.initialize)
        loop_task = asyncio.create_task(run_dispatch_loop(kernel)) if run_loop else None
        yield
        # Shutdown
        if loop_task:
            loop_task.cancel()

    app = FastAPI(title="MediRoute Dispatch", version="1.0.0", lifespan=lifespan)
    app.state.kernel = kernel

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=ServiceStatus)
    def read_root():
        try:
            return kernel.get_status()
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    # Signals

    @app.get("/api/signals", response_model=List[TrafficSignal])
    def list_signals():
        """Returns every traffic signal with its current light pattern"""
        try:
            return kernel.store.list_signals()
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/api/signals/nearby", response_model=List[NearbySignal])
    def get_nearby_signals(ambulance_id: str, limit: int = Query(default=5, ge=1, le=100)):
        """Returns the signals closest to an ambulance, nearest first"""
        try:
            ambulance = kernel.store.get_ambulance(ambulance_id)
            signals = kernel.store.list_signals()
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Ambulance not found")
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))
        return [
            NearbySignal(signal=signal, distanceMeters=round(distance, 1))
            for signal, distance in nearest_signals(ambulance, signals, limit)
        ]

    @app.post("/api/signals/reset", response_model=ResetResult)
    def reset_signals():
        """Restores every signal to the normal N-S green pattern"""
        try:
            return ResetResult(signalsReset=kernel.reset_signals())
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/api/signals/{signal_id}", response_model=TrafficSignal)
    def get_signal(signal_id: str):
        try:
            return kernel.store.get_signal(signal_id)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Signal not found")
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/api/activations", response_model=List[SignalActivation])
    def list_activations(
        signal_id: Optional[str] = None,
        ambulance_id: Optional[str] = None,
        limit: int = Query(default=50, ge=1, le=1000)
    ):
        """Activation audit trail, newest first"""
        try:
            return kernel.store.list_activations(signal_id=signal_id, ambulance_id=ambulance_id, limit=limit)
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    # Ambulances

    @app.get("/api/ambulances", response_model=List[AmbulanceSnapshot])
    def list_ambulances():
        try:
            return kernel.store.list_ambulances()
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/api/ambulances/{ambulance_id}", response_model=AmbulanceSnapshot)
    def get_ambulance(ambulance_id: str):
        try:
            return kernel.store.get_ambulance(ambulance_id)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Ambulance not found")
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.post("/api/ambulances/{ambulance_id}/location", response_model=AmbulanceSnapshot)
    def update_location(ambulance_id: str, update: LocationUpdate):
        """
        Records a GPS fix and queues a signal scan.

        Signals are re-evaluated on the next tick; the response carries the
        stored snapshot with its recomputed route direction.
        """
        try:
            return kernel.update_location(ambulance_id, update.lat, update.lng, update.heading, update.speed)
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.post("/api/ambulances/{ambulance_id}/emergency", response_model=AmbulanceSnapshot)
    def set_emergency(ambulance_id: str, toggle: EmergencyToggle):
        try:
            return kernel.set_emergency_status(ambulance_id, toggle.status)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Ambulance not found")
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.post("/api/ambulances/{ambulance_id}/destination", response_model=AmbulanceSnapshot)
    def set_destination(ambulance_id: str, destination: DestinationUpdate):
        try:
            return kernel.set_destination(ambulance_id, destination.lat, destination.lng, destination.name)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Ambulance not found")
        except StoreError as e:
            raise HTTPException(status_code=503, detail=str(e))

    # MediBot

    @app.post("/api/medibot", response_model=MediBotReply)
    def ask_medibot(request: MediBotRequest):
        return MediBotReply(reply=medibot.ask(request.question))

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mediroute.main:app", host="0.0.0.0", port=8000, log_level="info")
