# FastAPI Web Server for the Simulated Vehicle Console
# File: api_server.py

"""
Run with: uvicorn api_server:app --reload --port 8000
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from gcs_sim import (
    AsyncioScheduler,
    Coordinate,
    RelayChannel,
    SimulatorConfig,
    VehicleSession,
    __version__,
)
from gcs_sim.relay import SEND_ERRORS

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Simulated Vehicle Console API",
    description="Operator console for a single simulated aerial vehicle",
    version=__version__
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global session instance (created on startup unless one was installed already)
session: Optional[VehicleSession] = None
relay = RelayChannel()

# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

class StableLinkRequest(BaseModel):
    enabled: Optional[bool] = None  # omitted toggles

# ============================================================================
# LIFECYCLE EVENTS
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Create the vehicle session on startup"""
    global session

    if session is None:
        config = SimulatorConfig.from_env()
        session = VehicleSession(
            config,
            scheduler=AsyncioScheduler(config.tick_ms, config.jitter_period_ms)
        )

    logger.info("Console API server started")

@app.on_event("shutdown")
async def shutdown_event():
    """Stop session timers"""
    if session:
        session.shutdown()
    logger.info("Console API server stopped")

def _session() -> VehicleSession:
    if session is None:
        raise HTTPException(status_code=503, detail="Session not initialized")
    return session

def _rejected(action: str) -> HTTPException:
    current = _session()
    return HTTPException(
        status_code=409,
        detail=f"{action} rejected in state '{current.state.value}'"
    )

# ============================================================================
# TELEMETRY ENDPOINTS
# ============================================================================

@app.get("/api/telemetry")
async def get_telemetry():
    """Current telemetry snapshot"""
    current = _session()
    return {
        "connected": current.connected,
        "telemetry": current.snapshot.to_dict()
    }

@app.get("/api/path")
async def get_path(limit: Optional[int] = None):
    """Visited positions, oldest first"""
    path = _session().path()
    if limit is not None:
        path = path[-limit:] if limit > 0 else []
    return {
        "count": len(path),
        "path": [p.to_dict() for p in path]
    }

@app.get("/api/geofence")
async def get_geofence():
    """Geofence boundary, membership and crossing log"""
    current = _session()
    log = current.geofence_log()
    return {
        "fence": current.geofence.fence.to_dict(),
        "outside": current.geofence.is_outside,
        "count": len(log),
        "log": [entry.to_dict() for entry in log]
    }

@app.get("/api/events")
async def get_recent_events(limit: int = 50):
    """Recent session events"""
    events = _session().event_router.recent(limit)
    return {
        "count": len(events),
        "events": [e.to_dict() for e in events]
    }

# ============================================================================
# SESSION ENDPOINTS (operator intents)
# ============================================================================

@app.get("/api/session")
async def get_session_status():
    """Connection state, target and link mode"""
    return _session().status()

@app.post("/api/session/connect")
async def connect():
    """Start a fresh session"""
    if not _session().connect():
        raise _rejected("Connect")
    return {"message": "Vehicle connected", **session.status()}

@app.post("/api/session/disconnect")
async def disconnect():
    """Return home, then disconnect on arrival"""
    if not _session().disconnect():
        raise _rejected("Disconnect")
    return {"message": "Returning home before disconnect", **session.status()}

@app.post("/api/session/return-home")
async def return_home():
    """Return to launch; only accepted while (nearly) stationary"""
    if not _session().return_home():
        raise _rejected("Return home")
    return {"message": "Returning home", **session.status()}

@app.post("/api/session/target")
async def set_target(request: CoordinateModel):
    """Click-to-target"""
    target = Coordinate(request.lat, request.lon)
    if not _session().set_target(target):
        raise _rejected("Target")
    return {"message": "Target set", **session.status()}

@app.post("/api/session/stable-link")
async def set_stable_link(request: Optional[StableLinkRequest] = None):
    """Toggle (or explicitly set) stable link mode"""
    current = _session()
    if request is None or request.enabled is None:
        enabled = current.toggle_stable_link()
    else:
        enabled = current.set_stable_link(request.enabled)
    return {"stable_link": enabled}

# ============================================================================
# WEBSOCKET ENDPOINTS
# ============================================================================

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket for real-time telemetry"""
    await websocket.accept()

    try:
        while True:
            current = session
            if current is None:
                await websocket.close(code=1011)
                break

            await websocket.send_json({
                "type": "telemetry",
                "timestamp": datetime.now().isoformat(),
                "session": current.status(),
                "telemetry": current.snapshot.to_dict()
            })
            await asyncio.sleep(current.config.telemetry_push_ms / 1000)
    except SEND_ERRORS:
        logger.debug("Telemetry viewer disconnected")

@app.websocket("/relay")
async def relay_endpoint(websocket: WebSocket):
    """Pass-through broadcast to every other connected peer"""
    await relay.join(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug("Relay peer closed")
                break

            payload = message.get("text")
            if payload is None:
                payload = message.get("bytes")
            if payload is not None:
                await relay.relay(websocket, payload)
    finally:
        relay.leave(websocket)

# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "name": "Simulated Vehicle Console API",
        "version": __version__,
        "status": "operational",
        "session": session.state.value if session else "not_initialized",
        "docs": "/docs",
        "redoc": "/redoc"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "session": session.state.value if session else "not_initialized",
        "relay_members": len(relay),
        "timestamp": datetime.now().isoformat()
    }

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    config = SimulatorConfig.from_env()
    uvicorn.run(app, host=config.host, port=config.port)
