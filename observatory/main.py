"""Observatory FastAPI backend: main application entry point."""
from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from observatory import config
from observatory.db import connection, migrations
from observatory.realtime import ConnectionRegistry, make_message, parse_client_message
from observatory.routers.agents import agents_router
from observatory.routers.analytics import analytics_router
from observatory.routers.executions import executions_router
from observatory.routers.live import live_router
from observatory.routers.mcps import mcps_router
from observatory.routers.sessions import sessions_router
from observatory.routers.sync import sync_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("observatory")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Observatory backend starting up")

    db = await connection.get_connection()
    await migrations.run_migrations(db)
    app.state.connections = ConnectionRegistry()

    yield

    logger.info("Observatory backend shutting down")
    await connection.close_connection()


app = FastAPI(
    title="Observatory API",
    description="Live view of coding assistant sessions, agents and usage",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow the dashboard dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(live_router)
app.include_router(agents_router)
app.include_router(sessions_router)
app.include_router(executions_router)
app.include_router(analytics_router)
app.include_router(sync_router)
app.include_router(mcps_router)


def _registry(app: FastAPI) -> ConnectionRegistry:
    registry = getattr(app.state, "connections", None)
    if registry is None:
        registry = ConnectionRegistry()
        app.state.connections = registry
    return registry


@app.get("/")
def root():
    return {
        "name": "Observatory API",
        "version": app.version,
        "websocket": "/ws",
    }


@app.get("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "db": "connected" if connection.is_connected() else "disconnected",
    }


@app.post("/api/hook")
async def receive_hook(request: Request):
    """Relay a hook payload to every connected websocket client."""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Hook payload must be an object")

    message_type = data.get("type") or "execution_completed"
    delivered = await _registry(request.app).broadcast(make_message(message_type, data))
    logger.debug(f"Hook {message_type} delivered to {delivered} clients")
    return {"received": True, "delivered": delivered}


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    registry = _registry(websocket.app)
    registry.add(websocket)
    try:
        welcome = make_message("connected", {"clients": len(registry)})
        welcome["message"] = "Connected to Observatory"
        await websocket.send_text(json.dumps(welcome))
        while True:
            incoming = parse_client_message(await websocket.receive_text())
            if incoming is None:
                logger.debug("Ignoring unparseable websocket message")
                continue
            if incoming.get("type") == "ping":
                await websocket.send_text(json.dumps(make_message("pong")))
    except WebSocketDisconnect:
        pass
    finally:
        registry.remove(websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("observatory.main:app", host=config.HOST, port=config.PORT, reload=config.RELOAD)
