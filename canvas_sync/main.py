"""FastAPI application with WebSocket support."""

import json
import logging
import traceback
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from canvas_sync.config import settings
from canvas_sync.handlers import disconnect, handle_client_message
from canvas_sync.logging_config import setup_dev_logging, setup_production_logging
from canvas_sync.registry import room_registry
from canvas_sync.routes import create_api_router
from canvas_sync.session import Session
from canvas_sync.shutdown import shutdown_manager

if settings.dev_mode:
    setup_dev_logging(json_format=settings.log_json)
else:
    setup_production_logging(settings.log_file, settings.error_log_file)

logger = logging.getLogger(__name__)


async def log_room_summary() -> None:
    """Cleanup callback: record what is being dropped, since rooms are memory-only."""
    for key in room_registry.list_room_keys():
        room = room_registry.get(key)
        if room is not None:
            logger.info(
                f"Room {key}: {len(room.log)} operations, "
                f"{len(room.presence)} participants at shutdown"
            )


@asynccontextmanager
async def lifespan(_app: FastAPI):  # type: ignore[no-untyped-def]
    """Application lifespan handler with graceful shutdown."""
    logger.info("=== Server startup initiated ===")

    shutdown_manager.reset()
    shutdown_manager.add_cleanup_callback(log_room_summary)

    # In dev mode, uvicorn's reloader handles signals for hot reload
    if not settings.dev_mode:
        shutdown_manager.install_signal_handlers()
    else:
        logger.info("Dev mode: skipping custom signal handlers (uvicorn handles reload)")

    logger.info("=== Server startup completed ===")

    yield

    logger.info("Lifespan shutdown triggered")
    await shutdown_manager.shutdown()


app = FastAPI(
    title="Canvas Sync",
    description="Shared canvas rooms over WebSocket",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(create_api_router())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions and log them with full traceback."""
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}\n{''.join(tb)}")
    content: dict[str, Any] = {"detail": "Internal Server Error"}
    return JSONResponse(status_code=500, content=content)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """One connection per participant.

    The connection starts unjoined; the client sends ``join`` to enter a room.
    Bad frames are logged and dropped without a reply.
    """
    # Accept first so a shutdown close can carry a code
    await websocket.accept()

    if shutdown_manager.is_shutting_down:
        await websocket.close(code=1001, reason="Server shutting down")
        return

    session = Session(websocket=websocket, registry=room_registry)
    shutdown_manager.register_connection(websocket)
    logger.info(f"[WS] Participant {session.participant_id} connected (color {session.color})")

    try:
        while not session.is_closed:
            if shutdown_manager.is_shutting_down:
                break

            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            data = frame.get("text")
            if data is None:
                logger.warning(f"Non-text frame from participant {session.participant_id}, ignored")
                continue

            try:
                message = json.loads(data)
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON from participant {session.participant_id}: {e}")
                continue

            try:
                await handle_client_message(session, message)
            except Exception:
                logger.exception(f"Handler error for participant {session.participant_id}")

        # Client sent leave
        if session.is_closed:
            await websocket.close(code=1000)

    except WebSocketDisconnect:
        logger.info(f"[WS] Participant {session.participant_id} disconnected")
    except Exception as e:
        logger.error(f"WebSocket error for participant {session.participant_id}: {e}")
    finally:
        await disconnect(session)
        shutdown_manager.unregister_connection(websocket)


if __name__ == "__main__":
    uvicorn.run(
        "canvas_sync.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.dev_mode,
    )
