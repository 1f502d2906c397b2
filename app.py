from contextlib import asynccontextmanager
from typing import Optional
import json

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

import events
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from directory import RoomDirectory
from logging_config import get_logger, setup_logging
from registry import ConnectionRegistry
from relay import RelayEngine
from routers.rooms import rooms_router
from schemas.events import ConnectedPayload, EventEnvelope

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def _frame_text(message: dict) -> Optional[str]:
    """Text of a websocket.receive message; binary frames must be UTF-8."""
    if message.get("text") is not None:
        return message["text"]
    raw = message.get("bytes")
    if raw is None:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def create_app(directory: Optional[RoomDirectory] = None, registry: Optional[ConnectionRegistry] = None) -> FastAPI:
    """Build the relay application with its own room directory and connection registry."""
    directory = directory if directory is not None else RoomDirectory()
    registry = registry if registry is not None else ConnectionRegistry()
    engine = RelayEngine(directory, registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Location relay starting")
        yield
        logger.info(f"Location relay stopping: dropping {len(directory)} rooms and {len(registry)} connections")
        directory.clear()
        registry.clear()

    app = FastAPI(title="Location Relay", lifespan=lifespan)
    app.state.directory = directory
    app.state.registry = registry
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(rooms_router)

    @app.get("/health")
    def health():
        return {"ok": True, "rooms": len(directory), "connections": len(registry)}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket, display_name: str = None):
        """Event channel for one client.

        Query parameters:
        - display_name: Optional display name for the user

        Frames in both directions are JSON objects of the form {"event": ..., "data": ...}.
        """
        await websocket.accept()

        async def send(event: str, data):
            await websocket.send_text(json.dumps({"event": event, "data": data}))

        connection = registry.register(send, display_name=display_name)
        connection_id = connection.connection_id
        logger.info(f"A user connected: {connection_id} ({connection.display_name})")

        try:
            hello = ConnectedPayload(connectionId=connection_id, displayName=connection.display_name)
            await send(events.CONNECTED, hello.model_dump())

            message_count = 0
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                message_count += 1
                logger.debug(f"Received message #{message_count} from connection {connection_id}")

                data = _frame_text(message)
                if data is None:
                    logger.debug(f"Dropping undecodable frame from connection {connection_id}")
                    continue

                try:
                    envelope = EventEnvelope.model_validate(json.loads(data))
                except (json.JSONDecodeError, ValidationError):
                    logger.debug(f"Dropping malformed frame from connection {connection_id}")
                    continue

                await engine.dispatch(connection_id, envelope.event, envelope.data)
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected normally for connection {connection_id}")
        except Exception as e:
            logger.error(f"WebSocket error for connection {connection_id}: {e}", exc_info=True)
            try:
                await websocket.close()
            except Exception as close_error:
                logger.debug(f"Error closing WebSocket: {close_error}")
        finally:
            await engine.disconnect(connection_id)

    logger.info("FastAPI application initialized")
    return app


app = create_app()
