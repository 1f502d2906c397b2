import asyncio
from typing import Any, Iterable, Optional, Set, Tuple

import events
from directory import RoomDirectory
from errors import RoomError
from logging_config import get_logger
from registry import Connection, ConnectionRegistry

logger = get_logger(__name__)


def _valid_room_id(room_id: Any) -> bool:
    return isinstance(room_id, str) and room_id != ""


def _is_coordinate(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class RelayEngine:
    """Handles room commands and location events for every connection.

    Directory and registry mutations happen before the first await of each
    handler, so membership is never observed half-updated. Emissions are
    fire-and-forget: a failed send is logged and dropped.
    """

    def __init__(self, directory: RoomDirectory, registry: ConnectionRegistry):
        self.directory = directory
        self.registry = registry
        self._handlers = {
            events.CREATE_ROOM: self.create_room,
            events.JOIN_ROOM: self.join_room,
            events.LOCATION_UPDATE: self.location_update,
        }

    async def dispatch(self, connection_id: str, event: str, data: Any = None):
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug(f"Ignoring unknown event {event!r} from {connection_id}")
            return
        await handler(connection_id, data)

    async def create_room(self, connection_id: str, room_id: Any):
        connection = self.registry.get(connection_id)
        if connection is None or not _valid_room_id(room_id):
            logger.debug(f"Dropping createRoom from {connection_id}: bad room id {room_id!r}")
            return

        try:
            self.directory.create_room(room_id, connection_id)
        except RoomError as e:
            await self._emit_error(connection, e)
            return
        departed = self._move_to_room(connection, room_id)

        if departed:
            await self._broadcast(departed[1], events.USER_LEFT, connection_id)
        await self._send(connection, events.ROOM_CREATED, room_id)

    async def join_room(self, connection_id: str, room_id: Any):
        connection = self.registry.get(connection_id)
        if connection is None or not _valid_room_id(room_id):
            logger.debug(f"Dropping joinRoom from {connection_id}: bad room id {room_id!r}")
            return

        try:
            self.directory.join_room(room_id, connection_id)
        except RoomError as e:
            await self._emit_error(connection, e)
            return
        departed = self._move_to_room(connection, room_id)
        peers = self.directory.members_except(room_id, connection_id)
        logger.info(f"User {connection_id} joined room {room_id} ({len(peers) + 1} members)")

        if departed:
            await self._broadcast(departed[1], events.USER_LEFT, connection_id)
        await self._send(connection, events.ROOM_JOINED, room_id)
        await self._broadcast(peers, events.USER_JOINED, connection_id)

    async def location_update(self, connection_id: str, payload: Any):
        connection = self.registry.get(connection_id)
        if connection is None or not connection.in_room:
            logger.debug(f"Dropping locationUpdate from {connection_id}: not in a room")
            return
        if not isinstance(payload, dict):
            logger.debug(f"Dropping locationUpdate from {connection_id}: payload is not an object")
            return

        lat, lon = payload.get("lat"), payload.get("lon")
        if _is_coordinate(lat) and _is_coordinate(lon):
            connection.location = (lat, lon)
        display_name = payload.get("displayName")
        if isinstance(display_name, str) and display_name.strip():
            connection.display_name = display_name.strip()

        peers = self.directory.members_except(connection.room_id, connection_id)
        logger.debug(f"Relaying location from {connection_id} to {len(peers)} peers in room {connection.room_id}")
        await self._broadcast(peers, events.OTHER_USER_LOCATION, payload)

    async def disconnect(self, connection_id: str):
        connection = self.registry.remove(connection_id)
        if connection is None:
            return
        logger.info(f"User disconnected: {connection_id}")
        departed = self._leave_current_room(connection)
        if departed:
            await self._broadcast(departed[1], events.USER_LEFT, connection_id)

    def _move_to_room(self, connection: Connection, room_id: str) -> Optional[Tuple[str, Set[str]]]:
        """Bind the connection to room_id, leaving any other room it was in."""
        departed = None
        if connection.room_id != room_id:
            departed = self._leave_current_room(connection)
        connection.room_id = room_id
        return departed

    def _leave_current_room(self, connection: Connection) -> Optional[Tuple[str, Set[str]]]:
        """Returns (room_id, remaining members), or None if nobody is left to notify."""
        room_id = connection.room_id
        if room_id is None:
            return None
        connection.room_id = None
        deleted = self.directory.leave(room_id, connection.connection_id)
        logger.info(f"User {connection.connection_id} left room {room_id}")
        if deleted:
            return None
        return room_id, self.directory.get_members(room_id)

    async def _emit_error(self, connection: Connection, error: RoomError):
        logger.info(f"Room error for {connection.connection_id} on {error.room_id}: {error.message}")
        await self._send(connection, events.ROOM_ERROR, error.message)

    async def _send(self, connection: Connection, event: str, data: Any) -> bool:
        try:
            await connection.send(event, data)
            return True
        except Exception as e:
            logger.warning(f"Error sending {event} to connection {connection.connection_id}: {e}")
            return False

    async def _broadcast(self, connection_ids: Iterable[str], event: str, data: Any):
        targets = [c for c in (self.registry.get(cid) for cid in connection_ids) if c is not None]
        if not targets:
            return
        # in-flight fan-out outlives the sender's task
        await asyncio.shield(asyncio.gather(*(self._send(c, event, data) for c in targets)))
        logger.debug(f"Broadcasted {event} to {len(targets)} connections")
