from typing import Dict, Set

from errors import RoomAlreadyExists, RoomNotFound
from logging_config import get_logger

logger = get_logger(__name__)


class RoomDirectory:
    """In-memory mapping of room id -> set of member connection ids.

    A room id is present only while its member set is non-empty. Every method
    is synchronous, so on a single event loop no two mutations interleave.
    """

    def __init__(self):
        self._rooms: Dict[str, Set[str]] = {}
        logger.info("Initializing RoomDirectory")

    def create_room(self, room_id: str, requester: str):
        logger.debug(f"Create room {room_id} requested by {requester}")
        if room_id in self._rooms:
            logger.debug(f"Room {room_id} already exists")
            raise RoomAlreadyExists(room_id)
        self._rooms[room_id] = {requester}
        logger.info(f"Room {room_id} created by {requester}")
        return room_id

    def join_room(self, room_id: str, requester: str):
        members = self._rooms.get(room_id)
        if members is None:
            logger.debug(f"Join failed: room {room_id} not found")
            raise RoomNotFound(room_id)
        if requester in members:
            logger.debug(f"User {requester} already in room {room_id}")
        else:
            members.add(requester)
            logger.debug(f"User {requester} added to room {room_id} ({len(members)} members)")
        return room_id

    def leave(self, room_id: str, connection_id: str) -> bool:
        """Remove a member; drop the room in the same step if it is now empty.

        Returns True when the room was deleted.
        """
        members = self._rooms.get(room_id)
        if members is None:
            return False
        members.discard(connection_id)
        logger.debug(f"User {connection_id} removed from room {room_id} ({len(members)} members left)")
        if not members:
            del self._rooms[room_id]
            logger.info(f"Room {room_id} deleted (empty)")
            return True
        return False

    def members_except(self, room_id: str, connection_id: str) -> Set[str]:
        return self._rooms.get(room_id, set()) - {connection_id}

    def get_members(self, room_id: str) -> Set[str]:
        return set(self._rooms.get(room_id, ()))

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    def room_ids(self):
        return list(self._rooms)

    def clear(self):
        logger.info(f"Clearing RoomDirectory ({len(self._rooms)} rooms)")
        self._rooms.clear()

    def __contains__(self, room_id) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
