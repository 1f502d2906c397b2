import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from constants import DISPLAY_NAME_PREFIX
from logging_config import get_logger

logger = get_logger(__name__)

Sender = Callable[[str, Any], Awaitable[None]]


def default_display_name(connection_id: str) -> str:
    return f"{DISPLAY_NAME_PREFIX}{connection_id[:8]}"


@dataclass
class Connection:
    connection_id: str
    send: Sender
    display_name: str = ""
    room_id: Optional[str] = None
    location: Optional[Tuple[float, float]] = None
    connected_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self):
        if not self.display_name:
            self.display_name = default_display_name(self.connection_id)

    @property
    def in_room(self) -> bool:
        return self.room_id is not None


class ConnectionRegistry:
    """Live connections keyed by connection id."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def register(self, send: Sender, display_name: Optional[str] = None, connection_id: Optional[str] = None) -> Connection:
        connection_id = connection_id or uuid.uuid4().hex
        if connection_id in self._connections:
            raise ValueError(f"Connection {connection_id} is already registered")
        name = display_name.strip() if display_name and display_name.strip() else ""
        connection = Connection(connection_id=connection_id, send=send, display_name=name)
        self._connections[connection_id] = connection
        logger.debug(f"Registered connection {connection_id} ({connection.display_name}), {len(self._connections)} live")
        return connection

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def remove(self, connection_id: str) -> Optional[Connection]:
        connection = self._connections.pop(connection_id, None)
        if connection:
            logger.debug(f"Removed connection {connection_id}, {len(self._connections)} live")
        return connection

    def clear(self):
        self._connections.clear()

    def __contains__(self, connection_id) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
