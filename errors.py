from constants import ROOM_EXISTS_MESSAGE, ROOM_NOT_FOUND_MESSAGE


class RoomError(Exception):
    """Base class for room membership failures reported back to the requester."""

    message = "Room error."

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"{self.message} (room_id={room_id!r})")


class RoomAlreadyExists(RoomError):
    message = ROOM_EXISTS_MESSAGE


class RoomNotFound(RoomError):
    message = ROOM_NOT_FOUND_MESSAGE
