from pydantic import BaseModel
from typing import Optional


class OnlineUser(BaseModel):
    connection_id: str
    display_name: str
    connected_at: str
    lat: Optional[float] = None
    lon: Optional[float] = None

class RoomSummary(BaseModel):
    room_id: str
    online_users_count: int

class RoomListResponse(BaseModel):
    rooms: list[RoomSummary]
    count: int

class RoomDetailsResponse(BaseModel):
    room_id: str
    online_users_count: int
    online_users: list[OnlineUser]
