from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import OnlineUser, RoomDetailsResponse, RoomListResponse, RoomSummary
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/", response_model=RoomListResponse)
async def list_rooms(request: Request):
    directory = request.app.state.directory
    rooms = [
        RoomSummary(room_id=room_id, online_users_count=len(directory.get_members(room_id)))
        for room_id in directory.room_ids()
    ]
    logger.debug(f"Listing {len(rooms)} active rooms")
    return RoomListResponse(rooms=rooms, count=len(rooms))


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request):
    """
    Get the current members of an active room.

    Returns:
    - room_id: Room identifier
    - online_users_count: Number of connections in the room
    - online_users: connection id, display name, connect time and last known location
    """
    directory = request.app.state.directory
    registry = request.app.state.registry

    if not directory.has_room(room_id):
        logger.info(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    online_users = []
    for connection_id in directory.get_members(room_id):
        connection = registry.get(connection_id)
        if connection is None:
            continue
        lat, lon = connection.location if connection.location else (None, None)
        online_users.append(OnlineUser(
            connection_id=connection.connection_id,
            display_name=connection.display_name,
            connected_at=connection.connected_at,
            lat=lat,
            lon=lon,
        ))
    online_users.sort(key=lambda user: user.connected_at)

    logger.debug(f"Room details retrieved for {room_id}: {len(online_users)} users online")
    return RoomDetailsResponse(
        room_id=room_id,
        online_users_count=len(online_users),
        online_users=online_users,
    )
