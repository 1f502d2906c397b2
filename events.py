# Inbound (client -> relay)
CREATE_ROOM = "createRoom"
JOIN_ROOM = "joinRoom"
LOCATION_UPDATE = "locationUpdate"

# Outbound (relay -> client)
CONNECTED = "connected"  # {connectionId, displayName}, sent once after accept
ROOM_CREATED = "roomCreated"  # roomId, requester only
ROOM_JOINED = "roomJoined"  # roomId, requester only
ROOM_ERROR = "roomError"  # message, requester only
USER_JOINED = "userJoined"  # connectionId, other room members
OTHER_USER_LOCATION = "otherUserLocation"  # location payload, other room members
USER_LEFT = "userLeft"  # connectionId, remaining room members
