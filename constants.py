import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

DISPLAY_NAME_PREFIX = "User_"

ROOM_EXISTS_MESSAGE = "Room ID already exists. Try joining instead."
ROOM_NOT_FOUND_MESSAGE = "Room does not exist."
