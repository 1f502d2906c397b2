from pydantic import BaseModel, ConfigDict
from typing import Any


class EventEnvelope(BaseModel):
    """One frame on the websocket: {"event": "...", "data": ...}."""
    model_config = ConfigDict(extra="ignore")

    event: str
    data: Any = None

class ConnectedPayload(BaseModel):
    connectionId: str
    displayName: str
