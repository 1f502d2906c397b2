import pytest

from directory import RoomDirectory
from registry import ConnectionRegistry
from relay import RelayEngine


@pytest.fixture
def anyio_backend():
    return "asyncio"


class Recorder:
    """Collects every (recipient, event, data) emitted by the relay."""

    def __init__(self):
        self.sent = []

    def sender(self, connection_id):
        async def send(event, data):
            self.sent.append((connection_id, event, data))
        return send

    def for_(self, connection_id):
        return [(event, data) for cid, event, data in self.sent if cid == connection_id]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def directory():
    return RoomDirectory()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def engine(directory, registry):
    return RelayEngine(directory, registry)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def connect(registry, recorder):
    """Register a connection with a fixed id whose emissions go to the recorder."""
    def _connect(connection_id, display_name=None):
        return registry.register(recorder.sender(connection_id), display_name=display_name, connection_id=connection_id)
    return _connect
