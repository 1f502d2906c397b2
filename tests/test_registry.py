import pytest

from registry import ConnectionRegistry, default_display_name


async def _noop(event, data):
    pass


def test_register_assigns_unique_ids():
    registry = ConnectionRegistry()
    first = registry.register(_noop)
    second = registry.register(_noop)
    assert first.connection_id != second.connection_id
    assert len(registry) == 2
    assert registry.get(first.connection_id) is first


def test_default_display_name_is_generated():
    registry = ConnectionRegistry()
    connection = registry.register(_noop, display_name="   ")
    assert connection.display_name == default_display_name(connection.connection_id)
    assert connection.display_name.startswith("User_")
    assert connection.room_id is None
    assert connection.location is None
    assert not connection.in_room


def test_display_name_is_stripped():
    registry = ConnectionRegistry()
    connection = registry.register(_noop, display_name="  Alice ")
    assert connection.display_name == "Alice"


def test_duplicate_id_rejected():
    registry = ConnectionRegistry()
    registry.register(_noop, connection_id="abc")
    with pytest.raises(ValueError):
        registry.register(_noop, connection_id="abc")


def test_remove():
    registry = ConnectionRegistry()
    connection = registry.register(_noop)
    assert registry.remove(connection.connection_id) is connection
    assert connection.connection_id not in registry
    assert registry.remove(connection.connection_id) is None
