import asyncio

from legal_eagle.realtime.connection_registry import ConnectionRegistry


class FakeSocket:
    def __init__(self, fail=False):
        self.frames = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(data)


def test_broadcast_reaches_room_members_except_excluded():
    registry = ConnectionRegistry()
    alice, bob, eve = FakeSocket(), FakeSocket(), FakeSocket()
    a, b, _ = registry.add(alice), registry.add(bob), registry.add(eve)
    registry.join(a, "room-1")
    registry.join(b, "room-1")

    delivered = asyncio.run(registry.broadcast_to_room("room-1", "userTyping", {"chatId": "room-1"}, exclude=a))
    assert delivered == 1
    assert alice.frames == []
    assert bob.frames == [{"event": "userTyping", "data": {"chatId": "room-1"}}]
    assert eve.frames == []


def test_principal_registration_is_overwritten_on_reconnect():
    registry = ConnectionRegistry()
    old, new = FakeSocket(), FakeSocket()
    first = registry.add(old)
    second = registry.add(new)
    registry.register(first, "user:1")
    registry.register(second, "user:1")
    assert registry.connection_of("user:1") == second

    asyncio.run(registry.send_to_principal("user:1", "ping", {}))
    assert old.frames == []
    assert new.frames == [{"event": "ping", "data": {}}]

    registry.remove(first)
    assert registry.connection_of("user:1") == second


def test_remove_forgets_everything():
    registry = ConnectionRegistry()
    connection = registry.add(FakeSocket())
    registry.register(connection, "lawyer:7")
    registry.join(connection, "room-1")
    registry.join(connection, "room-2")
    assert registry.rooms_of(connection) == {"room-1", "room-2"}

    registry.remove(connection)
    assert registry.connection_of("lawyer:7") is None
    assert registry.room_members("room-1") == set()
    assert registry.rooms_of(connection) == set()
    assert asyncio.run(registry.send_to_principal("lawyer:7", "ping", {})) is False


def test_failed_send_drops_the_connection():
    registry = ConnectionRegistry()
    broken = registry.add(FakeSocket(fail=True))
    healthy_socket = FakeSocket()
    healthy = registry.add(healthy_socket)
    registry.register(broken, "user:1")
    registry.join(broken, "room-1")
    registry.join(healthy, "room-1")

    delivered = asyncio.run(registry.broadcast_to_room("room-1", "receiveMessage", {"text": "hi"}))
    assert delivered == 1
    assert registry.room_members("room-1") == {healthy}
    assert registry.connection_of("user:1") is None
    assert len(healthy_socket.frames) == 1


def test_leave_room():
    registry = ConnectionRegistry()
    connection = registry.add(FakeSocket())
    registry.join(connection, "room-1")
    registry.leave(connection, "room-1")
    registry.leave(connection, "room-unknown")
    assert registry.room_members("room-1") == set()


def test_leave_all_keeps_the_principal_binding():
    registry = ConnectionRegistry()
    connection = registry.add(FakeSocket())
    registry.register(connection, "user:1")
    registry.join(connection, "room-1")
    registry.join(connection, "room-2")

    registry.leave_all(connection)
    assert registry.rooms_of(connection) == set()
    assert registry.room_members("room-1") == set()
    assert registry.connection_of("user:1") == connection
