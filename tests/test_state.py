import pytest

from relay.state import Room, RoomRegistry


def test_get_or_create_returns_same_room(registry):
    room = registry.get_or_create("ABC")
    assert registry.get_or_create("ABC") is room
    assert registry.get("ABC") is room
    assert len(registry) == 1
    assert "ABC" in registry


def test_new_room_is_empty(registry):
    room = registry.get_or_create("ABC")
    assert room.members == set()
    assert room.player_count == 0


def test_get_missing_room(registry):
    assert registry.get("NOPE") is None


def test_sweep_removes_only_stale_empty_rooms(registry, make_session):
    stale = registry.get_or_create("STALE")
    stale.last_activity = 1000.0
    fresh = registry.get_or_create("FRESH")
    fresh.last_activity = 1250.0
    busy = registry.get_or_create("BUSY")
    busy.last_activity = 0.0
    busy.members.add(make_session())

    removed = registry.sweep(now=1300.0, idle_seconds=100)

    assert removed == ["STALE"]
    assert registry.get("STALE") is None
    assert registry.get("FRESH") is fresh
    assert registry.get("BUSY") is busy


def test_sweep_threshold_is_exclusive(registry):
    room = registry.get_or_create("EDGE")
    room.last_activity = 1000.0
    assert registry.sweep(now=1300.0, idle_seconds=300) == []
    assert registry.sweep(now=1300.5, idle_seconds=300) == ["EDGE"]


def test_counts_and_totals(registry, make_session):
    registry.get_or_create("A").members.update({make_session(), make_session()})
    registry.get_or_create("B")
    assert registry.counts() == {"A": 2, "B": 0}
    assert registry.total_members() == 2
    assert sorted(registry) == ["A", "B"]


def test_room_touch():
    room = Room(code="ABC", last_activity=0.0)
    room.touch(now=42.0)
    assert room.last_activity == 42.0
    room.touch()
    assert room.last_activity > 42.0


def test_session_binds_once(make_session):
    session = make_session()
    assert not session.joined
    session.bind("ABC", "P_1", "alice")
    assert session.joined
    assert (session.room, session.id, session.name) == ("ABC", "P_1", "alice")
    with pytest.raises(RuntimeError):
        session.bind("XYZ", "P_2", "bob")
    assert session.room == "ABC"


async def test_session_send_swallows_transport_errors(make_session):
    session = make_session(fail=True)
    assert await session.send({"type": "pong_keepalive"}) is False


async def test_session_send_skips_closed_transport(make_session):
    session = make_session()
    session.ws.closed = True
    assert await session.send({"type": "pong_keepalive"}) is False
    assert session.ws.sent == []


def test_sessions_hash_by_identity(make_session):
    a, b = make_session(), make_session()
    assert len({a, b}) == 2
