import json

import pytest

from relay.router import MessageRouter
from relay.state import RoomRegistry, Session


class FakeSocket:
    """Stands in for aiohttp's WebSocketResponse"""

    def __init__(self, fail=False):
        self.sent = []
        self.closed = False
        self.fail = fail

    async def send_str(self, data):
        if self.fail:
            raise ConnectionResetError("Cannot write to closing transport")
        self.sent.append(json.loads(data))


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def router(registry):
    return MessageRouter(registry)


@pytest.fixture
def make_session():
    def _make(address="127.0.0.1", fail=False):
        return Session(ws=FakeSocket(fail=fail), address=address)
    return _make


@pytest.fixture
def join(router):
    async def _join(session, room="ABC", **extra):
        await router.handle_message(session, json.dumps({"type": "join", "room": room, **extra}))
        return session
    return _join
