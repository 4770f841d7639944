"""
In-memory state for the relay: rooms, sessions and the room registry.
Everything here is touched from the event loop only, so no locking.
"""
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set

from .config import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


@dataclass(eq=False)
class Session:
    """Server-side state for one connected client.

    ``ws`` is the transport; anything with a ``closed`` attribute and an
    async ``send_str`` will do (aiohttp's WebSocketResponse in production).
    """
    ws: Any
    address: Optional[str] = None
    room: Optional[str] = None
    id: Any = None
    name: Any = "unknown"

    @property
    def joined(self) -> bool:
        return self.room is not None

    @property
    def writable(self) -> bool:
        return not self.ws.closed

    def bind(self, room: str, player_id: Any, name: Any) -> None:
        if self.joined:
            raise RuntimeError(f"session {self.id} already joined {self.room}")
        self.room = room
        self.id = player_id
        self.name = name

    async def send(self, message: dict) -> bool:
        """Private reply to this session. Transport errors are logged, not raised."""
        if not self.writable:
            return False
        try:
            await self.ws.send_str(json.dumps(message))
            return True
        except Exception as e:
            logger.debug(f"Failed to send to {self.name} ({self.id}): {e}")
            return False


@dataclass(eq=False)
class Room:
    code: str
    members: Set[Session] = field(default_factory=set)
    last_activity: float = field(default_factory=time.time)

    @property
    def player_count(self) -> int:
        return len(self.members)

    def touch(self, now: Optional[float] = None) -> None:
        self.last_activity = time.time() if now is None else now


class RoomRegistry:
    """Room code -> Room. One instance per running app."""

    def __init__(self):
        self._rooms: Dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        return code in self._rooms

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._rooms))

    def get(self, code: str) -> Optional[Room]:
        return self._rooms.get(code)

    def get_or_create(self, code: str) -> Room:
        room = self._rooms.get(code)
        if room is None:
            room = Room(code=code)
            self._rooms[code] = room
            logger.info(f"🏠 Room created: {code}")
        return room

    def sweep(self, now: float, idle_seconds: float) -> List[str]:
        """Drop empty rooms that have been idle for longer than ``idle_seconds``.

        Rooms with members are never touched, however stale. Returns the
        removed codes.
        """
        removed = []
        for code, room in list(self._rooms.items()):
            if room.members:
                continue
            if now - room.last_activity > idle_seconds:
                del self._rooms[code]
                removed.append(code)
                logger.info(f"🧹 Cleaned up idle room: {code}")
        return removed

    def counts(self) -> Dict[str, int]:
        return {code: room.player_count for code, room in self._rooms.items()}

    def total_members(self) -> int:
        return sum(room.player_count for room in self._rooms.values())
