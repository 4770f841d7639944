"""
Per-session message routing: join, control queries, relay and disconnect.
The transport hands every frame, close and error of a connection to one
MessageRouter shared by the whole app.
"""
import logging
from typing import Optional, Union

from . import messages
from .broadcast import broadcast
from .config import LOGGER_NAME
from .messages import JoinRequest, KeepalivePing, RoomCountQuery
from .state import RoomRegistry, Session
from .utils import generate_player_id, normalize_room_code

logger = logging.getLogger(LOGGER_NAME)


class MessageRouter:
    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    async def handle_message(self, session: Session, raw: Union[str, bytes]) -> None:
        msg = messages.parse_message(raw)
        if msg is None:
            logger.debug(f"Dropped malformed frame from {session.address}")
            return

        if not session.joined:
            await self._handle_unjoined(session, msg)
            return

        room = self.registry.get(session.room)
        if room is None:
            # Reaped between messages
            return
        room.touch()

        if isinstance(msg, RoomCountQuery):
            await session.send(messages.room_counts(self.registry.counts()))
        elif isinstance(msg, KeepalivePing):
            await session.send(messages.pong_keepalive())
        else:
            # Sender fields always carry the server-bound identity
            await broadcast(room, messages.stamped(msg.fields, session.id, session.name), session)

    async def _handle_unjoined(self, session: Session, msg) -> None:
        code = self._join_code(msg)
        if code is None:
            await session.send(messages.error())
            return

        room = self.registry.get_or_create(code)
        player_id = msg.from_id if msg.from_id else generate_player_id()
        name = msg.from_name if msg.from_name else player_id
        session.bind(code, player_id, name)
        room.members.add(session)
        room.touch()

        logger.info(f"➕ {name} ({player_id}) joined {code} | room now has {room.player_count} players")

        await session.send(messages.ack(code, player_id, room.player_count))
        await broadcast(room, messages.stamped(msg.fields, player_id, name), session)

    @staticmethod
    def _join_code(msg) -> Optional[str]:
        """Normalized room code of a usable join request, else None"""
        if not isinstance(msg, JoinRequest) or not msg.room:
            return None
        return normalize_room_code(msg.room) or None

    async def handle_close(self, session: Session) -> None:
        if not session.joined:
            return
        room = self.registry.get(session.room)
        if room is None or session not in room.members:
            return

        room.members.discard(session)
        room.touch()
        logger.info(
            f"➖ {session.name} ({session.id}) left {room.code} | room now has {room.player_count} players"
        )
        await broadcast(room, messages.leave(session.id, session.name))

    def handle_error(self, session: Session, exc: Optional[BaseException]) -> None:
        logger.warning(f"WebSocket error from {session.name} ({session.address}): {exc}")
