"""
Fan-out of one message to the members of a room
"""
import json
import logging
from typing import Optional

from .config import LOGGER_NAME
from .state import Room, Session

logger = logging.getLogger(LOGGER_NAME)


async def broadcast(room: Room, message: dict, exclude: Optional[Session] = None) -> int:
    """Send ``message`` to every open member of ``room`` except ``exclude``.

    Best effort: a member that fails to receive is logged and skipped, the
    rest still get the message. Returns how many members it reached.
    """
    data = json.dumps(message)
    delivered = 0

    # Snapshot, membership can change while a send is awaited
    for member in list(room.members):
        if member is exclude or not member.writable:
            continue
        try:
            await member.ws.send_str(data)
            delivered += 1
        except Exception as e:
            logger.debug(f"Failed to send to {member.name} ({member.id}) in {room.code}: {e}")

    return delivered
