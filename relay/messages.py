"""
Inbound message parsing and outbound message builders.

Inbound frames are JSON objects discriminated by ``type``. The handful of
types the server acts on get their own variant; everything else is an
``AppPayload`` whose fields are relayed untouched apart from sender stamping.
"""
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

JOIN = "join"
ROOM_COUNT_QUERY = "room_count_query"
PING_KEEPALIVE = "ping_keepalive"

ACK = "ack"
ERROR = "error"
ROOM_COUNTS = "room_counts"
PONG_KEEPALIVE = "pong_keepalive"
LEAVE = "leave"

JOIN_FIRST_TEXT = 'Send {type:"join",room:"CODE",...} first'


@dataclass
class InboundMessage:
    fields: Dict[str, Any]

    @property
    def type(self) -> Any:
        return self.fields.get("type")


@dataclass
class JoinRequest(InboundMessage):
    @property
    def room(self) -> Any:
        return self.fields.get("room")

    @property
    def from_id(self) -> Any:
        return self.fields.get("fromId")

    @property
    def from_name(self) -> Any:
        return self.fields.get("fromName")


@dataclass
class RoomCountQuery(InboundMessage):
    pass


@dataclass
class KeepalivePing(InboundMessage):
    pass


@dataclass
class AppPayload(InboundMessage):
    pass


Message = Union[JoinRequest, RoomCountQuery, KeepalivePing, AppPayload]

_VARIANTS = {
    JOIN: JoinRequest,
    ROOM_COUNT_QUERY: RoomCountQuery,
    PING_KEEPALIVE: KeepalivePing,
}


def _reject_constant(name: str):
    # NaN and Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name}")


def parse_message(raw: Union[str, bytes]) -> Optional[Message]:
    """Parse one frame. Returns None for anything that isn't a JSON object."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None

    msg_type = data.get("type")
    variant = _VARIANTS.get(msg_type, AppPayload) if isinstance(msg_type, str) else AppPayload
    return variant(fields=data)


def now_ms() -> int:
    return int(time.time() * 1000)


def stamped(fields: Dict[str, Any], player_id: str, name: str) -> Dict[str, Any]:
    """Copy of ``fields`` with the sender overwritten by the server-bound identity"""
    return {**fields, "fromId": player_id, "fromName": name}


def ack(room: str, player_id: str, player_count: int) -> dict:
    return {"type": ACK, "room": room, "yourId": player_id, "playerCount": player_count}


def error(text: str = JOIN_FIRST_TEXT) -> dict:
    return {"type": ERROR, "text": text}


def room_counts(counts: Dict[str, int]) -> dict:
    return {"type": ROOM_COUNTS, "counts": counts}


def pong_keepalive() -> dict:
    return {"type": PONG_KEEPALIVE}


def leave(player_id: str, name: str, ts: Optional[int] = None) -> dict:
    return {
        "type": LEAVE,
        "fromId": player_id,
        "fromName": name,
        "ts": now_ms() if ts is None else ts,
    }
