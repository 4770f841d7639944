"""
Utility functions for room codes, player IDs and client addresses
"""
import random
import re
import string
from typing import Any, Optional

MAX_ROOM_CODE_LENGTH = 32

_INVALID_CODE_CHARS = re.compile(r"[^A-Z0-9_]")


def normalize_room_code(raw: Any) -> str:
    """Uppercase, drop anything outside [A-Z0-9_] and cap the length"""
    code = _INVALID_CODE_CHARS.sub("", str(raw).upper())
    return code[:MAX_ROOM_CODE_LENGTH]


def generate_player_id(length: int = 6) -> str:
    """Generate a server-assigned player ID.

    The ``P_`` prefix keeps generated IDs apart from ones clients pick
    for themselves.
    """
    alphabet = string.ascii_uppercase + string.digits
    return "P_" + "".join(random.choice(alphabet) for _ in range(length))


def client_address(forwarded_for: Optional[str], remote: Optional[str]) -> Optional[str]:
    """First hop of X-Forwarded-For if a proxy set it, else the peer address"""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return remote
