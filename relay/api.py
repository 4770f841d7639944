"""
HTTP and WebSocket handlers for the relay.
One port serves both: WebSocket upgrades on / become relay sessions,
plain GETs get a banner, /health reports room status.
"""
import logging
import time

from aiohttp import web, WSMsgType

from .config import LOGGER_NAME
from .router import MessageRouter
from .state import RoomRegistry, Session
from .utils import client_address

logger = logging.getLogger(LOGGER_NAME)

registry_key = web.AppKey("registry", RoomRegistry)
router_key = web.AppKey("router", MessageRouter)
started_at_key = web.AppKey("started_at", float)

BANNER = "Liberty City Relay — WebSocket server active\n"

# ============================================================
# WEBSOCKET RELAY
# ============================================================

async def ws_relay(request: web.Request) -> web.StreamResponse:
    """Relay endpoint. Falls back to the text banner for non-WebSocket GETs"""
    ws = web.WebSocketResponse()
    if not ws.can_prepare(request).ok:
        return web.Response(text=BANNER)
    await ws.prepare(request)

    router = request.app[router_key]
    address = client_address(request.headers.get("X-Forwarded-For"), request.remote)
    session = Session(ws=ws, address=address)
    logger.debug(f"WebSocket connected from {address}")

    try:
        async for msg in ws:
            if msg.type in (WSMsgType.TEXT, WSMsgType.BINARY):
                await router.handle_message(session, msg.data)
            elif msg.type == WSMsgType.ERROR:
                router.handle_error(session, ws.exception())
    finally:
        await router.handle_close(session)
        logger.debug(f"WebSocket closed from {address}")

    return ws

# ============================================================
# STATUS
# ============================================================

async def health(request: web.Request) -> web.Response:
    """Uptime plus per-room player counts"""
    registry = request.app[registry_key]
    counts = registry.counts()
    return web.json_response({
        "status": "ok",
        "uptime": round(time.monotonic() - request.app[started_at_key]),
        "rooms": [{"code": code, "players": players} for code, players in counts.items()],
        "totalPlayers": registry.total_members(),
    })
