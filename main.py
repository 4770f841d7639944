#!/usr/bin/env python3
"""
Liberty City Relay - Entry Point
WebSocket room relay + health endpoint + idle room cleanup
"""
import asyncio
import logging
import socket
import time
from typing import Optional

from aiohttp import web

from relay import config
from relay.api import health, registry_key, router_key, started_at_key, ws_relay
from relay.reaper import reap_idle_rooms
from relay.router import MessageRouter
from relay.state import RoomRegistry

logger = logging.getLogger(config.LOGGER_NAME)

reaper_task_key = web.AppKey("reaper_task", asyncio.Task)
reaper_settings_key = web.AppKey("reaper_settings", tuple)


async def start_background_tasks(app: web.Application):
    interval, idle_seconds = app[reaper_settings_key]
    app[reaper_task_key] = asyncio.create_task(
        reap_idle_rooms(app[registry_key], interval, idle_seconds)
    )


async def cleanup_background_tasks(app: web.Application):
    task = app[reaper_task_key]
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


def create_app(
    registry: Optional[RoomRegistry] = None,
    idle_seconds: float = config.ROOM_IDLE_SECONDS,
    sweep_interval: float = config.SWEEP_INTERVAL_SECONDS,
) -> web.Application:
    """Create and configure the aiohttp application"""
    app = web.Application()

    registry = registry if registry is not None else RoomRegistry()
    app[registry_key] = registry
    app[router_key] = MessageRouter(registry)
    app[started_at_key] = time.monotonic()
    app[reaper_settings_key] = (sweep_interval, idle_seconds)

    app.router.add_get("/", ws_relay)
    app.router.add_get("/health", health)

    app.on_startup.append(start_background_tasks)
    app.on_cleanup.append(cleanup_background_tasks)
    return app


def get_local_ip():
    """Get LAN IP address"""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except Exception:
        return None


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    app = create_app()
    port = config.PORT
    local_ip = get_local_ip()

    logger.info(f"🚀 Liberty City Relay on {config.HOST}:{port} • /health → room status JSON")
    logger.info(f"💡 Local: ws://localhost:{port}")
    if local_ip:
        logger.info(f"💡 LAN:   ws://{local_ip}:{port}")

    web.run_app(app, host=config.HOST, port=port, print=None)


if __name__ == "__main__":
    main()
