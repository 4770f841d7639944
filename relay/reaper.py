"""
Background sweep of idle, empty rooms
"""
import asyncio
import logging
import time

from .config import LOGGER_NAME
from .state import RoomRegistry

logger = logging.getLogger(LOGGER_NAME)


async def reap_idle_rooms(registry: RoomRegistry, interval: float, idle_seconds: float):
    """Every ``interval`` seconds drop rooms that are empty and idle"""
    while True:
        try:
            await asyncio.sleep(interval)
            removed = registry.sweep(time.time(), idle_seconds)
            if removed:
                logger.debug(f"Sweep removed {len(removed)} rooms, {len(registry)} left")
        except Exception as e:
            logger.error(f"Cleanup task error: {e}")
