"""
Relay configuration read from the environment
"""
import os


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


# Listener
PORT = int(os.environ.get("PORT", 8765))
HOST = os.environ.get("SERVER_HOST", "0.0.0.0")

# Empty rooms are dropped once idle for this long
ROOM_IDLE_SECONDS = _env_float("RELAY_ROOM_IDLE_SECONDS", 5 * 60)
SWEEP_INTERVAL_SECONDS = _env_float("RELAY_SWEEP_INTERVAL_SECONDS", 60)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "liberty_relay"
