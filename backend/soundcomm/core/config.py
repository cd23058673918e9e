# backend/soundcomm/core/config.py
import os
from typing import List
from dotenv import load_dotenv


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Setup environment variables.
        - DEFAULT_ROOM the room used when a client names none and has not joined one
        - HOST / PORT where the long-running listener binds
        - CORS_ORIGINS comma separated list of allowed origins ("*" for any)
        - ANNOUNCE_DEPARTURES broadcast a "Left room" log entry when a member disconnects
        - LOG_LEVEL relay log level, applied by core.logging.setup_logging()
    """

    # Load environment variables from the .env file
    load_dotenv()

    DEFAULT_ROOM: str = os.getenv("DEFAULT_ROOM", "main") or "main"

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    CORS_ORIGINS: List[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

    ANNOUNCE_DEPARTURES: bool = _env_bool("ANNOUNCE_DEPARTURES", "true")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
