import logging
import os
import secrets
from functools import lru_cache
from typing import List, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3002
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3003",
    "http://localhost:3005",
]


def resolve_port(raw: Optional[str]) -> int:
    """Turn the PORT env value into a listening port, falling back to 3002.

    Some hosting platforms pass the literal string "$PORT" through when the
    variable is not expanded, so anything containing "$" is treated as unset.
    """
    value = (raw or "").strip()
    if not value:
        return DEFAULT_PORT

    if "$" in value:
        logger.warning("PORT variable contains $ (%r), using default port %d", value, DEFAULT_PORT)
        return DEFAULT_PORT

    try:
        port = int(value)
    except ValueError:
        logger.error("Invalid PORT %r, fallback to %d", value, DEFAULT_PORT)
        return DEFAULT_PORT

    if not 1 <= port <= 65535:
        logger.error("Invalid PORT %r, fallback to %d", value, DEFAULT_PORT)
        return DEFAULT_PORT

    logger.info("Using port: %d", port)
    return port


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings:
    PORT: int
    ENVIRONMENT: str
    SERVICE_NAME: str
    LOG_LEVEL: str

    DATABASE_URL: str
    DATABASE_POOL_SIZE: int

    TELEGRAM_BOT_TOKEN: str
    TELEGRAM_ADMIN_CHAT_ID: str
    TELEGRAM_WEBHOOK_SECRET: str
    WEBHOOK_BASE_URL: str
    WEBHOOK_PATH: str

    CORS_ORIGINS: List[str]

    ADMIN_USERNAME: str
    ADMIN_PASSWORD: str
    JWT_SECRET: str
    JWT_EXPIRE_MINUTES: int

    def __init__(self, env: Optional[Mapping[str, str]] = None) -> None:
        if env is None:
            env = os.environ

        self.PORT = resolve_port(env.get("PORT"))
        self.ENVIRONMENT = (env.get("APP_ENV") or env.get("NODE_ENV") or "production").strip().lower()
        self.SERVICE_NAME = env.get("SERVICE_NAME", "admin-backend").strip()
        self.LOG_LEVEL = env.get("LOG_LEVEL", "INFO").upper()

        self.DATABASE_URL = env.get("DATABASE_URL", "").strip()
        try:
            self.DATABASE_POOL_SIZE = int(env.get("DATABASE_POOL_SIZE", "5"))
        except ValueError:
            logger.warning("Invalid DATABASE_POOL_SIZE, using 5")
            self.DATABASE_POOL_SIZE = 5

        self.TELEGRAM_BOT_TOKEN = env.get("TELEGRAM_BOT_TOKEN", "").strip()
        self.TELEGRAM_ADMIN_CHAT_ID = env.get("TELEGRAM_ADMIN_CHAT_ID", "").strip()
        self.TELEGRAM_WEBHOOK_SECRET = env.get("TELEGRAM_WEBHOOK_SECRET", "").strip()
        self.WEBHOOK_BASE_URL = env.get("WEBHOOK_BASE_URL", "").strip()
        self.WEBHOOK_PATH = env.get("WEBHOOK_PATH", "webhook/telegram").strip()

        self.CORS_ORIGINS = _split_csv(env.get("CORS_ORIGINS", "")) or list(DEFAULT_CORS_ORIGINS)

        self.ADMIN_USERNAME = env.get("ADMIN_USERNAME", "admin").strip()
        self.ADMIN_PASSWORD = env.get("ADMIN_PASSWORD", "")
        self.JWT_SECRET = env.get("JWT_SECRET", "").strip()
        if not self.JWT_SECRET:
            logger.warning("JWT_SECRET not set – generated a per-process secret, tokens will not survive restarts")
            self.JWT_SECRET = secrets.token_urlsafe(32)
        try:
            self.JWT_EXPIRE_MINUTES = int(env.get("JWT_EXPIRE_MINUTES", "720"))
        except ValueError:
            logger.warning("Invalid JWT_EXPIRE_MINUTES, using 720")
            self.JWT_EXPIRE_MINUTES = 720

        # Capability flags, fixed for the lifetime of the process
        self.persistence_enabled = bool(self.DATABASE_URL)
        self.is_development = self.ENVIRONMENT == "development"

    @property
    def webhook_url(self) -> Optional[str]:
        if not self.WEBHOOK_BASE_URL:
            return None
        return self.WEBHOOK_BASE_URL.rstrip("/") + "/" + self.WEBHOOK_PATH.lstrip("/")


@lru_cache()
def get_settings() -> Settings:
    load_dotenv()
    return Settings()
