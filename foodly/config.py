"""Runtime configuration for the app, read from the process environment."""
import os
from typing import NamedTuple


class Settings(NamedTuple):
    port: int
    environment: str
    database_path: str
    db_timeout: float
    log_level: str


def _default_database_path(environment: str) -> str:
    # Production containers only guarantee a writable /tmp
    if environment == "production":
        return "/tmp/foodly.db"
    return "./foodly.db"


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ
    environment = env.get("FOODLY_ENV", "development")
    debug = env.get("DEBUG", "false").lower() in ("1", "true", "yes")
    return Settings(
        port=int(env.get("PORT", "3000")),
        environment=environment,
        database_path=env.get("FOODLY_DATABASE_PATH") or _default_database_path(environment),
        db_timeout=float(env.get("FOODLY_DB_TIMEOUT", "5")),
        log_level=env.get("LOG_LEVEL", "DEBUG" if debug else "INFO").upper(),
    )


state = load_settings()


def get_settings() -> Settings:
    return state
