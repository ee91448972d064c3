import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from arena.ai.constants import DEFAULT_ORACLE_TIMEOUT, DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY

load_dotenv()


class Settings(BaseModel):
    mongo_uri: Optional[str] = None
    mongo_db_name: str = "arena"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_timeout: float = DEFAULT_ORACLE_TIMEOUT
    cache_backend: str = "memory"
    game_cache_ttl: int = 30 * 60
    session_cache_ttl: int = 60 * 60
    move_retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    move_retry_delay: float = DEFAULT_RETRY_DELAY
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]


def _env(name, default=None):
    value = os.getenv(name)
    return value if value not in (None, "") else default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    defaults = Settings()
    return Settings(
        mongo_uri=_env("MONGO_URI"),
        mongo_db_name=_env("MONGO_DB_NAME", defaults.mongo_db_name),
        gemini_api_key=_env("GEMINI_API_KEY"),
        gemini_model=_env("GEMINI_MODEL", defaults.gemini_model),
        gemini_timeout=float(_env("GEMINI_TIMEOUT", defaults.gemini_timeout)),
        cache_backend=_env("CACHE_BACKEND", defaults.cache_backend).lower(),
        game_cache_ttl=int(_env("GAME_CACHE_TTL", defaults.game_cache_ttl)),
        session_cache_ttl=int(_env("SESSION_CACHE_TTL", defaults.session_cache_ttl)),
        move_retry_attempts=int(_env("MOVE_RETRY_ATTEMPTS", defaults.move_retry_attempts)),
        move_retry_delay=float(_env("MOVE_RETRY_DELAY", defaults.move_retry_delay)),
        log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
        cors_origins=[o.strip() for o in _env("CORS_ORIGINS", "*").split(",") if o.strip()],
    )
