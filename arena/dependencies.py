"""
Collaborator wiring for the API. MongoDB backs everything when ``MONGO_URI``
is set; otherwise games, sessions, cache and events stay in process.
"""
import logging
from functools import lru_cache

from arena.ai.gemini import GeminiOracle
from arena.ai.suggester import AiMoveSuggester
from arena.cache import MemoryCache, MongoCache
from arena.config import get_settings
from arena.database import (
    get_cache_collection,
    get_events_collection,
    get_games_collection,
    get_preferences_collection,
    get_sessions_collection,
)
from arena.events import InProcessEventPublisher, MongoEventPublisher
from arena.repositories import (
    InMemoryGameRepository,
    InMemoryPreferencesRepository,
    InMemorySessionRepository,
    MongoGameRepository,
    MongoPreferencesRepository,
    MongoSessionRepository,
)
from arena.services.game_service import GameService
from arena.services.notification_service import NotificationService
from arena.services.session_service import SessionService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_publisher():
    settings = get_settings()
    if settings.mongo_uri:
        publisher = MongoEventPublisher(get_events_collection())
    else:
        publisher = InProcessEventPublisher()
    return publisher


@lru_cache(maxsize=1)
def get_preferences_repository():
    if get_settings().mongo_uri:
        return MongoPreferencesRepository(get_preferences_collection())
    return InMemoryPreferencesRepository()


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    return NotificationService(get_publisher(), get_preferences_repository()).register()


@lru_cache(maxsize=1)
def get_cache():
    settings = get_settings()
    if settings.cache_backend == "mongo" and settings.mongo_uri:
        cache = MongoCache(get_cache_collection())
        cache.ensure_indexes()
        return cache
    return MemoryCache()


@lru_cache(maxsize=1)
def get_game_repository():
    if get_settings().mongo_uri:
        repository = MongoGameRepository(get_games_collection())
        repository.ensure_indexes()
        return repository
    logger.warning("MONGO_URI not set, games are kept in memory")
    return InMemoryGameRepository()


@lru_cache(maxsize=1)
def get_session_repository():
    if get_settings().mongo_uri:
        repository = MongoSessionRepository(get_sessions_collection())
        repository.ensure_indexes()
        return repository
    return InMemorySessionRepository()


@lru_cache(maxsize=1)
def get_suggester() -> AiMoveSuggester:
    settings = get_settings()
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set, AI moves will use the fallback policy")
    oracle = GeminiOracle(settings.gemini_api_key, model=settings.gemini_model)
    return AiMoveSuggester(oracle, timeout=settings.gemini_timeout)


@lru_cache(maxsize=1)
def get_game_service() -> GameService:
    settings = get_settings()
    # Notifications subscribe to the game events published below
    get_notification_service()
    return GameService(
        get_game_repository(),
        get_cache(),
        get_publisher(),
        get_suggester(),
        game_ttl=settings.game_cache_ttl,
        retry_attempts=settings.move_retry_attempts,
        retry_delay=settings.move_retry_delay,
    )


@lru_cache(maxsize=1)
def get_session_service() -> SessionService:
    settings = get_settings()
    return SessionService(
        get_session_repository(),
        get_cache(),
        get_game_service(),
        session_ttl=settings.session_cache_ttl,
        retry_attempts=settings.move_retry_attempts,
        retry_delay=settings.move_retry_delay,
    )
