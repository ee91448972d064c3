import logging
from functools import lru_cache

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from arena.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_db():
    settings = get_settings()
    client = MongoClient(settings.mongo_uri, tz_aware=True)
    return client[settings.mongo_db_name]


def get_games_collection():
    db = get_db()
    return db["games"]


def get_sessions_collection():
    db = get_db()
    return db["sessions"]


def get_events_collection():
    db = get_db()
    return db["events"]


def get_cache_collection():
    db = get_db()
    return db["cache"]


def get_preferences_collection():
    db = get_db()
    return db["notification_preferences"]


def ping() -> bool:
    try:
        get_db().client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.warning("MongoDB ping failed: %s", e)
        return False
