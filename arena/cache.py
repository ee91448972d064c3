"""
Read-through cache for game and session documents. Never the system of record.
"""
import copy
import logging
import threading
import time
from datetime import datetime, timedelta, timezone

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

logger = logging.getLogger(__name__)


class MemoryCache:
    def __init__(self, clock=time.monotonic):
        self._entries = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    def set(self, key, value, ttl=None):
        expires_at = self._clock() + ttl if ttl else None
        with self._lock:
            self._entries[key] = (copy.deepcopy(value), expires_at)

    def set_if_newer(self, key, value, ttl=None):
        """Store ``value`` unless the live entry already has an equal or higher ``version``."""
        expires_at = self._clock() + ttl if ttl else None
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                current, current_expiry = entry
                live = current_expiry is None or self._clock() < current_expiry
                if live and current.get("version", -1) >= value["version"]:
                    return False
            self._entries[key] = (copy.deepcopy(value), expires_at)
            return True

    def delete(self, key):
        with self._lock:
            self._entries.pop(key, None)


class MongoCache:
    """Cache entries in a collection; MongoDB's TTL monitor purges expired ones."""

    def __init__(self, collection):
        self.collection = collection

    def ensure_indexes(self):
        self.collection.create_index([("expires_at", ASCENDING)], expireAfterSeconds=0)

    def get(self, key):
        try:
            doc = self.collection.find_one({"_id": key})
        except PyMongoError as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        if doc is None:
            return None
        # The TTL monitor runs about once a minute
        if doc.get("expires_at") and doc["expires_at"] <= datetime.now(timezone.utc):
            return None
        return doc["value"]

    def set(self, key, value, ttl=None):
        doc = {"value": value, "expires_at": None}
        if ttl:
            doc["expires_at"] = datetime.now(timezone.utc) + timedelta(seconds=ttl)
        try:
            self.collection.replace_one({"_id": key}, doc, upsert=True)
        except PyMongoError as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    def set_if_newer(self, key, value, ttl=None):
        """Upsert ``value`` unless a live entry already holds an equal or higher ``version``."""
        now = datetime.now(timezone.utc)
        doc = {"value": value, "expires_at": now + timedelta(seconds=ttl) if ttl else None}
        query = {
            "_id": key,
            "$or": [
                {"value.version": {"$lt": value["version"]}},
                {"expires_at": {"$lte": now}},
            ],
        }
        try:
            self.collection.replace_one(query, doc, upsert=True)
            return True
        except DuplicateKeyError:
            # A newer version is cached, the upsert collided with it
            return False
        except PyMongoError as e:
            logger.warning("Cache write failed for %s: %s", key, e)
            return False

    def delete(self, key):
        try:
            self.collection.delete_one({"_id": key})
        except PyMongoError as e:
            logger.warning("Cache delete failed for %s: %s", key, e)
