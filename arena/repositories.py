"""
Game and session repositories.

Both backends keep a ``version`` counter on every document. ``update``
compares the caller's version with the stored one and bumps it on success;
a mismatch means another writer got there first and raises
``ConcurrencyConflictError``.
"""
import copy
import logging
import threading
from typing import Dict, List, Optional

from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from arena.ai.game_state import Game
from arena.errors import ConcurrencyConflictError, InvalidStateError, NotFoundError
from arena.models.notification import NotificationPreferences
from arena.models.session import Session

logger = logging.getLogger(__name__)


class InMemoryRepository:
    model = None

    def __init__(self):
        self._docs: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def get(self, entity_id: str):
        with self._lock:
            doc = self._docs.get(entity_id)
            doc = copy.deepcopy(doc) if doc is not None else None
        return self.model.from_document(doc) if doc is not None else None

    def insert(self, entity):
        with self._lock:
            if entity.id in self._docs:
                raise InvalidStateError(f"{self.model.__name__} {entity.id} already exists")
            entity.version = 1
            self._docs[entity.id] = copy.deepcopy(entity.to_document())
        return entity

    def update(self, entity):
        with self._lock:
            stored = self._docs.get(entity.id)
            if stored is None:
                raise NotFoundError(f"{self.model.__name__} {entity.id} not found")
            if stored["version"] != entity.version:
                raise ConcurrencyConflictError(
                    f"{self.model.__name__} {entity.id} was modified concurrently "
                    f"(expected version {entity.version}, found {stored['version']})"
                )
            doc = copy.deepcopy(entity.to_document())
            doc["version"] = entity.version + 1
            self._docs[entity.id] = doc
            entity.version += 1
        return entity

    def list_by_player(self, player_id: str) -> List:
        with self._lock:
            docs = [copy.deepcopy(d) for d in self._docs.values() if d["player_id"] == player_id]
        docs.sort(key=lambda d: d["created_at"], reverse=True)
        return [self.model.from_document(d) for d in docs]


class MongoRepository:
    model = None

    def __init__(self, collection):
        self.collection = collection

    def get(self, entity_id: str):
        doc = self.collection.find_one({"_id": entity_id})
        return self.model.from_document(doc) if doc is not None else None

    def insert(self, entity):
        entity.version = 1
        try:
            self.collection.insert_one(entity.to_document())
        except DuplicateKeyError as e:
            raise InvalidStateError(f"{self.model.__name__} {entity.id} already exists") from e
        return entity

    def update(self, entity):
        doc = entity.to_document()
        doc.pop("_id")
        doc["version"] = entity.version + 1
        result = self.collection.update_one(
            {"_id": entity.id, "version": entity.version},
            {"$set": doc},
        )
        if result.matched_count == 0:
            if self.collection.count_documents({"_id": entity.id}, limit=1) == 0:
                raise NotFoundError(f"{self.model.__name__} {entity.id} not found")
            logger.info("Version conflict on %s %s at version %s", self.model.__name__, entity.id, entity.version)
            raise ConcurrencyConflictError(f"{self.model.__name__} {entity.id} was modified concurrently")
        entity.version += 1
        return entity

    def list_by_player(self, player_id: str) -> List:
        cursor = self.collection.find({"player_id": player_id}).sort("created_at", DESCENDING)
        return [self.model.from_document(doc) for doc in cursor]

    def ensure_indexes(self):
        self.collection.create_index("player_id")


class InMemoryGameRepository(InMemoryRepository):
    model = Game


class MongoGameRepository(MongoRepository):
    model = Game


class InMemorySessionRepository(InMemoryRepository):
    model = Session


class MongoSessionRepository(MongoRepository):
    model = Session


class InMemoryPreferencesRepository:
    """Notification preferences keyed by user id. Last write wins."""

    def __init__(self):
        self._docs: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[NotificationPreferences]:
        with self._lock:
            doc = copy.deepcopy(self._docs.get(user_id))
        return NotificationPreferences.from_document(doc) if doc is not None else None

    def save(self, preferences: NotificationPreferences) -> NotificationPreferences:
        with self._lock:
            self._docs[preferences.user_id] = preferences.to_document()
        return preferences


class MongoPreferencesRepository:
    def __init__(self, collection):
        self.collection = collection

    def get(self, user_id: str) -> Optional[NotificationPreferences]:
        doc = self.collection.find_one({"_id": user_id})
        return NotificationPreferences.from_document(doc) if doc is not None else None

    def save(self, preferences: NotificationPreferences) -> NotificationPreferences:
        self.collection.replace_one({"_id": preferences.user_id}, preferences.to_document(), upsert=True)
        return preferences
