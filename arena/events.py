"""
Domain events and the fire-and-forget publishers that carry them.

Publishing never raises into the caller: storage or handler failures are
logged and dropped.
"""
import logging
from collections import defaultdict
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field
from pymongo.errors import PyMongoError

from arena.ai.game_state import utcnow

logger = logging.getLogger(__name__)

TOPIC_GAME_STARTED = "game-started"
TOPIC_MOVE_MADE = "move-made"
TOPIC_GAME_ENDED = "game-ended"
TOPIC_AI_MOVE = "ai-move"
TOPIC_NOTIFICATIONS = "notifications"
TOPIC_SOCIAL = "social-events"


class GameStartedEvent(BaseModel):
    game_id: str
    player_id: str
    timestamp: datetime = Field(default_factory=utcnow)


class MoveMadeEvent(BaseModel):
    game_id: str
    player_id: Optional[str] = None
    position: int
    symbol: str
    board: str
    timestamp: datetime = Field(default_factory=utcnow)


class GameEndedEvent(BaseModel):
    game_id: str
    player_id: str
    winner_id: Optional[str] = None
    winner_symbol: Optional[str] = None
    is_draw: bool
    timestamp: datetime = Field(default_factory=utcnow)


class AiMoveEvent(BaseModel):
    game_id: str
    position: int
    source: str
    raw_response: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)


class NotificationMessage(BaseModel):
    user_id: str
    message: str
    category: str
    timestamp: datetime = Field(default_factory=utcnow)


class SocialEventType(str, Enum):
    FRIEND_REQUEST = "FriendRequest"
    FRIEND_REQUEST_ACCEPTED = "FriendRequestAccepted"
    GAME_INVITATION = "GameInvitation"


class SocialEvent(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    user_id: str
    event_type: SocialEventType
    source_user_id: str
    timestamp: datetime = Field(default_factory=utcnow)


class InProcessEventPublisher:
    """Dispatch events to handlers subscribed in this process."""

    def __init__(self):
        self._handlers = defaultdict(list)

    def subscribe(self, topic: str, handler: Callable[[BaseModel], None]):
        self._handlers[topic].append(handler)

    def publish(self, topic: str, event: BaseModel):
        logger.info("Publishing %s: %s", topic, event.model_dump_json())
        for handler in list(self._handlers.get(topic, ())):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed for topic %s", handler, topic)


class MongoEventPublisher(InProcessEventPublisher):
    """Append every event to a collection, then dispatch it locally."""

    def __init__(self, collection):
        super().__init__()
        self.collection = collection

    def publish(self, topic: str, event: BaseModel):
        try:
            self.collection.insert_one({
                "topic": topic,
                "payload": event.model_dump(),
                "published_at": utcnow(),
            })
        except PyMongoError as e:
            logger.warning("Could not store %s event: %s", topic, e)
        super().publish(topic, event)
