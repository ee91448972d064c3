# arena/models/notification.py
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from arena.events import SocialEventType

DEFAULT_VOLUME = 50


class NotificationPreferences(BaseModel):
    """What a user wants to be told about. Missing users get these defaults."""
    user_id: str
    game_events: bool = True
    social_events: bool = True
    sound_effects: bool = True
    volume: int = DEFAULT_VOLUME
    email_notifications: bool = False
    push_notifications: bool = True
    tournament_alerts: bool = True
    player_actions: bool = True
    system_updates: bool = True

    def apply(self, update: "NotificationPreferencesUpdate") -> "NotificationPreferences":
        changes = update.model_dump(exclude_none=True)
        changes["volume"] = max(0, min(100, update.volume))
        return self.model_copy(update=changes)

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump()
        doc["_id"] = doc.pop("user_id")
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "NotificationPreferences":
        fields = {k: v for k, v in doc.items() if k != "_id"}
        return cls(user_id=doc["_id"], **fields)


class NotificationPreferencesUpdate(BaseModel):
    game_events: bool
    social_events: bool
    sound_effects: bool
    volume: int = Field(..., description="Clamped to 0-100")
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    tournament_alerts: Optional[bool] = None
    player_actions: Optional[bool] = None
    system_updates: Optional[bool] = None


class SendNotificationRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, description="'game', 'move', 'social' or free-form")


class SocialEventRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="User receiving the notification")
    event_type: SocialEventType
    source_user_id: str = Field(..., min_length=1, description="User who triggered the event")


class NotificationResult(BaseModel):
    user_id: str
    category: str
    sent: bool
