import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from arena.ai.constants import ENDED, IN_PROGRESS
from arena.ai.game_state import STATUSES, utcnow
from arena.errors import InvalidArgumentError, InvalidStateError


class Session:
    """A player's session. Points at its current game by id only."""

    def __init__(self, player_id: str):
        if not player_id:
            raise InvalidArgumentError("player_id is required")
        now = utcnow()
        self.id = uuid.uuid4().hex
        self.player_id = player_id
        self.current_game_id: Optional[str] = None
        self.status = IN_PROGRESS
        self.created_at = now
        self.updated_at = now
        self.ended_at: Optional[datetime] = None
        self.version = 0

    def attach_game(self, game_id: str):
        if self.status != IN_PROGRESS:
            raise InvalidStateError("Session is not in progress")
        self.current_game_id = game_id
        self.updated_at = utcnow()

    def end(self):
        if self.status != IN_PROGRESS:
            raise InvalidStateError("Session is not in progress")
        now = utcnow()
        self.status = ENDED
        self.ended_at = now
        self.updated_at = now

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "player_id": self.player_id,
            "current_game_id": self.current_game_id,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "ended_at": self.ended_at,
            "version": self.version,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Session":
        if doc["status"] not in STATUSES:
            raise InvalidArgumentError(f"Invalid session status: {doc['status']!r}")
        session = cls.__new__(cls)
        session.id = doc["_id"]
        session.player_id = doc["player_id"]
        session.current_game_id = doc.get("current_game_id")
        session.status = doc["status"]
        session.created_at = doc["created_at"]
        session.updated_at = doc.get("updated_at") or doc["created_at"]
        session.ended_at = doc.get("ended_at")
        session.version = doc.get("version", 0)
        return session


class SessionCreate(BaseModel):
    player_id: str = Field(..., min_length=1, description="Player owning the session")


class SessionResponse(BaseModel):
    id: str
    player_id: str
    current_game_id: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime
    ended_at: Optional[datetime] = None

    @classmethod
    def from_session(cls, session: Session) -> "SessionResponse":
        return cls(
            id=session.id,
            player_id=session.player_id,
            current_game_id=session.current_game_id,
            status=session.status,
            created_at=session.created_at,
            updated_at=session.updated_at,
            ended_at=session.ended_at,
        )
