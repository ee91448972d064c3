from typing import List

from fastapi import APIRouter, Depends, Path, Query

from arena.ai.board import is_full, parse_board
from arena.config import get_settings
from arena.database import ping
from arena.dependencies import get_game_service, get_notification_service, get_session_service, get_suggester
from arena.errors import InvalidArgumentError
from arena.events import SocialEvent
from arena.models.game import GameCreate, GameResponse, MoveCreate, MoveResponse, SuggestionResponse, SuggestMoveRequest
from arena.models.notification import (
    NotificationPreferences,
    NotificationPreferencesUpdate,
    NotificationResult,
    SendNotificationRequest,
    SocialEventRequest,
)
from arena.models.session import SessionCreate, SessionResponse
from arena.services.notification_service import CATEGORY_SOCIAL

router = APIRouter()


@router.get("/health", tags=["Health"])
def health():
    if not get_settings().mongo_uri:
        database = "in-memory"
    else:
        database = "connected" if ping() else "unavailable"
    return {"status": "Healthy", "database": database}


@router.post("/api/games", response_model=GameResponse, status_code=201, tags=["Games"])
def create_game(body: GameCreate, service=Depends(get_game_service)):
    return GameResponse.from_game(service.create_game(body.player_id))


@router.get("/api/games", response_model=List[GameResponse], tags=["Games"])
def list_games(player_id: str = Query(..., min_length=1), service=Depends(get_game_service)):
    return [GameResponse.from_game(game) for game in service.list_games(player_id)]


@router.get("/api/games/{game_id}", response_model=GameResponse, tags=["Games"])
def get_game(game_id: str = Path(..., description="ID of the game"), service=Depends(get_game_service)):
    return GameResponse.from_game(service.get_game(game_id))


@router.get("/api/games/{game_id}/moves", response_model=List[MoveResponse], tags=["Games"])
def get_moves(game_id: str, service=Depends(get_game_service)):
    return [MoveResponse.from_move(move) for move in service.get_moves(game_id)]


@router.post("/api/games/{game_id}/moves", response_model=GameResponse, tags=["Games"])
def make_move(game_id: str, body: MoveCreate, service=Depends(get_game_service)):
    return GameResponse.from_game(service.make_move(game_id, body.player_id, body.position))


@router.post("/api/games/{game_id}/ai-move", response_model=GameResponse, tags=["Games"])
def make_ai_move(game_id: str, service=Depends(get_game_service)):
    return GameResponse.from_game(service.make_ai_move(game_id))


@router.post("/api/ai/suggest-move", response_model=SuggestionResponse, tags=["AI"])
def suggest_move(body: SuggestMoveRequest, suggester=Depends(get_suggester)):
    """Suggest a move for a board managed by the client; no game state is touched."""
    cells = parse_board(body.board)
    if is_full(cells):
        raise InvalidArgumentError("Board is full")
    suggestion = suggester.suggest_detailed(cells, body.symbol)
    return SuggestionResponse(position=suggestion.position, source=suggestion.source)


@router.post("/api/sessions", response_model=SessionResponse, status_code=201, tags=["Sessions"])
def create_session(body: SessionCreate, service=Depends(get_session_service)):
    return SessionResponse.from_session(service.create_session(body.player_id))


@router.get("/api/sessions/{session_id}", response_model=SessionResponse, tags=["Sessions"])
def get_session(session_id: str, service=Depends(get_session_service)):
    return SessionResponse.from_session(service.get_session(session_id))


@router.post("/api/sessions/{session_id}/games", response_model=GameResponse, status_code=201, tags=["Sessions"])
def start_session_game(session_id: str, service=Depends(get_session_service)):
    return GameResponse.from_game(service.start_new_game(session_id))


@router.post("/api/sessions/{session_id}/ai-move", response_model=GameResponse, tags=["Sessions"])
def make_session_ai_move(session_id: str, service=Depends(get_session_service)):
    return GameResponse.from_game(service.make_ai_move(session_id))


@router.post("/api/sessions/{session_id}/end", response_model=SessionResponse, tags=["Sessions"])
def end_session(session_id: str, service=Depends(get_session_service)):
    return SessionResponse.from_session(service.end_session(session_id))


@router.get("/api/notification-preferences/{user_id}", response_model=NotificationPreferences, tags=["Notifications"])
def get_notification_preferences(user_id: str, service=Depends(get_notification_service)):
    return service.get_preferences(user_id)


@router.put("/api/notification-preferences/{user_id}", response_model=NotificationPreferences, tags=["Notifications"])
def update_notification_preferences(user_id: str, body: NotificationPreferencesUpdate,
                                    service=Depends(get_notification_service)):
    return service.update_preferences(user_id, body)


@router.post("/api/notification-preferences/{user_id}/reset", response_model=NotificationPreferences,
             tags=["Notifications"])
def reset_notification_preferences(user_id: str, service=Depends(get_notification_service)):
    return service.reset_preferences(user_id)


@router.post("/api/notifications/send", response_model=NotificationResult, tags=["Notifications"])
def send_notification(body: SendNotificationRequest, service=Depends(get_notification_service)):
    sent = service.send(body.user_id, body.message, body.category)
    return NotificationResult(user_id=body.user_id, category=body.category, sent=sent)


@router.post("/api/notifications/social", response_model=NotificationResult, tags=["Notifications"])
def send_social_event(body: SocialEventRequest, service=Depends(get_notification_service)):
    event = SocialEvent(user_id=body.user_id, event_type=body.event_type, source_user_id=body.source_user_id)
    sent = service.handle_social_event(event)
    return NotificationResult(user_id=body.user_id, category=CATEGORY_SOCIAL, sent=sent)
