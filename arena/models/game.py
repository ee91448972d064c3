# arena/models/game.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from arena.ai.game_state import Game, Move

Symbol = Literal["X", "O"]


class GameCreate(BaseModel):
    player_id: str = Field(..., min_length=1, description="Player starting the game")


class MoveCreate(BaseModel):
    player_id: str = Field(..., min_length=1, description="Player making the move")
    position: int = Field(..., description="Board index to play (0-8)")


class SuggestMoveRequest(BaseModel):
    board: str = Field("         ", description="9 characters: 'X', 'O' or space, row by row")
    symbol: Symbol = Field("O", description="Symbol to move")


class SuggestionResponse(BaseModel):
    position: int
    source: str


class MoveResponse(BaseModel):
    game_id: str
    position: int
    symbol: Symbol
    player_id: Optional[str] = None
    timestamp: datetime

    @classmethod
    def from_move(cls, move: Move) -> "MoveResponse":
        return cls(
            game_id=move.game_id,
            position=move.position,
            symbol=move.symbol,
            player_id=move.player_id,
            timestamp=move.timestamp,
        )


class GameResponse(BaseModel):
    id: str
    player_id: str
    board: str
    current_symbol: Symbol
    status: str
    winner_id: Optional[str] = None
    winner_symbol: Optional[Symbol] = None
    is_draw: bool = False
    created_at: datetime
    updated_at: datetime
    ended_at: Optional[datetime] = None
    moves: List[MoveResponse] = []

    @classmethod
    def from_game(cls, game: Game) -> "GameResponse":
        return cls(
            id=game.id,
            player_id=game.player_id,
            board=game.board_string,
            current_symbol=game.current_symbol,
            status=game.status,
            winner_id=game.winner_id,
            winner_symbol=game.winner_symbol,
            is_draw=game.is_draw,
            created_at=game.created_at,
            updated_at=game.updated_at,
            ended_at=game.ended_at,
            moves=[MoveResponse.from_move(m) for m in game.moves],
        )
