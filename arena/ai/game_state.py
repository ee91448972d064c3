"""
Game state machine for tic-tac-toe.

``Game`` owns the board, the turn and status bookkeeping and the append-only
move history. It knows nothing about storage, caching or events; callers
persist and publish after a successful ``make_move``.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from arena.ai.board import board_to_string, is_full, is_winning_line, new_board, opponent, parse_board, parse_symbol
from arena.ai.constants import BOARD_CELLS, EMPTY, ENDED, IN_PROGRESS, PLAYER_X
from arena.errors import InvalidArgumentError, InvalidStateError, PositionTakenError

STATUSES = (IN_PROGRESS, ENDED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Move:
    game_id: str
    position: int
    symbol: str
    player_id: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def is_ai(self) -> bool:
        return self.player_id is None

    def to_document(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "position": self.position,
            "symbol": self.symbol,
            "player_id": self.player_id,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Move":
        position = doc["position"]
        if not isinstance(position, int) or not 0 <= position < BOARD_CELLS:
            raise InvalidArgumentError(f"Invalid stored move position: {position!r}")
        return cls(
            game_id=doc["game_id"],
            position=position,
            symbol=parse_symbol(doc["symbol"]),
            player_id=doc.get("player_id"),
            timestamp=doc["timestamp"],
        )


class Game:
    """A single tic-tac-toe game.

    New games are built with ``Game(player_id)``; stored games come back
    through ``Game.restore`` / ``Game.from_document``, which validate the
    stored fields instead of replaying moves.
    """

    def __init__(self, player_id: str):
        if not player_id:
            raise InvalidArgumentError("player_id is required")
        now = utcnow()
        self.id = uuid.uuid4().hex
        self.player_id = player_id
        self.board: List[str] = new_board()
        self.status = IN_PROGRESS
        self.current_symbol = PLAYER_X
        self.winner_id: Optional[str] = None
        self.winner_symbol: Optional[str] = None
        self.created_at = now
        self.updated_at = now
        self.ended_at: Optional[datetime] = None
        self.moves: List[Move] = []
        # Optimistic concurrency token, owned by the repository
        self.version = 0

    @classmethod
    def restore(cls, *, id, player_id, board, status, current_symbol, winner_id=None, winner_symbol=None,
                created_at, updated_at=None, ended_at=None, moves=(), version=0) -> "Game":
        if status not in STATUSES:
            raise InvalidArgumentError(f"Invalid game status: {status!r}")
        if status == IN_PROGRESS and (winner_id or winner_symbol or ended_at):
            raise InvalidArgumentError("A game in progress cannot have a winner or an end time")
        game = cls.__new__(cls)
        game.id = id
        game.player_id = player_id
        game.board = parse_board(board if isinstance(board, str) else board_to_string(board))
        game.status = status
        game.current_symbol = parse_symbol(current_symbol)
        game.winner_id = winner_id
        game.winner_symbol = parse_symbol(winner_symbol) if winner_symbol else None
        game.created_at = created_at
        game.updated_at = updated_at or created_at
        game.ended_at = ended_at
        game.moves = list(moves)
        game.version = version
        return game

    @property
    def board_string(self) -> str:
        return board_to_string(self.board)

    @property
    def is_over(self) -> bool:
        return self.status == ENDED

    @property
    def is_draw(self) -> bool:
        return self.is_over and self.winner_symbol is None

    def make_move(self, position: int, player_id: Optional[str] = None) -> Move:
        """Place the current symbol at ``position``.

        Args:
            position: board index 0-8
            player_id: acting player, or None for an AI-authored move

        Returns:
            Move: the move appended to the history

        Raises:
            InvalidStateError: the game has already ended
            InvalidArgumentError: position outside 0-8
            PositionTakenError: the cell is occupied
        """
        if self.status != IN_PROGRESS:
            raise InvalidStateError("Game is not in progress")
        if isinstance(position, bool) or not isinstance(position, int) or not 0 <= position < BOARD_CELLS:
            raise InvalidArgumentError(f"Invalid position: {position!r}")
        if self.board[position] != EMPTY:
            raise PositionTakenError(f"Position {position} is already taken")

        now = utcnow()
        symbol = self.current_symbol
        self.board[position] = symbol
        move = Move(self.id, position, symbol, player_id, now)
        self.moves.append(move)
        self.updated_at = now

        if is_winning_line(self.board, symbol):
            self.status = ENDED
            self.winner_id = player_id
            self.winner_symbol = symbol
            self.ended_at = now
        elif is_full(self.board):
            self.status = ENDED
            self.ended_at = now
        else:
            self.current_symbol = opponent(symbol)
        return move

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "player_id": self.player_id,
            "board": self.board_string,
            "status": self.status,
            "current_symbol": self.current_symbol,
            "winner_id": self.winner_id,
            "winner_symbol": self.winner_symbol,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "ended_at": self.ended_at,
            "moves": [move.to_document() for move in self.moves],
            "version": self.version,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Game":
        return cls.restore(
            id=doc["_id"],
            player_id=doc["player_id"],
            board=doc["board"],
            status=doc["status"],
            current_symbol=doc["current_symbol"],
            winner_id=doc.get("winner_id"),
            winner_symbol=doc.get("winner_symbol"),
            created_at=doc["created_at"],
            updated_at=doc.get("updated_at"),
            ended_at=doc.get("ended_at"),
            moves=[Move.from_document(m) for m in doc.get("moves", [])],
            version=doc.get("version", 0),
        )

    def __repr__(self):
        return f"Game({self.id}, board={self.board_string!r}, status={self.status}, turn={self.current_symbol})"
