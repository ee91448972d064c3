import logging
import time
from typing import Callable, List, Optional, Tuple

from arena.ai.constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY, IN_PROGRESS
from arena.ai.game_state import Game, Move
from arena.ai.suggester import AiMoveSuggester, Suggestion
from arena.errors import ConcurrencyConflictError, InvalidArgumentError, InvalidStateError, NotFoundError
from arena.events import (
    TOPIC_AI_MOVE,
    TOPIC_GAME_ENDED,
    TOPIC_GAME_STARTED,
    TOPIC_MOVE_MADE,
    AiMoveEvent,
    GameEndedEvent,
    GameStartedEvent,
    MoveMadeEvent,
)

logger = logging.getLogger(__name__)


def game_cache_key(game_id: str) -> str:
    return f"game:{game_id}"


class GameService:
    """Loads games, applies moves, persists them and publishes the outcome.

    Saves use optimistic concurrency: when the repository reports a version
    conflict the game is reloaded from the store (never the cache), the move
    is validated and applied again, and the save is retried with a linear
    backoff.
    """

    def __init__(self, games, cache, publisher, suggester: AiMoveSuggester,
                 game_ttl: int = 30 * 60,
                 retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
                 retry_delay: float = DEFAULT_RETRY_DELAY,
                 sleep: Callable[[float], None] = time.sleep):
        self.games = games
        self.cache = cache
        self.publisher = publisher
        self.suggester = suggester
        self.game_ttl = game_ttl
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self._sleep = sleep

    def create_game(self, player_id: str) -> Game:
        return self.start_game(Game(player_id))

    def start_game(self, game: Game) -> Game:
        """Persist a freshly built game, cache it and announce it."""
        self.games.insert(game)
        self._cache_game(game)
        logger.info("Game %s started by player %s", game.id, game.player_id)
        self.publisher.publish(TOPIC_GAME_STARTED, GameStartedEvent(game_id=game.id, player_id=game.player_id))
        return game

    def get_game(self, game_id: str) -> Game:
        doc = self.cache.get(game_cache_key(game_id))
        if doc is not None:
            try:
                return Game.from_document(doc)
            except (KeyError, InvalidArgumentError):
                logger.warning("Dropping unreadable cache entry for game %s", game_id)
                self.cache.delete(game_cache_key(game_id))

        game = self._load(game_id)
        self._cache_game(game)
        return game

    def list_games(self, player_id: str) -> List[Game]:
        return self.games.list_by_player(player_id)

    def get_moves(self, game_id: str) -> List[Move]:
        return list(self.get_game(game_id).moves)

    def make_move(self, game_id: str, player_id: str, position: int) -> Game:
        game, move = self._apply_with_retry(game_id, lambda g: g.make_move(position, player_id))
        self._after_move(game, move)
        return game

    def make_ai_move(self, game_id: str) -> Game:
        suggestions: List[Suggestion] = []

        def apply(game: Game) -> Move:
            if game.status != IN_PROGRESS:
                raise InvalidStateError("Game is not in progress")
            suggestion = self.suggester.suggest_detailed(game.board, game.current_symbol)
            suggestions.append(suggestion)
            return game.make_move(suggestion.position, None)

        game, move = self._apply_with_retry(game_id, apply)
        suggestion = suggestions[-1]
        self._after_move(game, move, AiMoveEvent(
            game_id=game.id,
            position=move.position,
            source=suggestion.source,
            raw_response=suggestion.raw,
        ))
        return game

    def _load(self, game_id: str) -> Game:
        game = self.games.get(game_id)
        if game is None:
            raise NotFoundError(f"Game {game_id} not found")
        return game

    def _apply_with_retry(self, game_id: str, apply: Callable[[Game], Move]) -> Tuple[Game, Move]:
        attempt = 0
        while True:
            attempt += 1
            game = self._load(game_id)
            move = apply(game)
            try:
                self.games.update(game)
                return game, move
            except ConcurrencyConflictError:
                logger.warning("Concurrent update on game %s (attempt %s/%s)", game_id, attempt, self.retry_attempts)
                if attempt >= self.retry_attempts:
                    raise ConcurrencyConflictError(
                        f"Game {game_id} is being modified concurrently, please retry"
                    )
                self._sleep(self.retry_delay * attempt)

    def _after_move(self, game: Game, move: Move, ai_event: Optional[AiMoveEvent] = None):
        self._cache_game(game)
        logger.info("Move %s=%s on game %s by %s", move.position, move.symbol, game.id, move.player_id or "AI")
        if ai_event is not None:
            self.publisher.publish(TOPIC_AI_MOVE, ai_event)
        self.publisher.publish(TOPIC_MOVE_MADE, MoveMadeEvent(
            game_id=game.id,
            player_id=move.player_id,
            position=move.position,
            symbol=move.symbol,
            board=game.board_string,
        ))
        if game.is_over:
            logger.info("Game %s ended, winner=%s", game.id, game.winner_id)
            self.publisher.publish(TOPIC_GAME_ENDED, GameEndedEvent(
                game_id=game.id,
                player_id=game.player_id,
                winner_id=game.winner_id,
                winner_symbol=game.winner_symbol,
                is_draw=game.is_draw,
            ))

    def _cache_game(self, game: Game):
        # Writers can finish out of order; an older version never replaces a newer one
        self.cache.set_if_newer(game_cache_key(game.id), game.to_document(), self.game_ttl)
