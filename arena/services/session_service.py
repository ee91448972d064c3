import logging
import time
from typing import Callable

from arena.ai.constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY, IN_PROGRESS
from arena.ai.game_state import Game
from arena.errors import ConcurrencyConflictError, InvalidArgumentError, InvalidStateError, NotFoundError
from arena.models.session import Session
from arena.services.game_service import GameService

logger = logging.getLogger(__name__)


def session_cache_key(session_id: str) -> str:
    return f"session:{session_id}"


class SessionService:
    """Player sessions and the game each one currently points at.

    Session saves are version checked like game saves: on a conflict the
    session is reloaded, the change is re-applied and the save retried.
    """

    def __init__(self, sessions, cache, game_service: GameService,
                 session_ttl: int = 60 * 60,
                 retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
                 retry_delay: float = DEFAULT_RETRY_DELAY,
                 sleep: Callable[[float], None] = time.sleep):
        self.sessions = sessions
        self.cache = cache
        self.game_service = game_service
        self.session_ttl = session_ttl
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self._sleep = sleep

    def create_session(self, player_id: str) -> Session:
        session = Session(player_id)
        self.sessions.insert(session)
        self._cache_session(session)
        logger.info("Session %s created for player %s", session.id, player_id)
        return session

    def get_session(self, session_id: str) -> Session:
        doc = self.cache.get(session_cache_key(session_id))
        if doc is not None:
            try:
                return Session.from_document(doc)
            except (KeyError, InvalidArgumentError):
                logger.warning("Dropping unreadable cache entry for session %s", session_id)
                self.cache.delete(session_cache_key(session_id))

        session = self._load(session_id)
        self._cache_session(session)
        return session

    def start_new_game(self, session_id: str) -> Game:
        session = self._load(session_id)
        if session.status != IN_PROGRESS:
            raise InvalidStateError("Session is not in progress")
        # The game is stored only once the session points at it
        game = Game(session.player_id)
        self._update_with_retry(session_id, lambda s: s.attach_game(game.id))
        return self.game_service.start_game(game)

    def make_ai_move(self, session_id: str) -> Game:
        session = self.get_session(session_id)
        if not session.current_game_id:
            raise InvalidStateError("No active game in session")
        return self.game_service.make_ai_move(session.current_game_id)

    def end_session(self, session_id: str) -> Session:
        session = self._update_with_retry(session_id, lambda s: s.end())
        logger.info("Session %s ended", session_id)
        return session

    def _load(self, session_id: str) -> Session:
        session = self.sessions.get(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def _update_with_retry(self, session_id: str, apply: Callable[[Session], None]) -> Session:
        attempt = 0
        while True:
            attempt += 1
            session = self._load(session_id)
            apply(session)
            try:
                self.sessions.update(session)
                break
            except ConcurrencyConflictError:
                logger.warning("Concurrent update on session %s (attempt %s/%s)", session_id, attempt, self.retry_attempts)
                if attempt >= self.retry_attempts:
                    raise ConcurrencyConflictError(
                        f"Session {session_id} is being modified concurrently, please retry"
                    )
                self._sleep(self.retry_delay * attempt)

        self._cache_session(session)
        return session

    def _cache_session(self, session: Session):
        self.cache.set_if_newer(session_cache_key(session.id), session.to_document(), self.session_ttl)
