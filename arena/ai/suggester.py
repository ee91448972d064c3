"""
AI move selection: ask the oracle, validate its answer, fall back to the
heuristic policy whenever the answer is missing, late or unusable.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import NamedTuple, Optional, Sequence

from arena.ai.board import board_to_string, empty_positions
from arena.ai.constants import BOARD_CELLS, DEFAULT_ORACLE_TIMEOUT, EMPTY
from arena.ai.fallback import FallbackPolicy
from arena.ai.game_state import Game
from arena.errors import NoMovesAvailableError, OracleError

logger = logging.getLogger(__name__)

SOURCE_ORACLE = "oracle"
SOURCE_FALLBACK = "fallback"

_VALID_DIGITS = "".join(str(i) for i in range(BOARD_CELLS))


class Suggestion(NamedTuple):
    position: int
    source: str
    raw: Optional[str] = None


def parse_position(text: Optional[str]) -> Optional[int]:
    """Read a board position out of the oracle's text answer.

    A plain integer answer wins; otherwise the first digit 0-8 in the text
    is used. Returns None when nothing usable is found.
    """
    if not text:
        return None
    try:
        position = int(text.strip())
        if 0 <= position < BOARD_CELLS:
            return position
    except ValueError:
        pass
    for char in text:
        if char in _VALID_DIGITS:
            return int(char)
    return None


class AiMoveSuggester:
    def __init__(self, oracle, policy: Optional[FallbackPolicy] = None,
                 timeout: float = DEFAULT_ORACLE_TIMEOUT, executor: Optional[ThreadPoolExecutor] = None):
        self.oracle = oracle
        self.policy = policy or FallbackPolicy()
        self.timeout = timeout
        self.executor = executor or ThreadPoolExecutor(max_workers=8, thread_name_prefix="oracle")

    def suggest_move(self, game: Game) -> int:
        return self.suggest_detailed(game.board, game.current_symbol).position

    def suggest_for_board(self, cells: Sequence[str], symbol: str) -> int:
        return self.suggest_detailed(cells, symbol).position

    def suggest_detailed(self, cells: Sequence[str], symbol: str) -> Suggestion:
        if not empty_positions(cells):
            raise NoMovesAvailableError("No moves available on a full board")

        board = board_to_string(cells)
        raw = None
        try:
            raw = self._ask_oracle(board, symbol)
            position = parse_position(raw)
            if position is None:
                raise OracleError(f"Unparsable oracle answer: {raw!r}")
            if cells[position] != EMPTY:
                raise OracleError(f"Oracle picked occupied position {position}")
            logger.info("Oracle suggested position %s for %s on %r", position, symbol, board)
            return Suggestion(position, SOURCE_ORACLE, raw)
        except OracleError as e:
            logger.warning("Oracle unusable, using fallback: %s", e)
        except Exception:
            logger.exception("Oracle call crashed, using fallback")

        position = self.policy.select_move(cells, symbol)
        logger.info("Fallback picked position %s for %s on %r", position, symbol, board)
        return Suggestion(position, SOURCE_FALLBACK, raw)

    def _ask_oracle(self, board: str, symbol: str) -> str:
        future = self.executor.submit(self.oracle.suggest, board, symbol, self.timeout)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise OracleError(f"Oracle timed out after {self.timeout}s") from e
