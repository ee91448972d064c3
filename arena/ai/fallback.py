import random
from typing import Optional, Sequence

from arena.ai.board import empty_positions, is_winning_line, opponent
from arena.ai.constants import CENTER, CORNERS
from arena.errors import NoMovesAvailableError


def _completing_position(cells: Sequence[str], available, symbol: str) -> Optional[int]:
    for pos in available:
        test_board = list(cells)
        test_board[pos] = symbol
        if is_winning_line(test_board, symbol):
            return pos
    return None


def pick_fallback_move(cells: Sequence[str], symbol: str, rng: Optional[random.Random] = None) -> int:
    """
    Pick a move without the oracle: win, block, center, corner, anything.

    Args:
        cells: 9-cell board
        symbol: symbol to move ('X' or 'O')
        rng: random source for the corner / remaining tie-breaks

    Returns:
        int: an empty board position

    Raises:
        NoMovesAvailableError: the board has no empty cell
    """
    rng = rng or random
    available = empty_positions(cells)
    if not available:
        raise NoMovesAvailableError("No moves available on a full board")

    win = _completing_position(cells, available, symbol)
    if win is not None:
        return win

    block = _completing_position(cells, available, opponent(symbol))
    if block is not None:
        return block

    if CENTER in available:
        return CENTER

    corners = [pos for pos in CORNERS if pos in available]
    if corners:
        return rng.choice(corners)

    return rng.choice(available)


class FallbackPolicy:
    """Move policy wrapper so the suggester can take an injectable random source."""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def select_move(self, cells: Sequence[str], symbol: str) -> int:
        return pick_fallback_move(cells, symbol, self.rng)
