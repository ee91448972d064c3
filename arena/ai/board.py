#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Board module for tic-tac-toe.

Pure functions over a 9-cell board. A board is any sequence of 9 cells
(list, tuple or the 9-character wire string) holding ' ', 'X' or 'O'.
"""
from typing import List, Sequence

import numpy as np

from arena.ai.constants import BOARD_CELLS, EMPTY, PLAYER_O, PLAYER_X, SYMBOLS, WIN_LINES
from arena.errors import InvalidArgumentError

_LINES = np.array(WIN_LINES)


def is_winning_line(cells: Sequence[str], symbol: str) -> bool:
    """Check whether any row, column or diagonal is entirely ``symbol``.

    Args:
        cells: 9-cell board
        symbol: 'X' or 'O'; an empty symbol never wins

    Returns:
        bool: True if a line of three ``symbol`` exists
    """
    if symbol not in SYMBOLS:
        return False
    board = np.array(list(cells))
    return bool(np.any(np.all(board[_LINES] == symbol, axis=1)))


def is_full(cells: Sequence[str]) -> bool:
    return EMPTY not in cells


def winning_symbol(cells: Sequence[str]):
    for symbol in SYMBOLS:
        if is_winning_line(cells, symbol):
            return symbol
    return None


def empty_positions(cells: Sequence[str]) -> List[int]:
    return [i for i, cell in enumerate(cells) if cell == EMPTY]


def opponent(symbol: str) -> str:
    return PLAYER_O if symbol == PLAYER_X else PLAYER_X


def new_board() -> List[str]:
    return [EMPTY] * BOARD_CELLS


def parse_board(text: str) -> List[str]:
    """Validate a 9-character wire board and return it as a list of cells."""
    if not isinstance(text, str) or len(text) != BOARD_CELLS:
        raise InvalidArgumentError("Board must be a string of exactly 9 characters")
    cells = list(text)
    for cell in cells:
        if cell not in (EMPTY,) + SYMBOLS:
            raise InvalidArgumentError(f"Invalid board cell: {cell!r}")
    return cells


def parse_symbol(symbol: str) -> str:
    if symbol not in SYMBOLS:
        raise InvalidArgumentError(f"Invalid symbol: {symbol!r}")
    return symbol


def board_to_string(cells: Sequence[str]) -> str:
    return "".join(cells)


def render_board(cells: Sequence[str]) -> str:
    """Render the board as three rows, e.g. ``X|O| ``."""
    rows = [cells[r * 3:r * 3 + 3] for r in range(3)]
    return "\n".join("|".join(row) for row in rows)
