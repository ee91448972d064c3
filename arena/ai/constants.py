# Tic-tac-toe constants
BOARD_CELLS = 9

# Cell values
EMPTY = ' '
PLAYER_X = 'X'
PLAYER_O = 'O'
SYMBOLS = (PLAYER_X, PLAYER_O)

CENTER = 4
CORNERS = (0, 2, 6, 8)

# Rows, columns, diagonals
WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)

# Game / session status values
IN_PROGRESS = "InProgress"
ENDED = "Ended"

# Default agent parameters
DEFAULT_ORACLE_TIMEOUT = 10.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 0.1
