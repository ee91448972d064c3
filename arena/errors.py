"""
Error taxonomy shared by the game core, the services and the HTTP layer.

Each error carries the HTTP status the API answers with and a short
machine-readable code that ends up in the JSON error body.
"""


class ArenaError(Exception):
    """Unexpected error"""
    status_code = 500
    code = "internal_error"

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class InvalidArgumentError(ArenaError, ValueError):
    """Invalid argument"""
    status_code = 400
    code = "invalid_argument"


class InvalidStateError(ArenaError):
    """Operation is not valid in the current state"""
    status_code = 409
    code = "invalid_state"


class PositionTakenError(ArenaError):
    """Position is already taken"""
    status_code = 409
    code = "position_taken"


class NotFoundError(ArenaError, LookupError):
    """Resource not found"""
    status_code = 404
    code = "not_found"


class ConcurrencyConflictError(ArenaError):
    """Concurrent update detected, please retry"""
    status_code = 409
    code = "concurrency_conflict"


class NoMovesAvailableError(ArenaError):
    """No moves available on a full board"""
    status_code = 500
    code = "no_moves_available"


class OracleError(ArenaError):
    """Move-suggestion oracle failed"""
    status_code = 502
    code = "oracle_failure"
