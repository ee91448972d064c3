import logging
from typing import Optional

import requests

from arena.ai.board import render_board
from arena.errors import OracleError

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PROMPT_TEMPLATE = """You are playing tic-tac-toe as '{symbol}'.

Board:
{board}

Positions (0-8):
0|1|2
3|4|5
6|7|8

Priorities: win if you can, otherwise block the opponent, otherwise take the
center or a corner. Answer with the single position number (0-8) of an empty cell."""


def build_prompt(board: str, symbol: str) -> str:
    return PROMPT_TEMPLATE.format(symbol=symbol, board=render_board(board))


class GeminiOracle:
    """Move-suggestion oracle backed by the Gemini ``generateContent`` API.

    ``suggest`` returns the model's raw text answer; interpreting it is the
    suggester's job. Any transport failure, non-2xx status or unexpected
    payload shape is raised as ``OracleError``.
    """

    def __init__(self, api_key: Optional[str], model: str = "gemini-2.0-flash", session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.model = model
        self.session = session or requests.Session()

    def suggest(self, board: str, symbol: str, timeout: float) -> str:
        if not self.api_key:
            raise OracleError("Gemini API key is not configured")

        body = {
            "contents": [{"parts": [{"text": build_prompt(board, symbol)}]}],
            "generationConfig": {
                "temperature": 0.9,
                "maxOutputTokens": 100,
                "candidateCount": 1,
            },
        }
        try:
            response = self.session.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json=body,
                timeout=timeout,
            )
        except requests.RequestException as e:
            raise OracleError(f"Gemini request failed: {e}") from e

        if not response.ok:
            raise OracleError(f"Gemini returned HTTP {response.status_code}: {response.text[:200]}")

        try:
            payload = response.json()
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise OracleError("Unexpected Gemini response shape") from e

        logger.debug("Gemini answered %r for board %r as %s", text, board, symbol)
        return text.strip()
