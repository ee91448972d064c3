import random
import time

import pytest

from arena.ai.fallback import FallbackPolicy
from arena.ai.suggester import AiMoveSuggester
from arena.cache import MemoryCache
from arena.errors import OracleError
from arena.events import InProcessEventPublisher
from arena.repositories import InMemoryGameRepository, InMemoryPreferencesRepository, InMemorySessionRepository
from arena.services.game_service import GameService
from arena.services.notification_service import NotificationService
from arena.services.session_service import SessionService


class RecordingPublisher(InProcessEventPublisher):
    def __init__(self):
        super().__init__()
        self.events = []

    def publish(self, topic, event):
        self.events.append((topic, event))
        super().publish(topic, event)

    def topics(self):
        return [topic for topic, _ in self.events]


class ScriptedOracle:
    """Oracle answering with a fixed text, or raising a fixed error."""

    def __init__(self, answer=None, error=None, delay=0.0):
        self.answer = answer
        self.error = error
        self.delay = delay
        self.calls = []

    def suggest(self, board, symbol, timeout):
        self.calls.append((board, symbol, timeout))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.answer


class DownOracle(ScriptedOracle):
    def __init__(self):
        super().__init__(error=OracleError("oracle unreachable"))


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def games():
    return InMemoryGameRepository()


@pytest.fixture
def sessions():
    return InMemorySessionRepository()


@pytest.fixture
def oracle():
    return DownOracle()


@pytest.fixture
def suggester(oracle):
    return AiMoveSuggester(oracle, policy=FallbackPolicy(seed=1), timeout=0.5)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def game_service(games, cache, publisher, suggester, sleeps):
    return GameService(games, cache, publisher, suggester, sleep=sleeps.append)


@pytest.fixture
def session_service(sessions, cache, game_service, sleeps):
    return SessionService(sessions, cache, game_service, sleep=sleeps.append)


@pytest.fixture
def preferences():
    return InMemoryPreferencesRepository()


@pytest.fixture
def notifications(publisher, preferences):
    return NotificationService(publisher, preferences).register()


@pytest.fixture
def rng():
    return random.Random(42)
