"""
HTTP tests for the tic-tac-toe API, run in process against in-memory backends.
"""
import pytest
from fastapi.testclient import TestClient

from arena.dependencies import get_game_service, get_notification_service, get_session_service, get_suggester
from arena.errors import ConcurrencyConflictError
from arena.main import app
from arena.repositories import InMemoryGameRepository
from arena.services.game_service import GameService


@pytest.fixture
def client(game_service, session_service, suggester, notifications):
    app.dependency_overrides[get_game_service] = lambda: game_service
    app.dependency_overrides[get_session_service] = lambda: session_service
    app.dependency_overrides[get_suggester] = lambda: suggester
    app.dependency_overrides[get_notification_service] = lambda: notifications
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def new_game(client, player_id="p1"):
    response = client.post("/api/games", json={"player_id": player_id})
    assert response.status_code == 201
    return response.json()


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "Arena Tic-Tac-Toe API"}
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "Healthy"


def test_create_and_get_game(client):
    game = new_game(client)
    assert game["board"] == "         "
    assert game["status"] == "InProgress"
    assert game["current_symbol"] == "X"
    assert game["moves"] == []
    fetched = client.get(f"/api/games/{game['id']}").json()
    assert fetched["id"] == game["id"]


def test_create_game_requires_player(client):
    assert client.post("/api/games", json={"player_id": ""}).status_code == 422


def test_play_to_a_win(client):
    game = new_game(client)
    for pos in [0, 3, 1, 4]:
        response = client.post(f"/api/games/{game['id']}/moves", json={"player_id": "p1", "position": pos})
        assert response.status_code == 200
    body = client.post(f"/api/games/{game['id']}/moves", json={"player_id": "p1", "position": 2}).json()
    assert body["board"] == "XXXOO    "
    assert body["status"] == "Ended"
    assert body["winner_id"] == "p1"
    assert body["winner_symbol"] == "X"
    assert body["is_draw"] is False

    moves = client.get(f"/api/games/{game['id']}/moves").json()
    assert [m["position"] for m in moves] == [0, 3, 1, 4, 2]

    response = client.post(f"/api/games/{game['id']}/moves", json={"player_id": "p1", "position": 8})
    assert response.status_code == 409
    assert response.json()["error"] == "invalid_state"


@pytest.mark.parametrize("position", [-1, 9])
def test_out_of_range_move(client, position):
    game = new_game(client)
    response = client.post(f"/api/games/{game['id']}/moves", json={"player_id": "p1", "position": position})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_argument"


def test_taken_position(client):
    game = new_game(client)
    client.post(f"/api/games/{game['id']}/moves", json={"player_id": "p1", "position": 4})
    response = client.post(f"/api/games/{game['id']}/moves", json={"player_id": "p1", "position": 4})
    assert response.status_code == 409
    assert response.json()["error"] == "position_taken"


def test_unknown_game(client):
    response = client.get("/api/games/missing")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
    assert client.post("/api/games/missing/ai-move").status_code == 404


def test_list_games_by_player(client):
    first = new_game(client, "p1")
    new_game(client, "p2")
    games = client.get("/api/games", params={"player_id": "p1"}).json()
    assert [g["id"] for g in games] == [first["id"]]
    assert client.get("/api/games").status_code == 422


def test_ai_move_falls_back_to_center(client):
    game = new_game(client)
    client.post(f"/api/games/{game['id']}/moves", json={"player_id": "p1", "position": 0})
    body = client.post(f"/api/games/{game['id']}/ai-move").json()
    assert body["board"] == "X   O    "
    assert body["moves"][-1]["player_id"] is None
    assert body["current_symbol"] == "X"


def test_suggest_move(client):
    response = client.post("/api/ai/suggest-move", json={"board": "XX  O    ", "symbol": "O"})
    assert response.status_code == 200
    assert response.json() == {"position": 2, "source": "fallback"}


@pytest.mark.parametrize("payload,status", [
    ({"board": "XOXXOOOXX", "symbol": "O"}, 400),
    ({"board": "XX", "symbol": "O"}, 400),
    ({"board": "XX  Q    ", "symbol": "O"}, 400),
    ({"board": "         ", "symbol": "Z"}, 422),
])
def test_suggest_move_rejects_bad_input(client, payload, status):
    assert client.post("/api/ai/suggest-move", json=payload).status_code == status


def test_conflict_answers_with_retry_after(client, cache, publisher, suggester, sleeps):
    class Conflicting(InMemoryGameRepository):
        def update(self, entity):
            raise ConcurrencyConflictError("stale version")

    service = GameService(Conflicting(), cache, publisher, suggester, sleep=sleeps.append)
    app.dependency_overrides[get_game_service] = lambda: service
    game = service.create_game("p1")
    response = client.post(f"/api/games/{game.id}/moves", json={"player_id": "p1", "position": 0})
    assert response.status_code == 409
    assert response.headers["Retry-After"] == "1"
    assert response.json()["error"] == "concurrency_conflict"


def test_session_flow(client):
    response = client.post("/api/sessions", json={"player_id": "p1"})
    assert response.status_code == 201
    session = response.json()
    assert session["current_game_id"] is None

    response = client.post(f"/api/sessions/{session['id']}/ai-move")
    assert response.status_code == 409

    response = client.post(f"/api/sessions/{session['id']}/games")
    assert response.status_code == 201
    game = response.json()
    assert client.get(f"/api/sessions/{session['id']}").json()["current_game_id"] == game["id"]

    body = client.post(f"/api/sessions/{session['id']}/ai-move").json()
    assert body["board"] == "    X    "

    ended = client.post(f"/api/sessions/{session['id']}/end").json()
    assert ended["status"] == "Ended"
    assert client.post(f"/api/sessions/{session['id']}/end").status_code == 409


def test_unknown_session(client):
    assert client.get("/api/sessions/missing").status_code == 404


def test_notification_preferences(client):
    response = client.get("/api/notification-preferences/p1")
    assert response.status_code == 200
    assert response.json()["game_events"] is True
    assert response.json()["volume"] == 50

    body = {"game_events": False, "social_events": True, "sound_effects": True, "volume": 80}
    updated = client.put("/api/notification-preferences/p1", json=body).json()
    assert updated["game_events"] is False
    assert updated["volume"] == 80
    assert client.get("/api/notification-preferences/p1").json()["game_events"] is False

    reset = client.post("/api/notification-preferences/p1/reset").json()
    assert reset["game_events"] is True
    assert client.put("/api/notification-preferences/p1", json={"volume": 10}).status_code == 422


def test_send_notification_respects_preferences(client, publisher):
    body = {"user_id": "p1", "message": "Your turn", "category": "game"}
    assert client.post("/api/notifications/send", json=body).json()["sent"] is True
    client.put("/api/notification-preferences/p1",
               json={"game_events": False, "social_events": True, "sound_effects": True, "volume": 50})
    assert client.post("/api/notifications/send", json=body).json()["sent"] is False
    assert [e.message for t, e in publisher.events if t == "notifications"] == ["Your turn"]


def test_social_notification(client):
    body = {"user_id": "p1", "event_type": "FriendRequest", "source_user_id": "p2"}
    response = client.post("/api/notifications/social", json=body)
    assert response.status_code == 200
    assert response.json() == {"user_id": "p1", "category": "social", "sent": True}
    body["event_type"] = "Poke"
    assert client.post("/api/notifications/social", json=body).status_code == 422
