import pytest

from arena.events import (
    TOPIC_NOTIFICATIONS,
    TOPIC_SOCIAL,
    InProcessEventPublisher,
    NotificationMessage,
    SocialEvent,
    SocialEventType,
)
from arena.models.notification import NotificationPreferences, NotificationPreferencesUpdate


def notifications_of(publisher):
    return [(e.user_id, e.category, e.message) for topic, e in publisher.events if topic == TOPIC_NOTIFICATIONS]


def test_game_start_and_moves_notify_player(notifications, game_service, publisher):
    game = game_service.create_game("p1")
    game_service.make_move(game.id, "p1", 0)
    sent = notifications_of(publisher)
    assert sent[0] == ("p1", "game", f"Game {game.id} has started!")
    assert sent[1][:2] == ("p1", "move")
    assert "position 0" in sent[1][2]


def test_ai_moves_are_not_notified(notifications, game_service, publisher):
    game = game_service.create_game("p1")
    game_service.make_ai_move(game.id)
    assert [n[1] for n in notifications_of(publisher)] == ["game"]


def test_winner_is_notified(notifications, game_service, publisher):
    game = game_service.create_game("p1")
    for pos in [0, 3, 1, 4, 2]:
        game_service.make_move(game.id, "p1", pos)
    assert notifications_of(publisher)[-1] == ("p1", "game", f"Game {game.id} has ended. You won!")


def test_draw_notifies_owner(notifications, game_service, publisher):
    game = game_service.create_game("p1")
    for pos in [0, 1, 2, 4, 3, 5, 7, 6, 8]:
        game_service.make_move(game.id, "p1", pos)
    assert notifications_of(publisher)[-1] == ("p1", "game", f"Game {game.id} has ended in a draw.")


def test_failing_handler_does_not_break_publish(caplog):
    publisher = InProcessEventPublisher()
    received = []

    def broken(event):
        raise RuntimeError("handler down")

    publisher.subscribe("topic", broken)
    publisher.subscribe("topic", received.append)
    publisher.publish("topic", NotificationMessage(user_id="p1", message="hi", category="test"))
    assert len(received) == 1
    assert "handler down" in caplog.text


def test_disabled_game_events_silence_game_notifications(notifications, game_service, publisher):
    notifications.update_preferences("p1", NotificationPreferencesUpdate(
        game_events=False, social_events=True, sound_effects=True, volume=50,
    ))
    game = game_service.create_game("p1")
    game_service.make_move(game.id, "p1", 0)
    assert notifications_of(publisher) == []
    assert notifications.send("p1", "Maintenance tonight", "system")
    assert notifications_of(publisher) == [("p1", "system", "Maintenance tonight")]


@pytest.mark.parametrize("event_type,message", [
    (SocialEventType.FRIEND_REQUEST, "You have a new friend request from user p2"),
    (SocialEventType.FRIEND_REQUEST_ACCEPTED, "User p2 accepted your friend request"),
    (SocialEventType.GAME_INVITATION, "You have been invited to play a game by user p2"),
])
def test_social_events(notifications, publisher, event_type, message):
    sent = notifications.handle_social_event(SocialEvent(user_id="p1", event_type=event_type, source_user_id="p2"))
    assert sent
    assert notifications_of(publisher) == [("p1", "social", message)]


def test_social_events_published_on_topic_are_delivered(notifications, publisher):
    publisher.publish(TOPIC_SOCIAL, SocialEvent(
        user_id="p1", event_type=SocialEventType.GAME_INVITATION, source_user_id="p2",
    ))
    assert notifications_of(publisher)[0][:2] == ("p1", "social")


def test_disabled_social_events(notifications, publisher):
    notifications.update_preferences("p1", NotificationPreferencesUpdate(
        game_events=True, social_events=False, sound_effects=True, volume=50,
    ))
    event = SocialEvent(user_id="p1", event_type=SocialEventType.FRIEND_REQUEST, source_user_id="p2")
    assert not notifications.handle_social_event(event)
    assert notifications_of(publisher) == []


def test_preferences_default_update_and_reset(notifications, preferences):
    defaults = notifications.get_preferences("p1")
    assert defaults == NotificationPreferences(user_id="p1")
    assert preferences.get("p1") == defaults

    updated = notifications.update_preferences("p1", NotificationPreferencesUpdate(
        game_events=False, social_events=True, sound_effects=False, volume=150, email_notifications=True,
    ))
    assert updated.volume == 100
    assert updated.email_notifications is True
    assert updated.push_notifications is True
    assert preferences.get("p1").game_events is False

    low = notifications.update_preferences("p1", NotificationPreferencesUpdate(
        game_events=False, social_events=True, sound_effects=False, volume=-5,
    ))
    assert low.volume == 0
    assert low.email_notifications is True

    assert notifications.reset_preferences("p1") == NotificationPreferences(user_id="p1")
