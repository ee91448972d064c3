import logging

from arena.events import (
    TOPIC_GAME_ENDED,
    TOPIC_GAME_STARTED,
    TOPIC_MOVE_MADE,
    TOPIC_NOTIFICATIONS,
    TOPIC_SOCIAL,
    GameEndedEvent,
    GameStartedEvent,
    MoveMadeEvent,
    NotificationMessage,
    SocialEvent,
    SocialEventType,
)
from arena.models.notification import NotificationPreferences, NotificationPreferencesUpdate
from arena.repositories import InMemoryPreferencesRepository

logger = logging.getLogger(__name__)

CATEGORY_GAME = "game"
CATEGORY_MOVE = "move"
CATEGORY_SOCIAL = "social"

SOCIAL_MESSAGES = {
    SocialEventType.FRIEND_REQUEST: "You have a new friend request from user {source}",
    SocialEventType.FRIEND_REQUEST_ACCEPTED: "User {source} accepted your friend request",
    SocialEventType.GAME_INVITATION: "You have been invited to play a game by user {source}",
}


class NotificationService:
    """Turn game and social events into per-player notification messages.

    Game and move notifications need the user's ``game_events`` preference,
    social ones need ``social_events``. Other categories always go out.
    """

    def __init__(self, publisher, preferences=None):
        self.publisher = publisher
        self.preferences = preferences if preferences is not None else InMemoryPreferencesRepository()

    def register(self):
        self.publisher.subscribe(TOPIC_GAME_STARTED, self.handle_game_started)
        self.publisher.subscribe(TOPIC_MOVE_MADE, self.handle_move_made)
        self.publisher.subscribe(TOPIC_GAME_ENDED, self.handle_game_ended)
        self.publisher.subscribe(TOPIC_SOCIAL, self.handle_social_event)
        return self

    def get_preferences(self, user_id: str) -> NotificationPreferences:
        preferences = self.preferences.get(user_id)
        if preferences is None:
            preferences = self.preferences.save(NotificationPreferences(user_id=user_id))
        return preferences

    def update_preferences(self, user_id: str, update: NotificationPreferencesUpdate) -> NotificationPreferences:
        preferences = self.get_preferences(user_id).apply(update)
        logger.info("Notification preferences updated for %s", user_id)
        return self.preferences.save(preferences)

    def reset_preferences(self, user_id: str) -> NotificationPreferences:
        return self.preferences.save(NotificationPreferences(user_id=user_id))

    def allows(self, user_id: str, category: str) -> bool:
        preferences = self.preferences.get(user_id)
        if preferences is None:
            return True
        if category in (CATEGORY_GAME, CATEGORY_MOVE):
            return preferences.game_events
        if category == CATEGORY_SOCIAL:
            return preferences.social_events
        return True

    def send(self, user_id: str, message: str, category: str) -> bool:
        if not self.allows(user_id, category):
            logger.debug("Skipping %s notification for %s, disabled in preferences", category, user_id)
            return False
        self.publisher.publish(TOPIC_NOTIFICATIONS, NotificationMessage(
            user_id=user_id, message=message, category=category,
        ))
        return True

    def handle_game_started(self, event: GameStartedEvent):
        self.send(event.player_id, f"Game {event.game_id} has started!", CATEGORY_GAME)

    def handle_move_made(self, event: MoveMadeEvent):
        # AI moves have nobody to notify
        if event.player_id:
            self.send(event.player_id, f"Player made a move at position {event.position} in game {event.game_id}",
                      CATEGORY_MOVE)

    def handle_game_ended(self, event: GameEndedEvent):
        if event.winner_id:
            self.send(event.winner_id, f"Game {event.game_id} has ended. You won!", CATEGORY_GAME)
        elif event.is_draw:
            self.send(event.player_id, f"Game {event.game_id} has ended in a draw.", CATEGORY_GAME)
        else:
            self.send(event.player_id, f"Game {event.game_id} has ended. The AI won.", CATEGORY_GAME)

    def handle_social_event(self, event: SocialEvent) -> bool:
        template = SOCIAL_MESSAGES[SocialEventType(event.event_type)]
        return self.send(event.user_id, template.format(source=event.source_user_id), CATEGORY_SOCIAL)
