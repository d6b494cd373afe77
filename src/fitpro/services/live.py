"""In-process change feed and live daily nutrition views."""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from fitpro.domain.food_log import DailyNutrition, FoodEntry
from fitpro.domain.profile import UserProfile
from fitpro.services.daily_nutrition import (
    FoodLogReader,
    ProfileReader,
    aggregate_day,
    targets_from_profile,
)

Listener = Callable[[object], None]
Unsubscribe = Callable[[], None]

_logger = logging.getLogger(__name__)


def profile_topic(user_id: UUID) -> str:
    """Topic carrying a user's latest profile."""
    return f"profile:{user_id}"


def food_log_topic(user_id: UUID, day: date) -> str:
    """Topic carrying the full entry list of one day."""
    return f"food_log:{user_id}:{day.isoformat()}"


@dataclass
class ChangeFeed:
    """Topic-keyed observer registry."""

    _listeners: dict[str, list[Listener]] = field(
        default_factory=lambda: defaultdict(list), init=False
    )

    def subscribe(self, topic: str, listener: Listener) -> Unsubscribe:
        """Register a listener and return a callable that removes it."""
        self._listeners[topic].append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(topic, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(topic, None)

        return unsubscribe

    def publish(self, topic: str, value: object) -> None:
        """Deliver a value to every listener of a topic."""
        for listener in list(self._listeners.get(topic, [])):
            try:
                listener(value)
            except Exception:
                _logger.exception("Change listener failed for topic %s", topic)

    def listener_count(self, topic: str) -> int:
        """Return the number of listeners on a topic."""
        return len(self._listeners.get(topic, []))


@dataclass
class LiveDailyNutrition:
    """Keeps a day's nutrition summary current while subscribed.

    ``start`` seeds state from the stores and subscribes to profile and
    food log changes; ``close`` drops both subscriptions.
    """

    user_id: UUID
    day: date
    feed: ChangeFeed
    food_log: FoodLogReader
    profiles: ProfileReader
    _profile: UserProfile | None = field(default=None, init=False)
    _entries: list[FoodEntry] = field(default_factory=list, init=False)
    _listeners: list[Callable[[DailyNutrition], None]] = field(
        default_factory=list, init=False
    )
    _unsubscribers: list[Unsubscribe] = field(default_factory=list, init=False)

    def start(self) -> DailyNutrition:
        """Load current state, subscribe to changes and return the summary."""
        if self._unsubscribers:
            return self.current()
        self._profile = self.profiles.get_profile(self.user_id)
        self._entries = self.food_log.list_entries(self.user_id, self.day)
        self._unsubscribers = [
            self.feed.subscribe(profile_topic(self.user_id), self._on_profile),
            self.feed.subscribe(
                food_log_topic(self.user_id, self.day), self._on_entries
            ),
        ]
        return self.current()

    def close(self) -> None:
        """Unsubscribe from the change feed and drop listeners."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._listeners.clear()

    def on_change(self, listener: Callable[[DailyNutrition], None]) -> None:
        """Register a callback receiving each recomputed summary."""
        self._listeners.append(listener)

    def current(self) -> DailyNutrition:
        """Return the summary for the current state."""
        return aggregate_day(self.day, self._entries, targets_from_profile(self._profile))

    def _on_profile(self, value: object) -> None:
        if value is None or isinstance(value, UserProfile):
            self._profile = value
            self._notify()

    def _on_entries(self, value: object) -> None:
        if isinstance(value, list):
            self._entries = [entry for entry in value if isinstance(entry, FoodEntry)]
            self._notify()

    def _notify(self) -> None:
        summary = self.current()
        for listener in list(self._listeners):
            listener(summary)
