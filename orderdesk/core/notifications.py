"""
orderdesk/core/notifications.py

Purpose: User-visible notifications

- Transient title + message records (the toast equivalent)
- Bounded in-memory history for the view layer and tests
- Listener fan-out so a UI can render notices as they arrive
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from orderdesk.core.logging import get_logger
from orderdesk.utils.constants import (
    TITLE_ERROR,
    TITLE_SUCCESS,
    VARIANT_DEFAULT,
    VARIANT_DESTRUCTIVE,
)

logger = get_logger(__name__)


@dataclass
class Notification:
    """A single transient notice shown to the user."""
    title: str
    description: str
    variant: str = VARIANT_DEFAULT
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return self.variant == VARIANT_DESTRUCTIVE


NotificationListener = Callable[[Notification], None]


class Notifier:
    """
    Collects notifications and forwards them to subscribed listeners.
    """

    def __init__(self, history_limit: int = 100):
        self._history: List[Notification] = []
        self._listeners: List[NotificationListener] = []
        self._history_limit = history_limit

    def notify(self, title: str, description: str, variant: str = VARIANT_DEFAULT) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)

        self._history.append(notification)
        if len(self._history) > self._history_limit:
            del self._history[: len(self._history) - self._history_limit]

        log = logger.warning if notification.is_error else logger.info
        log(f"Notification: {title} - {description}")

        for listener in list(self._listeners):
            listener(notification)

        return notification

    def success(self, description: str, title: str = TITLE_SUCCESS) -> Notification:
        return self.notify(title, description)

    def error(self, description: str, title: str = TITLE_ERROR) -> Notification:
        return self.notify(title, description, VARIANT_DESTRUCTIVE)

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        """Registers a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def history(self) -> List[Notification]:
        return list(self._history)

    @property
    def last(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def titles(self) -> List[str]:
        return [n.title for n in self._history]

    def clear(self) -> None:
        self._history.clear()
