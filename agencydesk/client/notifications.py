# agencydesk/client/notifications.py
from __future__ import annotations

import logging
from typing import List, NamedTuple, Protocol

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


class Notification(NamedTuple):
    level: str          # success | error
    title: str
    description: str


class NotificationSink(Protocol):
    def notify(self, notification: Notification) -> None: ...


class LoggingSink:
    """Default sink: the UI layer is absent, so notifications go to the log."""

    def notify(self, notification: Notification) -> None:
        if notification.level == ERROR:
            logger.error("%s: %s", notification.title, notification.description)
        else:
            logger.info("%s: %s", notification.title, notification.description)


class CollectingSink:
    """Keeps every notification in order; handy for headless callers and tests."""

    def __init__(self) -> None:
        self.items: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.items.append(notification)

    @property
    def last(self) -> Notification | None:
        return self.items[-1] if self.items else None
