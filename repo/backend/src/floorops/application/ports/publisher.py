from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

FLOOR_EVENTS_CHANNEL = "events:floor"


class EventPublisher(Protocol):
    def publish(self, channel: str, message: str) -> None: ...


def publish_quietly(publisher: EventPublisher, message: str) -> None:
    try:
        publisher.publish(channel=FLOOR_EVENTS_CHANNEL, message=message)
    except Exception:
        logger.warning("event_publish_failed", exc_info=True)
