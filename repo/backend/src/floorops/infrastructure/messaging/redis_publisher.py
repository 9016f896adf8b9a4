from __future__ import annotations

import logging

from prometheus_client import Counter

from floorops.application.ports.publisher import EventPublisher
from floorops.infrastructure.cache.redis_client import get_redis_client

logger = logging.getLogger(__name__)

EVENTS_PUBLISHED = Counter(
    "floorops_events_published_total",
    "Floor events handed to redis pub/sub",
    ["channel"],
)


class RedisEventPublisher(EventPublisher):
    """Fans floor events out over redis pub/sub; delivery is fire-and-forget."""

    def __init__(self, timeout_seconds: float = 0.5) -> None:
        self._timeout_seconds = timeout_seconds

    def publish(self, channel: str, message: str) -> None:
        client = get_redis_client(timeout_seconds=self._timeout_seconds)
        receivers = client.publish(channel, message)
        EVENTS_PUBLISHED.labels(channel=channel).inc()
        if not receivers:
            logger.debug("event_published_without_subscribers", extra={"channel": channel})
