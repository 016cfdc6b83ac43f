from __future__ import annotations

from typing import Any, Mapping

from qrdine.application.ports.change_feed import ChangeEventType, ChangePublisher
from qrdine.infrastructure.cache.redis_client import get_redis_client
from qrdine.infrastructure.messaging.change_messages import channel_for, encode_change


class RedisChangePublisher(ChangePublisher):
    def __init__(self, redis_url: str, timeout_seconds: float = 1.0) -> None:
        self._redis_url = redis_url
        self._timeout_seconds = timeout_seconds

    def publish_change(
        self,
        table: str,
        event_type: ChangeEventType,
        row: Mapping[str, Any],
    ) -> None:
        get_redis_client(self._redis_url, timeout_seconds=self._timeout_seconds).publish(
            channel_for(table),
            encode_change(table, event_type, row),
        )
