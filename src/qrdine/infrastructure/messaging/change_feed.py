from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Any, Mapping

from pydantic import ValidationError
from redis import asyncio as redis_asyncio

from qrdine.application.ports.change_feed import ChangeCallback, matches_filter
from qrdine.infrastructure.messaging.change_messages import channel_for, decode_change

logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 5.0


def _decode_value(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


async def _close(resource: Any) -> None:
    aclose = getattr(resource, "aclose", None)
    if callable(aclose):
        await aclose()
    else:
        await resource.close()


class RedisSubscription:
    def __init__(self, task: asyncio.Task[None], channel: str) -> None:
        self._task = task
        self._channel = channel

    @property
    def active(self) -> bool:
        return not self._task.done()

    async def unsubscribe(self) -> None:
        if self._task.done():
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        logger.info("change_feed_unsubscribed", extra={"channel": self._channel})


class RedisChangeFeed:
    """Change notifications received over Redis pub/sub, one listener task per subscription."""

    def __init__(self, redis_url: str, *, poll_timeout: float = 1.0) -> None:
        self._redis_url = redis_url
        self._poll_timeout = poll_timeout

    async def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        row_filter: Mapping[str, Any] | None = None,
    ) -> RedisSubscription:
        channel = channel_for(table)
        task = asyncio.get_running_loop().create_task(
            self._listen(channel, callback, dict(row_filter or {}))
        )
        return RedisSubscription(task, channel)

    async def _listen(
        self,
        channel: str,
        callback: ChangeCallback,
        row_filter: dict[str, Any],
    ) -> None:
        backoff_seconds = 1.0
        while True:
            client: redis_asyncio.Redis | None = None
            pubsub: redis_asyncio.client.PubSub | None = None
            try:
                client = redis_asyncio.from_url(self._redis_url)
                pubsub = client.pubsub()
                await pubsub.subscribe(channel)
                logger.info("change_feed_subscribed", extra={"channel": channel})
                backoff_seconds = 1.0

                while True:
                    message = await pubsub.get_message(
                        ignore_subscribe_messages=True,
                        timeout=self._poll_timeout,
                    )
                    if message is None:
                        await asyncio.sleep(0.05)
                        continue
                    payload = _decode_value(message.get("data"))
                    if not payload:
                        continue
                    await self._dispatch(channel, payload, callback, row_filter)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(
                    "change_feed_error",
                    extra={"channel": channel, "backoff_seconds": backoff_seconds},
                )
                await asyncio.sleep(backoff_seconds)
                backoff_seconds = min(backoff_seconds * 2, MAX_BACKOFF_SECONDS)
            finally:
                if pubsub is not None:
                    await _close(pubsub)
                if client is not None:
                    await _close(client)

    async def _dispatch(
        self,
        channel: str,
        payload: str,
        callback: ChangeCallback,
        row_filter: dict[str, Any],
    ) -> None:
        try:
            change = decode_change(payload)
        except ValidationError:
            logger.warning("change_feed_invalid_message", extra={"channel": channel})
            return
        if not matches_filter(change.row, row_filter):
            return
        try:
            await callback(change)
        except Exception:
            logger.exception(
                "change_feed_callback_failed",
                extra={"channel": channel, "table": change.table},
            )
