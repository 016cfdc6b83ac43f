from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from qrdine.application.metrics.order_lifecycle import record_gateway_retry
from qrdine.application.ports.gateway import GatewayError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def with_retry(
    operation: str,
    call: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``call`` up to ``attempts`` times.

    Database errors are retried after ``2**attempt * base_delay`` seconds
    (2s then 4s with the defaults). The last failure is raised as
    :class:`GatewayError`. Other exceptions propagate unchanged.
    """
    attempt = 1
    while True:
        try:
            return await call()
        except SQLAlchemyError as exc:
            if attempt >= attempts:
                logger.error(
                    "gateway_call_failed",
                    extra={"operation": operation, "attempts": attempt, "error": str(exc)},
                )
                raise GatewayError(operation, f"{operation} failed after {attempt} attempts") from exc

            delay = (2**attempt) * base_delay
            logger.warning(
                "gateway_retry",
                extra={
                    "operation": operation,
                    "attempt": attempt,
                    "delay_seconds": delay,
                    "error": str(exc),
                },
            )
            record_gateway_retry(operation)
            await sleep(delay)
            attempt += 1
