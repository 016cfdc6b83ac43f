from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Protocol

ORDERS_TABLE = "orders"
ORDER_ITEMS_TABLE = "order_items"
QUICK_ACTION_REQUESTS_TABLE = "quick_action_requests"


class ChangeEventType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: ChangeEventType
    row: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime | None = None


ChangeCallback = Callable[[ChangeEvent], Awaitable[None]]


def matches_filter(row: Mapping[str, Any], row_filter: Mapping[str, Any] | None) -> bool:
    if not row_filter:
        return True
    return all(str(row.get(key)) == str(value) for key, value in row_filter.items())


class Subscription(Protocol):
    async def unsubscribe(self) -> None: ...


class ChangeFeed(Protocol):
    async def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        row_filter: Mapping[str, Any] | None = None,
    ) -> Subscription: ...


class ChangePublisher(Protocol):
    def publish_change(
        self,
        table: str,
        event_type: ChangeEventType,
        row: Mapping[str, Any],
    ) -> None: ...
