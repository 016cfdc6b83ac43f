from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import BaseModel, Field

from qrdine.application.ports.change_feed import ChangeEvent, ChangeEventType

CHANNEL_PREFIX = "changes:"


def channel_for(table: str) -> str:
    return f"{CHANNEL_PREFIX}{table}"


class ChangeMessage(BaseModel):
    table: str
    event_type: ChangeEventType
    row: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime | None = None

    def to_event(self) -> ChangeEvent:
        return ChangeEvent(
            table=self.table,
            event_type=self.event_type,
            row=dict(self.row),
            occurred_at=self.occurred_at,
        )


def encode_change(table: str, event_type: ChangeEventType, row: Mapping[str, Any]) -> str:
    message = ChangeMessage(
        table=table,
        event_type=event_type,
        row=dict(row),
        occurred_at=datetime.now(timezone.utc),
    )
    return json.dumps(message.model_dump(mode="json"), separators=(",", ":"), sort_keys=True)


def decode_change(payload: str | bytes) -> ChangeEvent:
    """Parse a published change; raises ``pydantic.ValidationError`` when malformed."""
    return ChangeMessage.model_validate_json(payload).to_event()
