from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from qrdine.domain.common.ids import QuickActionId, QuickActionRequestId, TableNumber
from qrdine.domain.menu.entities import LocalizedText


class QuickActionRequestStatus(str, Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class QuickAction:
    action_id: QuickActionId
    label: LocalizedText
    display_order: int = 0


@dataclass(frozen=True)
class QuickActionRequest:
    request_id: QuickActionRequestId
    table_number: TableNumber
    action_id: QuickActionId | None
    status: QuickActionRequestStatus
    requested_at: datetime
    action_label: LocalizedText | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == QuickActionRequestStatus.PENDING
