from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Cue(str, Enum):
    NEW_ORDER = "new_order"
    QUICK_ACTION = "quick_action"


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


class CuePlayer(Protocol):
    async def play(self, cue: Cue) -> None: ...


class Notifier(Protocol):
    async def notify(self, notice: Notice) -> None: ...
