from __future__ import annotations

import logging

from qrdine.application.ports.alerts import Cue, Notice, NoticeLevel

logger = logging.getLogger(__name__)

_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.WARNING: logging.WARNING,
    NoticeLevel.ERROR: logging.ERROR,
}


class LoggingCuePlayer:
    async def play(self, cue: Cue) -> None:
        logger.info("alert_cue", extra={"cue": cue.value})


class LoggingNotifier:
    async def notify(self, notice: Notice) -> None:
        logger.log(
            _LEVELS[notice.level],
            "notice",
            extra={"level_name": notice.level.value, "notice": notice.message},
        )
