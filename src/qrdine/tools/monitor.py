from __future__ import annotations

import asyncio
import logging
import signal

from qrdine.application.monitor.live_orders import LiveOrderMonitor
from qrdine.application.ports.change_feed import ChangeFeed
from qrdine.infrastructure.alerts.log_sinks import LoggingCuePlayer, LoggingNotifier
from qrdine.infrastructure.config.settings import Settings, load_settings
from qrdine.infrastructure.db.gateway import SqlAlchemyGateway
from qrdine.infrastructure.messaging.change_feed import RedisChangeFeed
from qrdine.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_headless_monitor(settings: Settings, gateway: SqlAlchemyGateway) -> LiveOrderMonitor:
    change_feed: ChangeFeed | None = None
    if settings.redis_url:
        change_feed = RedisChangeFeed(settings.redis_url)
    return LiveOrderMonitor(
        gateway,
        change_feed,
        LoggingCuePlayer(),
        LoggingNotifier(),
        tax_rate=settings.tax_rate,
        table_numbers=settings.table_numbers,
        hours_window=settings.orders_window_hours,
        reload_interval=settings.reload_interval_seconds,
        sound_enabled=settings.sound_enabled,
        alert_interval=settings.alert_interval_seconds,
        alert_initial_delay=settings.alert_initial_delay_seconds,
        alert_cue_gap=settings.alert_cue_gap_seconds,
    )


async def run(settings: Settings) -> None:
    gateway = SqlAlchemyGateway(
        settings.database_url,
        retry_attempts=settings.gateway_retry_attempts,
        retry_base_delay=settings.gateway_retry_base_delay_seconds,
    )
    gateway.connect()
    monitor = build_headless_monitor(settings, gateway)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)

    await monitor.start()
    try:
        await stop.wait()
    finally:
        await monitor.stop()
        gateway.dispose()


def main() -> None:
    configure_logging()
    settings = load_settings()
    if not settings.redis_url:
        logger.warning("headless_monitor_polling_only", extra={"reason": "REDIS_URL missing"})
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
