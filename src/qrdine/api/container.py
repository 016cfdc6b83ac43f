from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from fastapi import Request

from qrdine.api.ws.broadcast import SnapshotBroadcaster, WebSocketCuePlayer, WebSocketNotifier
from qrdine.api.ws.manager import ConnectionManager
from qrdine.application.monitor.live_orders import LiveOrderMonitor
from qrdine.application.ports.change_feed import ChangeFeed, ChangePublisher
from qrdine.application.ports.gateway import PersistenceGateway
from qrdine.application.use_cases.submit_order import (
    CompensatingOrderWriter,
    OrderWriter,
    SequentialOrderWriter,
)
from qrdine.infrastructure.cache.redis_client import ping_redis
from qrdine.infrastructure.config.settings import Settings
from qrdine.infrastructure.db.gateway import SqlAlchemyGateway
from qrdine.infrastructure.db.session import ping_database
from qrdine.infrastructure.messaging.change_feed import RedisChangeFeed
from qrdine.infrastructure.messaging.change_publisher import RedisChangePublisher
from qrdine.infrastructure.messaging.in_process import InProcessChangeBus

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    gateway: PersistenceGateway
    order_writer: OrderWriter
    monitor: LiveOrderMonitor
    ready_checks: dict[str, Callable[[], bool]] = field(default_factory=dict)
    closers: list[Callable[[], None]] = field(default_factory=list)

    async def start(self) -> None:
        await self.monitor.start()

    async def stop(self) -> None:
        await self.monitor.stop()
        for close in self.closers:
            close()


ContainerFactory = Callable[[ConnectionManager], ServiceContainer]


def build_order_writer(gateway: PersistenceGateway, mode: str) -> OrderWriter:
    if mode == "compensating":
        return CompensatingOrderWriter(gateway)
    return SequentialOrderWriter(gateway)


def build_monitor(
    settings: Settings,
    gateway: PersistenceGateway,
    change_feed: ChangeFeed | None,
    manager: ConnectionManager,
) -> LiveOrderMonitor:
    monitor = LiveOrderMonitor(
        gateway,
        change_feed,
        WebSocketCuePlayer(manager),
        WebSocketNotifier(manager),
        tax_rate=settings.tax_rate,
        table_numbers=settings.table_numbers,
        hours_window=settings.orders_window_hours,
        reload_interval=settings.reload_interval_seconds,
        sound_enabled=settings.sound_enabled,
        alert_interval=settings.alert_interval_seconds,
        alert_initial_delay=settings.alert_initial_delay_seconds,
        alert_cue_gap=settings.alert_cue_gap_seconds,
    )
    monitor.add_listener(SnapshotBroadcaster(manager, monitor))
    return monitor


def build_container(settings: Settings, manager: ConnectionManager) -> ServiceContainer:
    ready_checks: dict[str, Callable[[], bool]] = {
        "database": lambda: ping_database(timeout_seconds=1.0, database_url=settings.database_url),
    }
    if settings.redis_url:
        redis_url = settings.redis_url
        publisher: ChangePublisher = RedisChangePublisher(redis_url)
        change_feed: ChangeFeed = RedisChangeFeed(redis_url)
        ready_checks["redis"] = lambda: ping_redis(redis_url, timeout_seconds=1.0)
    else:
        bus = InProcessChangeBus()
        publisher, change_feed = bus, bus
        logger.warning("change_feed_in_process", extra={"reason": "REDIS_URL missing"})

    gateway = SqlAlchemyGateway(
        settings.database_url,
        publisher=publisher,
        retry_attempts=settings.gateway_retry_attempts,
        retry_base_delay=settings.gateway_retry_base_delay_seconds,
    )
    gateway.connect()

    return ServiceContainer(
        settings=settings,
        gateway=gateway,
        order_writer=build_order_writer(gateway, settings.order_write_mode),
        monitor=build_monitor(settings, gateway, change_feed, manager),
        ready_checks=ready_checks,
        closers=[gateway.dispose],
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container
