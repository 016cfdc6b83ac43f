from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrdine.api.container import ServiceContainer, build_monitor, build_order_writer
from qrdine.api.main import create_app
from qrdine.infrastructure.config.settings import Settings
from qrdine.infrastructure.db.gateway import SqlAlchemyGateway
from qrdine.infrastructure.db.models.menu import Base
from qrdine.infrastructure.db.models.order import OrderModel  # noqa: F401
from qrdine.infrastructure.db.models.quick_action import QuickActionRequestModel  # noqa: F401
from qrdine.infrastructure.messaging.in_process import InProcessChangeBus
from qrdine.tools.seed import seed


class MutableClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class RecordingPublisher:
    def __init__(self) -> None:
        self.changes: list[tuple[str, str, dict]] = []

    def publish_change(self, table, event_type, row) -> None:
        self.changes.append((table, event_type.value, dict(row)))


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'qrdine.db'}"


@pytest.fixture
def engine(database_url: str) -> Iterator[Engine]:
    engine = create_engine(database_url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    assert seed(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def sql_gateway(engine: Engine, publisher: RecordingPublisher, clock: MutableClock) -> SqlAlchemyGateway:
    gateway = SqlAlchemyGateway(engine=engine, publisher=publisher, retry_attempts=1, clock=clock)
    gateway.connect()
    return gateway


@pytest.fixture
def app(database_url: str, engine: Engine) -> FastAPI:
    settings = Settings(
        database_url=database_url,
        reload_interval_seconds=60.0,
        alert_interval_seconds=60.0,
        alert_initial_delay_seconds=60.0,
        table_numbers=["20", "21", "22"],
    )

    def factory(manager) -> ServiceContainer:
        bus = InProcessChangeBus()
        gateway = SqlAlchemyGateway(engine=engine, publisher=bus, retry_attempts=1)
        gateway.connect()
        return ServiceContainer(
            settings=settings,
            gateway=gateway,
            order_writer=build_order_writer(gateway, settings.order_write_mode),
            monitor=build_monitor(settings, gateway, bus, manager),
            ready_checks={"database": lambda: True},
        )

    return create_app(container_factory=factory)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
