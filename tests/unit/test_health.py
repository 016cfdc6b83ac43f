from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrdine.api.container import ServiceContainer, build_monitor, build_order_writer
from qrdine.api.main import create_app
from qrdine.infrastructure.config.settings import Settings
from unit_support import FakeGateway


def _app(ready: bool):
    def factory(manager) -> ServiceContainer:
        settings = Settings(database_url="sqlite://", alert_initial_delay_seconds=60.0)
        gateway = FakeGateway()
        return ServiceContainer(
            settings=settings,
            gateway=gateway,
            order_writer=build_order_writer(gateway, settings.order_write_mode),
            monitor=build_monitor(settings, gateway, None, manager),
            ready_checks={"database": lambda: ready},
        )

    return create_app(container_factory=factory)


def test_live_health_endpoint() -> None:
    with TestClient(_app(ready=True)) as client:
        response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_health_endpoint_reports_checks() -> None:
    with TestClient(_app(ready=True)) as client:
        response = client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "checks": {"database": True}}


def test_ready_health_endpoint_unavailable_when_check_fails() -> None:
    with TestClient(_app(ready=False)) as client:
        response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"
