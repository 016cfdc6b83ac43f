from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.infrastructure.config.settings import (
    ConfigurationError,
    load_settings,
    parse_table_numbers,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "REDIS_URL",
        "TAX_RATE",
        "ORDERS_WINDOW_HOURS",
        "ORDER_WRITE_MODE",
        "TABLE_NUMBERS",
        "SOUND_ENABLED",
        "GATEWAY_RETRY_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///qrdine.db")


def test_defaults() -> None:
    settings = load_settings()

    assert settings.database_url == "sqlite:///qrdine.db"
    assert settings.redis_url is None
    assert settings.tax_rate == 0.10
    assert settings.orders_window_hours == 8.0
    assert settings.reload_interval_seconds == 30.0
    assert settings.alert_interval_seconds == 10.0
    assert settings.gateway_retry_attempts == 3
    assert settings.order_write_mode == "sequential"
    assert settings.table_numbers[0] == "20"
    assert settings.table_numbers[-1] == "40"
    assert len(settings.table_numbers) == 21
    assert settings.sound_enabled


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("TAX_RATE", "0.15")
    monkeypatch.setenv("ORDER_WRITE_MODE", "Compensating")
    monkeypatch.setenv("TABLE_NUMBERS", "1,2,10-12")
    monkeypatch.setenv("SOUND_ENABLED", "off")

    settings = load_settings()

    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.tax_rate == 0.15
    assert settings.order_write_mode == "compensating"
    assert settings.table_numbers == ["1", "2", "10", "11", "12"]
    assert not settings.sound_enabled


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("TAX_RATE", "ten"),
        ("TAX_RATE", "-0.1"),
        ("ORDER_WRITE_MODE", "parallel"),
        ("TABLE_NUMBERS", "9-3"),
        ("TABLE_NUMBERS", " , "),
        ("SOUND_ENABLED", "maybe"),
        ("GATEWAY_RETRY_ATTEMPTS", "0"),
    ],
)
def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        load_settings()


def test_missing_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL")

    with pytest.raises(ConfigurationError, match="DATABASE_URL"):
        load_settings()


def test_parse_table_numbers_keeps_labels() -> None:
    assert parse_table_numbers("A1, 3-4") == ["A1", "3", "4"]
    with pytest.raises(ConfigurationError):
        parse_table_numbers("a-b")
