from __future__ import annotations

import os
from dataclasses import dataclass, field

from qrdine.domain.order.totals import DEFAULT_TAX_RATE

ORDER_WRITE_MODES = ("sequential", "compensating")
DEFAULT_TABLE_NUMBERS = "20-40"


class ConfigurationError(Exception):
    pass


@dataclass(frozen=True)
class Settings:
    database_url: str
    redis_url: str | None = None
    tax_rate: float = DEFAULT_TAX_RATE
    orders_window_hours: float = 8.0
    reload_interval_seconds: float = 30.0
    alert_interval_seconds: float = 10.0
    alert_initial_delay_seconds: float = 0.5
    alert_cue_gap_seconds: float = 1.0
    gateway_retry_attempts: int = 3
    gateway_retry_base_delay_seconds: float = 1.0
    order_write_mode: str = "sequential"
    table_numbers: list[str] = field(default_factory=lambda: parse_table_numbers(DEFAULT_TABLE_NUMBERS))
    sound_enabled: bool = True


def parse_table_numbers(raw: str) -> list[str]:
    """Expand ``"20-40"`` or ``"1,2,10-12"`` into table labels."""
    tables: list[str] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        start, sep, end = part.partition("-")
        if not sep:
            tables.append(part)
            continue
        try:
            first, last = int(start), int(end)
        except ValueError as exc:
            raise ConfigurationError(f"invalid table range: {part}") from exc
        if first > last:
            raise ConfigurationError(f"invalid table range: {part}")
        tables.extend(str(number) for number in range(first, last + 1))
    return tables


def _float_env(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _int_env(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise ConfigurationError("DATABASE_URL is not set")

    order_write_mode = os.getenv("ORDER_WRITE_MODE", "sequential").strip().lower()
    if order_write_mode not in ORDER_WRITE_MODES:
        raise ConfigurationError(f"ORDER_WRITE_MODE must be one of {ORDER_WRITE_MODES}")

    table_numbers = parse_table_numbers(os.getenv("TABLE_NUMBERS", DEFAULT_TABLE_NUMBERS))
    if not table_numbers:
        raise ConfigurationError("TABLE_NUMBERS must name at least one table")

    return Settings(
        database_url=database_url,
        redis_url=os.getenv("REDIS_URL") or None,
        tax_rate=_float_env("TAX_RATE", DEFAULT_TAX_RATE),
        orders_window_hours=_float_env("ORDERS_WINDOW_HOURS", 8.0, minimum=0.0),
        reload_interval_seconds=_float_env("RELOAD_INTERVAL_SECONDS", 30.0, minimum=0.1),
        alert_interval_seconds=_float_env("ALERT_INTERVAL_SECONDS", 10.0, minimum=0.1),
        alert_initial_delay_seconds=_float_env("ALERT_INITIAL_DELAY_SECONDS", 0.5),
        alert_cue_gap_seconds=_float_env("ALERT_CUE_GAP_SECONDS", 1.0),
        gateway_retry_attempts=_int_env("GATEWAY_RETRY_ATTEMPTS", 3),
        gateway_retry_base_delay_seconds=_float_env("GATEWAY_RETRY_BASE_DELAY_SECONDS", 1.0),
        order_write_mode=order_write_mode,
        table_numbers=table_numbers,
        sound_enabled=_bool_env("SOUND_ENABLED", True),
    )
