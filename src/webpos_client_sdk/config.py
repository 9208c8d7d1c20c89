from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable

from dotenv import load_dotenv

DEFAULT_EMPLOYEE_CODE = "EMP01"
DEFAULT_STORE_CODE = "30"
DEFAULT_POS_NUMBER = "90"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    api_base_url: str
    api_prefix: str = "/api"
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    max_connections: int = 10
    verify_ssl: bool = True
    employee_code: str = DEFAULT_EMPLOYEE_CODE
    store_code: str = DEFAULT_STORE_CODE
    pos_number: str = DEFAULT_POS_NUMBER
    tax_rate: Decimal = Decimal("0.10")


def _require(values: dict[str, str | None], required: Iterable[str]) -> None:
    missing = [key for key in required if not values.get(key)]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _read_decimal(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default)
    try:
        return Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ConfigError(f"Invalid {name}: expected a decimal, got {raw!r}") from exc


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def _normalize_prefix(prefix: str) -> str:
    trimmed = prefix.strip().strip("/")
    return f"/{trimmed}" if trimmed else ""


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    env_name = (os.getenv("WEBPOS_ENV") or "dev").strip()
    env_key = env_name.upper()

    api_base_url = (
        (os.getenv(f"WEBPOS_API_BASE_URL_{env_key}") or "").strip()
        or (os.getenv("WEBPOS_API_BASE_URL") or "").strip()
    )
    values = {"WEBPOS_API_BASE_URL": api_base_url}
    _require(values, ["WEBPOS_API_BASE_URL"])

    timeout_seconds = _read_float("WEBPOS_TIMEOUT_SECONDS", "10")
    _validate(
        timeout_seconds > 0,
        f"Invalid WEBPOS_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}",
    )

    connect_timeout_seconds = _read_float(
        "WEBPOS_CONNECT_TIMEOUT_SECONDS", str(min(timeout_seconds, 5.0))
    )
    _validate(
        connect_timeout_seconds > 0,
        (
            "Invalid WEBPOS_CONNECT_TIMEOUT_SECONDS: "
            f"expected > 0, got {connect_timeout_seconds}"
        ),
    )

    read_timeout_seconds = _read_float(
        "WEBPOS_READ_TIMEOUT_SECONDS",
        str(max(timeout_seconds, connect_timeout_seconds)),
    )
    _validate(
        read_timeout_seconds > 0,
        f"Invalid WEBPOS_READ_TIMEOUT_SECONDS: expected > 0, got {read_timeout_seconds}",
    )

    max_connections = _read_int("WEBPOS_MAX_CONNECTIONS", "10")
    _validate(
        max_connections >= 1,
        f"Invalid WEBPOS_MAX_CONNECTIONS: expected >= 1, got {max_connections}",
    )

    tax_rate = _read_decimal("WEBPOS_TAX_RATE", "0.10")
    _validate(tax_rate >= 0, f"Invalid WEBPOS_TAX_RATE: expected >= 0, got {tax_rate}")

    verify_ssl = _coerce_bool(os.getenv("WEBPOS_VERIFY_SSL"), True)

    return ClientConfig(
        env_name=env_name,
        api_base_url=api_base_url.rstrip("/"),
        api_prefix=_normalize_prefix(os.getenv("WEBPOS_API_PREFIX", "/api")),
        connect_timeout_seconds=connect_timeout_seconds,
        read_timeout_seconds=read_timeout_seconds,
        max_connections=max_connections,
        verify_ssl=verify_ssl,
        employee_code=(os.getenv("WEBPOS_EMPLOYEE_CODE") or DEFAULT_EMPLOYEE_CODE).strip(),
        store_code=(os.getenv("WEBPOS_STORE_CODE") or DEFAULT_STORE_CODE).strip(),
        pos_number=(os.getenv("WEBPOS_POS_NUMBER") or DEFAULT_POS_NUMBER).strip(),
        tax_rate=tax_rate,
    )
