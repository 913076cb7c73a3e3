from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import os
import sys

from shopkeeper.domain.errors import ValidationError

LOW_STOCK_THRESHOLD = 5
TOP_PRODUCTS_LIMIT = 8
DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_ORDER_MESSAGE = "Bonjour, je souhaite commander : {name} ({price:.2f})"


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    logs_dir: Path
    reports_dir: Path


@dataclass(frozen=True)
class ApiSettings:
    base_url: str
    timeout_seconds: float
    timezone: tzinfo
    order_message: str = DEFAULT_ORDER_MESSAGE


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "Shopkeeper") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    reports = base / "reports"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)
    reports.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, logs_dir=logs, reports_dir=reports)


def _local_timezone() -> tzinfo:
    return datetime.now().astimezone().tzinfo


def resolve_timezone(name: str | None) -> tzinfo:
    if not name:
        return _local_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {name}") from e


def validate_order_message(template: str) -> str:
    try:
        template.format(name="x", price=1.0)
    except (KeyError, IndexError, ValueError) as e:
        raise ValidationError(
            f"SHOPKEEPER_ORDER_MESSAGE may only use {{name}} and {{price}} placeholders. Received: {template}"
        ) from e
    return template


def get_api_settings(env: dict[str, str] | None = None) -> ApiSettings:
    env = os.environ if env is None else env

    base_url = (env.get("SHOPKEEPER_API_URL") or DEFAULT_API_URL).strip().rstrip("/")

    raw_timeout = env.get("SHOPKEEPER_API_TIMEOUT")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
    except ValueError as e:
        raise ValidationError(f"SHOPKEEPER_API_TIMEOUT must be a number. Received: {raw_timeout}") from e
    if timeout <= 0:
        raise ValidationError("SHOPKEEPER_API_TIMEOUT must be > 0.")

    return ApiSettings(
        base_url=base_url,
        timeout_seconds=timeout,
        timezone=resolve_timezone(env.get("SHOPKEEPER_TZ")),
        order_message=validate_order_message(env.get("SHOPKEEPER_ORDER_MESSAGE") or DEFAULT_ORDER_MESSAGE),
    )
