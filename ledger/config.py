import os
from dataclasses import dataclass, replace
from pathlib import Path
import json
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


@dataclass
class AppConfig:
    database_url: str
    secret_key: str
    log_level: str
    business_timezone: str
    renewal_webhook_url: str
    renewal_timeout_seconds: float

    @property
    def sqlite_path(self) -> Optional[Path]:
        if self.database_url.startswith("sqlite:///") and ":memory:" not in self.database_url:
            return Path(self.database_url.split("sqlite:///")[-1]).expanduser()
        return None


ALLOWED_HOT_KEYS = {"BUSINESS_TIMEZONE", "RENEWAL_TIMEOUT_SECONDS", "LOG_LEVEL"}
SENSITIVE_KEYS = {"DATABASE_URL", "SECRET_KEY", "RENEWAL_WEBHOOK_URL"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


def validate_timezone(value: Optional[str]) -> str:
    v = (value or "Asia/Ho_Chi_Minh").strip()
    try:
        ZoneInfo(v)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid business timezone: {v}") from exc
    return v


def validate_log_level(value: Optional[str]) -> str:
    v = (value or "INFO").strip().upper()
    if v not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {v}")
    return v


def validate_timeout(value) -> float:
    try:
        v = float(value if value not in (None, "") else 10)
    except (TypeError, ValueError) as exc:
        raise ValueError("Invalid renewal timeout: expected seconds") from exc
    if v <= 0:
        raise ValueError("Invalid renewal timeout: must be > 0")
    return v


def _load_settings_file(path: Optional[Path] = None) -> dict:
    path = path or Path(os.getenv("LEDGER_SETTINGS_FILE", "data/settings.json"))
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    # only non-sensitive keys may come from the settings file
    return {k: v for k, v in data.items() if k in ALLOWED_HOT_KEYS}


def load_env(settings_file: Optional[Path] = None) -> AppConfig:
    # environment (.env included) first, data/settings.json overrides hot keys
    load_dotenv()
    s = _load_settings_file(settings_file)
    return AppConfig(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/ledger.db"),
        secret_key=os.getenv("SECRET_KEY", "dev_secret"),
        log_level=validate_log_level(s.get("LOG_LEVEL") or os.getenv("LOG_LEVEL")),
        business_timezone=validate_timezone(s.get("BUSINESS_TIMEZONE") or os.getenv("BUSINESS_TIMEZONE")),
        renewal_webhook_url=(os.getenv("RENEWAL_WEBHOOK_URL") or "").rstrip("/"),
        renewal_timeout_seconds=validate_timeout(
            s.get("RENEWAL_TIMEOUT_SECONDS") or os.getenv("RENEWAL_TIMEOUT_SECONDS")
        ),
    )


def refresh_non_sensitive(overrides: Dict[str, str], current: AppConfig) -> AppConfig:
    updates = {k: v for k, v in (overrides or {}).items() if k in ALLOWED_HOT_KEYS}
    return replace(
        current,
        log_level=validate_log_level(updates.get("LOG_LEVEL", current.log_level)),
        business_timezone=validate_timezone(updates.get("BUSINESS_TIMEZONE", current.business_timezone)),
        renewal_timeout_seconds=validate_timeout(
            updates.get("RENEWAL_TIMEOUT_SECONDS", current.renewal_timeout_seconds)
        ),
    )


def requires_restart(changed_keys: List[str]) -> bool:
    if not changed_keys:
        return False
    return any(k in SENSITIVE_KEYS for k in changed_keys)
