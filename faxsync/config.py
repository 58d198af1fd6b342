"""Configuration utilities for faxsync."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .provider.base import DownloadFormat

DEFAULT_CONFIG_PATH = Path("config.json")
DEFAULT_ACCOUNTS_FILENAME = "srfaxes.json"
DEFAULT_API_URL = "https://www.srfax.com/SRF_SecWebSvc.php"
DEFAULT_ROOT_URL = "https://www.srfax.com"

_LOG_LEVELS = {"trace", "debug", "info", "warn", "warning", "error", "critical"}


@dataclass(frozen=True, slots=True)
class AccountConfig:
    """One SRFax account and where its faxes are written."""

    name: str
    access_id: str
    access_pwd: str = field(repr=False)
    file_dir: Path
    download_format: DownloadFormat = DownloadFormat.PDF
    delete_after: bool = False

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], *, base_dir: Optional[Path] = None
    ) -> "AccountConfig":
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("every account requires a non-empty name")

        access_id = data.get("access_id")
        access_pwd = _expand_env(data.get("access_pwd"))
        if not access_id or not access_pwd:
            raise ValueError(f"account {name!r} requires access_id and access_pwd")

        file_dir_value = data.get("file_dir")
        if not file_dir_value:
            raise ValueError(f"account {name!r} requires file_dir")
        file_dir = Path(os.path.expandvars(str(file_dir_value))).expanduser()
        if not file_dir.is_absolute() and base_dir is not None:
            file_dir = base_dir / file_dir

        raw_format = str(data.get("download_fmt", "PDF")).upper()
        if raw_format == "TIFF":
            raw_format = "TIF"
        if raw_format not in DownloadFormat.values():
            raise ValueError(
                f"account {name!r} download_fmt must be one of {DownloadFormat.values()}"
            )

        return cls(
            name=name,
            access_id=str(access_id),
            access_pwd=str(access_pwd),
            file_dir=file_dir,
            download_format=DownloadFormat(raw_format),
            delete_after=_flag(data, "delete_after", False, f"account {name!r} delete_after"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "access_id": self.access_id,
            "access_pwd": self.access_pwd,
            "file_dir": str(self.file_dir),
            "download_fmt": self.download_format.value,
            "delete_after": self.delete_after,
        }


@dataclass(slots=True)
class LogConfig:
    level: str = "info"
    directory: Optional[Path] = None
    stdout: bool = True
    keep_days: int = 7

    @property
    def level_number(self) -> int:
        name = self.level.upper()
        if name == "TRACE":
            return logging.DEBUG
        if name == "WARN":
            return logging.WARNING
        return logging.getLevelName(name)


@dataclass(slots=True)
class EmailConfig:
    """SMTP settings used for operator alerts."""

    enabled: bool = False
    recipients: Tuple[str, ...] = ()
    sender: str = ""
    server: str = "127.0.0.1"
    port: int = 25
    starttls: bool = False
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    timeout: float = 30.0


@dataclass(slots=True)
class AlertConfig:
    subject_prefix: str = "SRFax Service: "
    queue_size: int = 100


@dataclass(slots=True)
class ProviderConfig:
    api_url: str = DEFAULT_API_URL
    root_url: str = DEFAULT_ROOT_URL
    timeout: float = 30.0


@dataclass(slots=True)
class AppConfig:
    """Top-level application configuration."""

    tick_rate: float
    accounts_path: Path
    log: LogConfig
    email: EmailConfig
    alerts: AlertConfig
    provider: ProviderConfig

    @staticmethod
    def _coerce_path(
        value: Optional[str | Path], *, base_dir: Optional[Path] = None
    ) -> Optional[Path]:
        if value is None:
            return None
        path = Path(value).expanduser()
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        return path.resolve()

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], *, base_dir: Optional[Path] = None
    ) -> "AppConfig":
        tick_rate = float(data.get("tick_rate", 5))
        if tick_rate <= 0:
            raise ValueError("tick_rate must be a positive number of seconds")

        accounts_path = cls._coerce_path(
            data.get("accounts_path", DEFAULT_ACCOUNTS_FILENAME), base_dir=base_dir
        )

        log_data = data.get("log") or {}
        level = str(log_data.get("level", "info")).lower()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log.level must be one of {sorted(_LOG_LEVELS)}")
        log = LogConfig(
            level=level,
            directory=cls._coerce_path(log_data.get("dir"), base_dir=base_dir),
            stdout=_flag(log_data, "stdout", True, "log.stdout"),
            keep_days=int(log_data.get("keep_days", 7)),
        )

        email_data = data.get("email") or {}
        recipients: Sequence[str] = email_data.get("recipients") or []
        email = EmailConfig(
            enabled=_flag(email_data, "enabled", False, "email.enabled"),
            recipients=tuple(str(address) for address in recipients),
            sender=str(email_data.get("from", "")),
            server=str(email_data.get("server", "127.0.0.1")),
            port=int(email_data.get("port", 25)),
            starttls=_flag(email_data, "starttls", False, "email.starttls"),
            username=email_data.get("username"),
            password=_expand_env(email_data.get("password")),
            timeout=float(email_data.get("timeout", 30.0)),
        )
        if email.enabled and (not email.sender or not email.recipients):
            raise ValueError(
                "email.from and email.recipients are required when email is enabled"
            )

        alert_data = data.get("alerts") or {}
        alerts = AlertConfig(
            subject_prefix=str(alert_data.get("subject_prefix", "SRFax Service: ")),
            queue_size=max(1, int(alert_data.get("queue_size", 100))),
        )

        provider_data = data.get("provider") or {}
        provider = ProviderConfig(
            api_url=str(provider_data.get("api_url", DEFAULT_API_URL)),
            root_url=str(provider_data.get("root_url", DEFAULT_ROOT_URL)),
            timeout=float(provider_data.get("timeout", 30.0)),
        )

        return cls(
            tick_rate=tick_rate,
            accounts_path=accounts_path,  # type: ignore[arg-type]
            log=log,
            email=email,
            alerts=alerts,
            provider=provider,
        )


def _flag(data: Dict[str, Any], key: str, default: bool, label: str) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{label} must be true or false, got {value!r}")
    return value


def _expand_env(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return os.path.expandvars(str(value))


def _read_json(path: str | Path, description: str) -> Tuple[Path, Any]:
    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise FileNotFoundError(f"{description} file not found: {resolved}")
    with resolved.open("r", encoding="utf-8") as handle:
        return resolved, json.load(handle)


def load_config(path: str | Path) -> AppConfig:
    """Load application settings from a JSON file."""

    config_path, data = _read_json(path, "Configuration")
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a JSON object")
    return AppConfig.from_dict(data, base_dir=config_path.parent)


def load_accounts(path: str | Path) -> List[AccountConfig]:
    """Load the account list; relative ``file_dir`` values follow the file."""

    accounts_path, data = _read_json(path, "Accounts")
    if not isinstance(data, list):
        raise ValueError(f"{accounts_path} must contain a JSON list of accounts")

    accounts = [
        AccountConfig.from_dict(entry, base_dir=accounts_path.parent) for entry in data
    ]
    names = [account.name for account in accounts]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"duplicate account names in {accounts_path}: {duplicates}")
    return accounts


def default_config_dict() -> Dict[str, Any]:
    return {
        "tick_rate": 5,
        "accounts_path": DEFAULT_ACCOUNTS_FILENAME,
        "log": {"level": "info", "dir": None, "stdout": True, "keep_days": 7},
        "email": {
            "enabled": False,
            "recipients": [],
            "from": "",
            "server": "127.0.0.1",
            "port": 25,
            "starttls": False,
            "username": None,
            "password": None,
        },
        "alerts": {"subject_prefix": "SRFax Service: ", "queue_size": 100},
        "provider": {
            "api_url": DEFAULT_API_URL,
            "root_url": DEFAULT_ROOT_URL,
            "timeout": 30,
        },
    }


def default_accounts_list() -> List[Dict[str, Any]]:
    return [
        {
            "name": "Example 1",
            "access_id": "",
            "access_pwd": "",
            "file_dir": "srfax1",
            "download_fmt": DownloadFormat.PDF.value,
            "delete_after": False,
        }
    ]


def write_default_config(path: str | Path) -> Path:
    return _write_json(path, default_config_dict())


def write_default_accounts(path: str | Path) -> Path:
    return _write_json(path, default_accounts_list())


def _write_json(path: str | Path, payload: Any) -> Path:
    target = Path(path).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return target


__all__ = [
    "AccountConfig",
    "AlertConfig",
    "AppConfig",
    "EmailConfig",
    "LogConfig",
    "ProviderConfig",
    "default_accounts_list",
    "default_config_dict",
    "load_accounts",
    "load_config",
    "write_default_accounts",
    "write_default_config",
]
