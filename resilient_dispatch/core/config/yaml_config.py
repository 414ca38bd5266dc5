from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from resilient_dispatch.core.errors import ConfigurationError
from resilient_dispatch.domain.models import RetryPolicy, ThresholdConfig, ValidationBounds

CONFIG_ENV_VAR = "RESILIENT_DISPATCH_CONFIG"


@dataclass(frozen=True)
class NotificationConfig:
    """Notification worker queue settings plus the retry policy for deliveries."""
    max_queue: int = 2000
    poll_timeout_s: float = 0.5
    retry: RetryPolicy = field(default_factory=RetryPolicy)


@dataclass(frozen=True)
class LoggingConfig:
    """Root log level and whether to install the rich console handler."""
    level: str = "INFO"
    rich: bool = True


@dataclass(frozen=True)
class AppConfig:
    """
    Root application configuration loaded from YAML.

    Every section is optional; missing sections fall back to the dataclass
    defaults.
    """
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    bounds: ValidationBounds = field(default_factory=ValidationBounds)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("config.yaml must contain a YAML mapping at the root")
    return data


def _resolve_default_config_path() -> Path:
    """
    Resolve config.yaml location.

    Priority:
    1) RESILIENT_DISPATCH_CONFIG env var if provided
    2) ./config.yaml in current working directory
    """
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser().resolve()
    return Path("config.yaml").resolve()


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' must be a mapping")
    return value


def _as_int(value: Any, key: str) -> int:
    # YAML bools are ints in Python; floats must be integral.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"'{key}' must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ConfigurationError(f"'{key}' must be an integer, got {value!r}")
    return int(value)


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be true or false, got {value!r}")
    return value


def _retry_policy(r: Dict[str, Any], default: RetryPolicy) -> RetryPolicy:
    return RetryPolicy(
        max_retries=_as_int(r.get("max_retries", default.max_retries), "max_retries"),
        base_delay_s=float(r.get("base_delay_s", default.base_delay_s)),
        max_delay_s=float(r.get("max_delay_s", default.max_delay_s)),
        backoff_multiplier=float(r.get("backoff_multiplier", default.backoff_multiplier)),
    )


def parse_app_config(raw: Dict[str, Any]) -> AppConfig:
    """
    Convert a raw mapping (as read from YAML) into typed config objects.

    Raises
    ------
    ConfigurationError
        If a section has the wrong shape or a value is out of range.
    """
    try:
        # ---- thresholds ----
        t = _section(raw, "thresholds")
        td = ThresholdConfig()
        thresholds = ThresholdConfig(
            temperature_min=float(t.get("temperature_min", td.temperature_min)),
            temperature_max=float(t.get("temperature_max", td.temperature_max)),
            humidity_max=float(t.get("humidity_max", td.humidity_max)),
            pressure_min=float(t.get("pressure_min", td.pressure_min)),
            pressure_max=float(t.get("pressure_max", td.pressure_max)),
        )

        # ---- validation bounds ----
        b = _section(raw, "bounds")
        bd = ValidationBounds()
        bounds = ValidationBounds(
            temperature_min=float(b.get("temperature_min", bd.temperature_min)),
            temperature_max=float(b.get("temperature_max", bd.temperature_max)),
            humidity_min=float(b.get("humidity_min", bd.humidity_min)),
            humidity_max=float(b.get("humidity_max", bd.humidity_max)),
            pressure_min=float(b.get("pressure_min", bd.pressure_min)),
            pressure_max=float(b.get("pressure_max", bd.pressure_max)),
        )

        # ---- retry ----
        retry = _retry_policy(_section(raw, "retry"), RetryPolicy())

        # ---- notification ----
        n = _section(raw, "notification")
        nd = NotificationConfig()
        notification = NotificationConfig(
            max_queue=_as_int(n.get("max_queue", nd.max_queue), "max_queue"),
            poll_timeout_s=float(n.get("poll_timeout_s", nd.poll_timeout_s)),
            retry=_retry_policy(_section(n, "retry"), retry),
        )

        # ---- logging ----
        lg = _section(raw, "logging")
        logging_cfg = LoggingConfig(
            level=str(lg.get("level", "INFO")).upper(),
            rich=_as_bool(lg.get("rich", True), "rich"),
        )
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    return AppConfig(
        thresholds=thresholds,
        bounds=bounds,
        retry=retry,
        notification=notification,
        logging=logging_cfg,
    )


def load_app_config(path: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from YAML and convert into typed config objects.

    Parameters
    ----------
    path
        Explicit path to config.yaml. If None, uses default resolution.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ConfigurationError
        If fields are invalid.
    """
    cfg_path = Path(path).expanduser().resolve() if path else _resolve_default_config_path()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    return parse_app_config(_read_yaml(cfg_path))
