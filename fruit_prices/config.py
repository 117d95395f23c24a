from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SOURCE = str(Path(__file__).resolve().parent.parent / "data" / "Fruit-Prices-2022.csv")


@dataclass(frozen=True)
class Settings:
    # where the CSV comes from: http(s) URL or local path
    source: str = DEFAULT_SOURCE
    timeout_seconds: float = 10.0

    log_level: str = "INFO"
    load_on_startup: bool = True


def _env_get(name: str) -> Optional[str]:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name}: expected a boolean, got {value!r}")


def _parse_timeout(value: str) -> float:
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ValueError(f"FRUIT_PRICES_TIMEOUT: expected a number, got {value!r}") from exc
    if timeout <= 0:
        raise ValueError(f"FRUIT_PRICES_TIMEOUT: must be positive, got {value!r}")
    return timeout


def load_settings(**overrides: Any) -> Settings:
    """
    Priority: explicit overrides > ENV > defaults
    """
    values: Dict[str, Any] = {}

    source = _env_get("FRUIT_PRICES_SOURCE")
    if source is not None:
        values["source"] = source

    timeout = _env_get("FRUIT_PRICES_TIMEOUT")
    if timeout is not None:
        values["timeout_seconds"] = _parse_timeout(timeout)

    log_level = _env_get("FRUIT_PRICES_LOG_LEVEL")
    if log_level is not None:
        values["log_level"] = log_level.upper()

    load_on_startup = _env_get("FRUIT_PRICES_LOAD_ON_STARTUP")
    if load_on_startup is not None:
        values["load_on_startup"] = _parse_bool("FRUIT_PRICES_LOAD_ON_STARTUP", load_on_startup)

    values.update({k: v for k, v in overrides.items() if v is not None})
    return replace(Settings(), **values)
