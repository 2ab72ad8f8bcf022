"""Environment and runtime settings."""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv

from .config import RollupConfig

_ENV_FIELDS = {
    "EMERGENCY_API_URL": "api_url",
    "EMERGENCY_TARGET_PROVINCE": "target_province",
    "EMERGENCY_TIMEOUT_SECONDS": "timeout_seconds",
    "EMERGENCY_REFRESH_MINUTES": "refresh_interval_minutes",
}


def load_environment() -> None:
    load_dotenv(override=False)


def config_overrides_from_env() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_key, field_name in _ENV_FIELDS.items():
        raw = os.getenv(env_key, "").strip()
        if raw:
            overrides[field_name] = raw
    return overrides


def load_config_from_env(**overrides: Any) -> RollupConfig:
    """Build a config from environment variables; explicit overrides win."""
    payload = config_overrides_from_env()
    payload.update({k: v for k, v in overrides.items() if v is not None})
    return RollupConfig.model_validate(payload)
