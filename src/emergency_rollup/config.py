"""Runtime configuration schema and validation using pydantic."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_TARGET_PROVINCE = "cebu"
DEFAULT_PENDING_MARKER = "pending"
DEFAULT_API_URL = "https://calamity-response-app.onrender.com/api/emergencies"


def normalize_name(value: str | None) -> str:
    """Trim and lower-case a location component; ``None`` becomes ``""``."""
    return (value or "").strip().lower()


class RollupConfig(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    target_province: str = DEFAULT_TARGET_PROVINCE
    pending_marker: str = DEFAULT_PENDING_MARKER
    high_severity_threshold: float = Field(default=0.70, ge=0.0, le=1.0)
    medium_severity_threshold: float = Field(default=0.30, ge=0.0, le=1.0)
    api_url: str = DEFAULT_API_URL
    timeout_seconds: int = Field(default=30, ge=1, le=300)
    refresh_interval_minutes: int = Field(default=5, ge=1, le=1440)

    @field_validator("target_province")
    @classmethod
    def validate_target_province(cls, value: str) -> str:
        cleaned = normalize_name(value)
        if not cleaned:
            raise ValueError("A target province is required.")
        return cleaned

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL, got {value!r}")
        return value

    @model_validator(mode="after")
    def validate_thresholds(self) -> "RollupConfig":
        if self.medium_severity_threshold > self.high_severity_threshold:
            raise ValueError("medium_severity_threshold must not exceed high_severity_threshold")
        return self

    @property
    def province_label(self) -> str:
        return self.target_province.title()
