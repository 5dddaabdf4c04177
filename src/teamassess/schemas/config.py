"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, Field, ValidationError


class ProctoringSettings(BaseModel):
    weights: dict[str, Annotated[float, Field(ge=0)]] | None = None
    default_weight: float | None = Field(default=None, ge=0)
    max_score: int | None = Field(default=None, ge=0, le=100)


class RateLimitSettings(BaseModel):
    max_requests: int | None = None
    window_ms: int | None = None
    sweep_interval_seconds: float | None = None


class CredentialSettings(BaseModel):
    memory_cost: int | None = None
    time_cost: int | None = None
    parallelism: int | None = None


class AppConfig(BaseModel):
    proctoring: ProctoringSettings = Field(default_factory=ProctoringSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("proctoring", "rate_limit", "credentials"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
