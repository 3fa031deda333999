"""Configuration helpers for the MediTrust verification toolkit."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, HttpUrl, PositiveInt, field_validator

from .authenticity import DEFAULT_BANNED_SUBSTRINGS, DEFAULT_TRUSTED_MANUFACTURERS
from .expiry import NEAR_EXPIRY_DAYS


class VerificationServiceSettings(BaseModel):
    """Connection settings for the remote verification service."""

    base_url: HttpUrl = Field(
        default="http://localhost:3000",
        description="Base URL of the verification service.",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Optional bearer token for the verification service.",
    )
    request_timeout_ms: Optional[PositiveInt] = Field(
        default=None,
        description="Request timeout in milliseconds; unset keeps the HTTP client's default.",
    )
    enabled: bool = Field(
        default=True,
        description="Disable to skip the remote check and always assess locally.",
    )

    @property
    def timeout_seconds(self) -> Optional[float]:
        if self.request_timeout_ms is None:
            return None
        return self.request_timeout_ms / 1000.0


class VerificationPolicy(BaseModel):
    """Local heuristic parameters used when the service cannot be reached."""

    trusted_manufacturers: List[str] = Field(
        default_factory=lambda: sorted(DEFAULT_TRUSTED_MANUFACTURERS),
        min_length=1,
        description="Manufacturer identifiers accepted by the local check.",
    )
    banned_substrings: List[str] = Field(
        default_factory=lambda: sorted(DEFAULT_BANNED_SUBSTRINGS),
        description="Fragments that mark a manufacturer identifier as counterfeit.",
    )
    near_expiry_days: int = Field(
        default=NEAR_EXPIRY_DAYS,
        ge=0,
        description="Days before expiry during which a product counts as near expiry.",
    )

    @field_validator("trusted_manufacturers")
    @classmethod
    def _normalize_manufacturers(cls, value: List[str]) -> List[str]:
        cleaned = [item.strip().lower() for item in value]
        if any(not item for item in cleaned):
            raise ValueError("trusted manufacturer entries cannot be empty")
        return cleaned

    @field_validator("banned_substrings")
    @classmethod
    def _normalize_fragments(cls, value: List[str]) -> List[str]:
        return [item.strip().lower() for item in value if item.strip()]


class ProjectConfig(BaseModel):
    """Top-level configuration for the verification toolkit."""

    service: VerificationServiceSettings = Field(default_factory=VerificationServiceSettings)
    policy: VerificationPolicy = Field(default_factory=VerificationPolicy)


def load_config(path: Path | str) -> ProjectConfig:
    """Load and validate project configuration from a YAML or JSON file."""

    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("r", encoding="utf-8") as handle:
        raw: Any = yaml.safe_load(handle)

    if not isinstance(raw, dict):
        raise ValueError("Configuration root must be a mapping/dictionary")

    return ProjectConfig.model_validate(raw)


__all__ = [
    "VerificationServiceSettings",
    "VerificationPolicy",
    "ProjectConfig",
    "load_config",
]
