"""YAML configuration loader for reconciliation and geocoding settings."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from housewipe.models.pydantic_models import AlertPolicy


class ReconcileSettings(BaseModel):
    """Tuning for reconciliation passes."""

    retirement_grace_hours: float = Field(24, ge=0)
    alert_policy: AlertPolicy = AlertPolicy.SAVED_SEARCH
    max_consecutive_failures: int = Field(10, ge=1)
    fail_on_empty: bool = True
    stale_run_hours: float = Field(6, gt=0)

    model_config = ConfigDict(frozen=True)


class GeocodingSettings(BaseModel):
    """Geoapify geocoding of listings without coordinates."""

    enabled: bool = False
    api_key: str | None = None
    country_code: str = "ca"
    delay_seconds: float = Field(0.1, ge=0)
    timeout_seconds: float = Field(10, gt=0)

    model_config = ConfigDict(frozen=True)


class Settings(BaseModel):
    """Top-level application settings."""

    reconcile: ReconcileSettings = Field(default_factory=ReconcileSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)

    model_config = ConfigDict(frozen=True)


def _get_default_config_path() -> Path:
    """Get the default config path relative to project root."""
    return Path(__file__).parent.parent.parent / "config" / "housewipe.yaml"


def _load_raw_config(path: Path | None = None) -> dict[str, Any]:
    """Load raw YAML config from path.

    Args:
        path: Path to YAML config file. If None, uses default config/housewipe.yaml
            and treats a missing default file as empty.

    Returns:
        Raw config dictionary.

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
    """
    if path is None:
        path = _get_default_config_path()
        if not path.exists():
            return {}

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return raw_config if raw_config is not None else {}


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings from YAML.

    ``GEOAPIFY_API_KEY`` in the environment overrides ``geocoding.api_key``.

    Args:
        path: Path to YAML config file. If None, uses default config/housewipe.yaml.

    Returns:
        Validated Settings instance.

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
        ValidationError: If config doesn't match expected schema.
    """
    raw_config = _load_raw_config(path)

    geocoding = dict(raw_config.get("geocoding") or {})
    if api_key := os.environ.get("GEOAPIFY_API_KEY"):
        geocoding["api_key"] = api_key

    return Settings(
        reconcile=ReconcileSettings(**(raw_config.get("reconcile") or {})),
        geocoding=GeocodingSettings(**geocoding),
    )


def settings_path_from_env() -> Path | None:
    """Config path named by ``HOUSEWIPE_CONFIG``, if set."""
    env_path = os.environ.get("HOUSEWIPE_CONFIG")
    return Path(env_path) if env_path else None
