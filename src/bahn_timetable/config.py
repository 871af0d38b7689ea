from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .stations import AUTOCOMPLETE_URL


class Settings(BaseModel):
    log_level: str = "INFO"
    station_lookup_url: str = AUTOCOMPLETE_URL
    user_agent: Optional[str] = None
    request_timeout_seconds: float = Field(default=20.0, gt=0)
    total_retries: int = Field(default=3, ge=0)
    data_file: Optional[Path] = None

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


def _load_yaml(path: Optional[Path]) -> dict:
    if not path:
        return {}
    if not Path(path).exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with Path(path).open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError("Config root must be a mapping")
    return raw


# Environment variables take precedence over the file; prefix BAHN_
ENV_KEYS = {
    "BAHN_LOG_LEVEL": "log_level",
    "BAHN_STATION_LOOKUP_URL": "station_lookup_url",
    "BAHN_USER_AGENT": "user_agent",
    "BAHN_REQUEST_TIMEOUT_SECONDS": "request_timeout_seconds",
    "BAHN_TOTAL_RETRIES": "total_retries",
    "BAHN_DATA_FILE": "data_file",
}


def _env_override(config: dict) -> dict:
    out = dict(config)
    for env_key, field in ENV_KEYS.items():
        value = os.environ.get(env_key)
        if value:
            out[field] = value
    return out


def load_settings(config_path: Optional[Path] = None) -> Settings:
    base = _load_yaml(config_path)
    merged = _env_override(base)
    return Settings(**merged)
