"""
Configuration loader for sunmeadow.

What it does:
- Reads static settings from `config/config.yaml` (a missing file means
  defaults everywhere).
- Overlays environment variables:
  `SUNMEADOW_ADMIN_SECRET`, `SUNMEADOW_STORAGE_BACKEND`,
  `SUNMEADOW_STORAGE_PATH`, `PROMETHEUS_PORT`.
- Validates the result using Pydantic models.

Where it is used:
- Called by `sunmeadow.main` and the HTTP service to build a `Settings`
  object for runtime.
"""

import os
from typing import Any, Dict, Literal
import pathlib

import yaml
from pydantic import BaseModel, Field, field_validator

from ..ledger.model import HISTORY_LIMIT, STORAGE_KEY, UNIT
from ..layout.generator import CAP
from ..storage.blob import DEFAULT_QUOTA_BYTES

DEFAULT_CONFIG_PATH = "config/config.yaml"


class StorageConfig(BaseModel):
    """Where the ledger blob lives."""
    backend: Literal["sqlite", "memory"] = "sqlite"
    path: str = "data/meadow.sqlite"
    key: str = STORAGE_KEY
    quota_bytes: int = DEFAULT_QUOTA_BYTES


class LedgerConfig(BaseModel):
    unit: int = UNIT
    history_limit: int = HISTORY_LIMIT

    @field_validator("unit", "history_limit")
    @classmethod
    def positive(cls, v, info):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v


class MeadowConfig(BaseModel):
    cap: int = CAP

    @field_validator("cap")
    @classmethod
    def non_negative(cls, v):
        if v < 0:
            raise ValueError("cap must be >= 0")
        return v


class Settings(BaseModel):
    """Runtime settings assembled from YAML + environment variables."""
    storage: StorageConfig = Field(default_factory=StorageConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    meadow: MeadowConfig = Field(default_factory=MeadowConfig)
    admin_secret: str = ""
    prometheus_port: int = 8000


def _read_yaml(path: str) -> Dict[str, Any]:
    p = pathlib.Path(path)
    if not p.exists():
        return {}
    with open(p, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(path: str = DEFAULT_CONFIG_PATH) -> Settings:
    """Load YAML config, overlay env vars, and return validated Settings."""
    config = _read_yaml(path)
    storage = dict(config.get("storage") or {})
    if os.getenv("SUNMEADOW_STORAGE_BACKEND"):
        storage["backend"] = os.environ["SUNMEADOW_STORAGE_BACKEND"]
    if os.getenv("SUNMEADOW_STORAGE_PATH"):
        storage["path"] = os.environ["SUNMEADOW_STORAGE_PATH"]
    return Settings(
        storage=StorageConfig(**storage),
        ledger=LedgerConfig(**(config.get("ledger") or {})),
        meadow=MeadowConfig(**(config.get("meadow") or {})),
        admin_secret=os.getenv("SUNMEADOW_ADMIN_SECRET", ""),
        prometheus_port=int(os.getenv("PROMETHEUS_PORT", config.get("prometheus_port", 8000))),
    )
