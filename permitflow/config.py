from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from .constants import DEFAULT_MAX_SAVE_ATTEMPTS
from .models import Priority

CONFIG_ENV_VAR = "PERMITFLOW_CONFIG"
DATABASE_URL_ENV_VARS = ("PERMITFLOW_DATABASE_URL", "DATABASE_URL")


class EngineConfig(BaseModel):
    """Transition engine settings."""

    enforce_step_order: bool = False
    max_save_attempts: int = Field(DEFAULT_MAX_SAVE_ATTEMPTS, ge=1)


class PermitflowConfig(BaseModel):
    """Top-level configuration model.

    A database URL in the environment takes precedence over the file value.
    """

    engine: EngineConfig = EngineConfig()
    database_url: Optional[str] = None
    templates_path: Optional[str] = None
    seed_default_templates: bool = True
    default_priority: Priority = "medium"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _database_url_from_env(self) -> "PermitflowConfig":
        for name in DATABASE_URL_ENV_VARS:
            if os.getenv(name):
                self.database_url = os.environ[name]
                break
        return self


def load_config(path: Optional[str] = None) -> PermitflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to the
            PERMITFLOW_CONFIG env variable or 'config.yaml' in the current
            directory. A missing file yields the defaults.
    """

    config_file = Path(path or os.getenv(CONFIG_ENV_VAR, "config.yaml"))
    if not config_file.is_file():
        return PermitflowConfig()
    data = yaml.safe_load(config_file.read_text()) or {}
    return PermitflowConfig.model_validate(data)
