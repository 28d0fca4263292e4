"""
Runtime configuration for the CCRM platform.

The configuration is built once at startup and handed to the services that
need it; nothing reads it from a global.
"""

import json
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from .core.exceptions import ConfigurationError


class CCRMConfig(BaseModel):
    data_directory: str = Field("ccrm_data", min_length=1)
    max_credits_per_semester: int = Field(24, ge=1)
    host: str = "0.0.0.0"
    rest_port: int = Field(8000, ge=1, le=65535)
    log_level: str = Field("INFO", pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$')

    model_config = {"frozen": True}


def load_config(path: Optional[str] = None, **overrides) -> CCRMConfig:
    """Load configuration from a JSON file, then apply keyword overrides.

    Overrides whose value is None are ignored so that unset command line
    options fall through to the file or the defaults.
    """
    data = {}
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to read configuration file {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a JSON object")

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return CCRMConfig(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", details={'errors': e.errors()})
