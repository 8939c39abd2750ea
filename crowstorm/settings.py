from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from prefetch.sources import DEFAULT_QUERY_URL

__all__ = ["Settings", "ENV_VARS", "load_settings"]

# Settings field -> environment variable.
ENV_VARS: dict[str, str] = {
    "asset_root": "ASSET_ROOT",
    "data_dir": "DATA_DIR",
    "source_list": "SOURCE_LIST",
    "query_url_template": "QUERY_URL_TEMPLATE",
    "fetch_timeout": "FETCH_TIMEOUT",
    "fetch_workers": "FETCH_WORKERS",
    "prefetch_on_startup": "PREFETCH_ON_STARTUP",
    "host": "HOST",
    "port": "PORT",
    "log_level": "LOG_LEVEL",
}


class Settings(BaseModel):
    """Runtime configuration, built once and shared read-only."""

    model_config = ConfigDict(frozen=True)

    asset_root: Path = Path("public")
    data_dir: Path = Path("data")
    source_list: Path = Path("symbol_locations.txt")
    query_url_template: str = DEFAULT_QUERY_URL
    fetch_timeout: float = Field(30.0, gt=0)
    fetch_workers: int = Field(1, ge=1)
    prefetch_on_startup: bool = True
    host: str = "0.0.0.0"
    port: int = Field(18080, ge=0, le=65535)
    log_level: str = "INFO"


def load_settings(env: Mapping[str, str] | None = None, **overrides: object) -> Settings:
    """Build Settings from environment variables plus explicit overrides.

    Raises:
        pydantic.ValidationError: if a value is malformed or out of range.
    """
    env = os.environ if env is None else env
    raw: dict[str, object] = {
        field: env[var] for field, var in ENV_VARS.items() if env.get(var, "") != ""
    }
    raw.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**raw)
