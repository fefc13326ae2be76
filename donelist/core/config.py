from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DONELIST_", case_sensitive=False)

    log_level: str = "info"
    log_format: str = "json"
    data_dir: Path | None = None
    storage_key: str = "tasks"


@lru_cache
def get_runtime_config() -> RuntimeConfig:
    return RuntimeConfig()
