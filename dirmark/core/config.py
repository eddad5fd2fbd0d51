from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DIRMARK_", case_sensitive=False)

    log_level: str = "info"
    log_format: str = "json"
    log_dir: Path | None = None
    start_path: Path | None = None
    sort_by: str = "name"
    sort_descending: bool = False
    filter_ignore_case: bool = False
    lock_timeout: float = Field(default=1.0, gt=0)


@lru_cache
def get_runtime_config() -> RuntimeConfig:
    return RuntimeConfig()
