"""Runtime configuration read from the environment.

Values come from ``PLANNER_*`` environment variables; a ``.env`` file in the
working directory is read as well. Empty values are treated as unset.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlannerSettings(BaseSettings):
    """Server settings.

    Args:
        data_dir: Directory holding per-calendar JSON files.
        legacy_file: Old single-calendar data file to import once.
        static_dir: Built browser app to serve, if any.
        host: Interface to bind.
        port: Port to listen on.
        log_level: Root logging level name.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLANNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    data_dir: Path = Field(default=Path("data"), description="Data directory")
    legacy_file: Optional[Path] = Field(
        default=Path("calendar-data.json"), description="Legacy data file"
    )
    static_dir: Optional[Path] = Field(default=None, description="Static files")
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, description="Listen port")
    log_level: str = Field(default="INFO", description="Logging level")
