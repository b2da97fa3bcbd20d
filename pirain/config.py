"""Environment-driven settings for the rain server."""

from __future__ import annotations

import os
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, Field, validator

from .geometry import MIN_RESOLUTION

_current_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.dirname(_current_dir)

DEFAULT_DB_PATH = os.path.join(_project_root, "data", "rain.db")


class RainSettings(BaseModel):
    rain_interval_ms: float = Field(500.0, gt=0)
    rain_batch: int = Field(100, ge=0)
    drop_sizes: Tuple[int, ...] = (1, 10, 100, 1000)
    resolution: float = Field(0.001, ge=MIN_RESOLUTION, le=1)
    db_path: str = DEFAULT_DB_PATH
    host: str = "127.0.0.1"
    port: int = Field(9000, ge=1, le=65535)
    log_level: str = "INFO"
    sql_logging: bool = False

    @validator("drop_sizes")
    def validate_drop_sizes(cls, v):
        if not v:
            raise ValueError("drop_sizes cannot be empty")
        if any(size < 0 for size in v):
            raise ValueError("drop sizes must be non-negative")
        return v

    @validator("log_level")
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{v}'")
        return level


def _parse_sizes(raw: str) -> Tuple[int, ...]:
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        raise ValueError(f"PIRAIN_DROP_SIZES must be comma-separated integers, got '{raw}'")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> RainSettings:
    """Build settings from PIRAIN_* environment variables.

    Unset variables keep their defaults. Invalid values raise ValueError
    (pydantic's ValidationError is a ValueError subclass).
    """
    env = os.environ if environ is None else environ
    values = {}
    if env.get("PIRAIN_RAIN_INTERVAL_MS"):
        values["rain_interval_ms"] = env["PIRAIN_RAIN_INTERVAL_MS"]
    if env.get("PIRAIN_RAIN_BATCH"):
        values["rain_batch"] = env["PIRAIN_RAIN_BATCH"]
    if env.get("PIRAIN_DROP_SIZES"):
        values["drop_sizes"] = _parse_sizes(env["PIRAIN_DROP_SIZES"])
    if env.get("PIRAIN_RESOLUTION"):
        values["resolution"] = env["PIRAIN_RESOLUTION"]
    if env.get("PIRAIN_DB_PATH"):
        values["db_path"] = env["PIRAIN_DB_PATH"]
    if env.get("PIRAIN_HOST"):
        values["host"] = env["PIRAIN_HOST"]
    if env.get("PIRAIN_PORT"):
        values["port"] = env["PIRAIN_PORT"]
    if env.get("PIRAIN_LOG_LEVEL"):
        values["log_level"] = env["PIRAIN_LOG_LEVEL"]
    values["sql_logging"] = env.get("ENABLE_SQL_LOGGING", "false").lower() in ("true", "1", "t")
    return RainSettings(**values)
