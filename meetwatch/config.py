"""
Tool: Meetwatch Configuration
Purpose: Typed configuration for the sync engine, loaded from args/meetwatch.yaml

Every section has defaults, so the file is optional. Unknown keys are kept
(extra="allow") so a host shell can stash its own settings alongside ours.

Usage:
    from meetwatch.config import load_config

    config = load_config()
    config.refresh.interval_seconds  # 60.0
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from meetwatch import CONFIG_PATH
from meetwatch.logging_config import get_logger


logger = get_logger(__name__)


# =============================================================================
# Sections
# =============================================================================

class RefreshConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    interval_seconds: float = Field(default=60.0, gt=0)
    auto_refresh_enabled: bool = Field(default=True)
    wake_refresh_delay_seconds: float = Field(default=2.0, ge=0)


class SourceConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    ics_path: Optional[str] = None
    calendar_name: Optional[str] = None


class DisplayConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    timezone: Optional[str] = None
    hide_completed_after_5_min: bool = Field(default=False)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    level: str = Field(default="INFO")
    json_output: bool = Field(default=False, alias="json")


class MeetwatchConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    refresh: RefreshConfig = Field(default_factory=RefreshConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Loading
# =============================================================================

def load_config(path: Path | str | None = None) -> MeetwatchConfig:
    """
    Load and validate configuration.

    A missing file yields defaults. A file that fails to parse or validate
    is logged and also yields defaults, so a typo never stops the widget
    from refreshing.

    Args:
        path: YAML file to read (default: args/meetwatch.yaml)

    Returns:
        Validated MeetwatchConfig
    """
    yaml_path = Path(path) if path is not None else CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return MeetwatchConfig.model_validate(raw)
    except Exception as e:
        logger.warning("config_validation_failed", path=str(yaml_path), error=str(e))
        return MeetwatchConfig()


__all__ = [
    "DisplayConfig",
    "LoggingConfig",
    "MeetwatchConfig",
    "RefreshConfig",
    "SourceConfig",
    "load_config",
]
