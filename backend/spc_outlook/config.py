"""
config.py — Runtime settings for the outlook lookup.

The time zone used to normalise outlook timestamps is an explicit setting
that is handed to the loader; nothing reads it from process-wide state.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, field_validator

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

_ENV_PREFIX = "SPC_OUTLOOK_"


class Settings(BaseModel):
    """
    Attributes:
        kml_path:    Outlook KML document loaded by the API at start-up.
        timezone:    IANA zone all validity and issue times are shown in.
        time_format: "short" for the compact "3:04pm 1/2" style, otherwise
                     a strftime pattern.
        log_level:   Root logging level name.
    """
    kml_path:    Path = _DATA_DIR / "day1otlk.kml"
    timezone:    str = "America/Chicago"
    time_format: str = "short"
    log_level:   str = "INFO"

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {value!r}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def load_settings(**overrides) -> Settings:
    """
    Build Settings from SPC_OUTLOOK_* environment variables, then apply any
    explicit overrides (None values are ignored).
    """
    values: dict[str, object] = {}
    for name in Settings.model_fields:
        raw = os.environ.get(_ENV_PREFIX + name.upper())
        if raw:
            values[name] = raw

    values.update({key: value for key, value in overrides.items() if value is not None})
    return Settings(**values)
