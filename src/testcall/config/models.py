#
# config/models.py
#
"""
Attrs-based data models for testcall configuration.
"""

import logging
from pathlib import Path
from typing import Any

from attrs import define, field

REGISTRY_KINDS = ("directory", "path")


# --- Validators ---
def _validate_log_level(inst: Any, attr: Any, value: str | None) -> None:
    """Validator for standard logging level names."""
    if value is None:
        return
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_registry(inst: Any, attr: Any, value: str | None) -> None:
    if value is not None and value not in REGISTRY_KINDS:
        raise ValueError(f"Invalid registry '{value}'. Must be one of {list(REGISTRY_KINDS)}.")


def _optional_path(value: Any) -> Path | None:
    return None if value in (None, "") else Path(value)


@define(frozen=True, slots=True)
class TestCallConfig:
    """Root configuration object for testcall."""

    __test__ = False

    log_level: str | None = field(default=None, validator=_validate_log_level)
    json_logs: bool = field(default=False)
    log_file: Path | None = field(default=None, converter=_optional_path)
    registry: str | None = field(default=None, validator=_validate_registry)
    build_dir: Path | None = field(default=None, converter=_optional_path)

    @property
    def numeric_log_level(self) -> int:
        if self.log_level is None:
            return logging.WARNING
        return logging.getLevelName(self.log_level.upper())

    @property
    def logging_requested(self) -> bool:
        """True when any logging setting was given explicitly."""
        return self.log_level is not None or self.log_file is not None or self.json_logs

    @property
    def registry_kind(self) -> str:
        """The configured registry, or the one implied by `build_dir`."""
        if self.registry is not None:
            return self.registry
        return "directory" if self.build_dir is not None else "path"


# 🔼⚙️
