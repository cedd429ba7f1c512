#
# config/loader.py
#
"""
Loads testcall configuration from pyproject.toml and the environment.

Precedence: environment variables > [tool.testcall] table > defaults.
"""

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import attrs

from testcall.config.models import TestCallConfig
from testcall.exceptions import ConfigurationError
from testcall.telemetry import StructLogger, get_logger

log: StructLogger = get_logger("testcall.config")

ENV_PREFIX = "TESTCALL_"
TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUTHY:
        return True
    if value in FALSY:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: '{raw}'")


def _read_tool_table(pyproject: Path) -> dict[str, Any]:
    try:
        with pyproject.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        log.debug("No pyproject.toml found", path=str(pyproject))
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Failed to read '{pyproject}': {e}") from e

    table = data.get("tool", {}).get("testcall", {})
    if not isinstance(table, dict):
        raise ConfigurationError(f"[tool.testcall] in '{pyproject}' must be a table")
    return dict(table)


def load_config(
    pyproject: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> TestCallConfig:
    """
    Builds a TestCallConfig from an optional pyproject.toml and the environment.

    A relative `build_dir` from the file is resolved against the directory
    holding the pyproject.toml.
    """
    environ = os.environ if environ is None else environ
    known = {a.name for a in attrs.fields(TestCallConfig)}
    values: dict[str, Any] = {}

    if pyproject is not None:
        values = _read_tool_table(pyproject)
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown [tool.testcall] keys in '{pyproject}': {unknown}")
        build_dir = values.get("build_dir")
        if build_dir and not Path(build_dir).is_absolute():
            values["build_dir"] = pyproject.parent / build_dir

    for name in known:
        env_name = f"{ENV_PREFIX}{name.upper()}"
        if env_name not in environ:
            continue
        raw = environ[env_name]
        values[name] = _parse_bool(env_name, raw) if name == "json_logs" else raw
        log.debug("Configuration overridden from environment", variable=env_name)

    try:
        config = TestCallConfig(**values)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid testcall configuration: {e}") from e

    log.debug(
        "Configuration loaded",
        source=str(pyproject) if pyproject else "<environment>",
        registry=config.registry_kind,
        build_dir=str(config.build_dir),
    )
    return config

# 🔼⚙️
