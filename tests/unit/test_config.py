#
# tests/unit/test_config.py
#
"""
Tests for configuration models and loading.
"""

import logging
from pathlib import Path

import pytest

from testcall import ConfigurationError
from testcall.config import TestCallConfig, load_config


def write_pyproject(tmp_path: Path, body: str) -> Path:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(body)
    return pyproject


class TestConfigModel:
    """The attrs configuration model."""

    def test_defaults(self) -> None:
        config = TestCallConfig()

        assert config.log_level is None
        assert config.numeric_log_level == logging.WARNING
        assert not config.logging_requested
        assert config.build_dir is None
        assert config.registry_kind == "path"

    def test_build_dir_implies_directory_registry(self) -> None:
        config = TestCallConfig(build_dir="build/bin")

        assert config.build_dir == Path("build/bin")
        assert config.registry_kind == "directory"

    @pytest.mark.parametrize(
        "settings",
        [{"log_level": "debug"}, {"log_file": "testcall.log"}, {"json_logs": True}],
    )
    def test_logging_requested_by_any_logging_setting(self, settings: dict) -> None:
        assert TestCallConfig(**settings).logging_requested

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError, match="Invalid log_level"):
            TestCallConfig(log_level="LOUD")

    def test_invalid_registry(self) -> None:
        with pytest.raises(ValueError, match="Invalid registry"):
            TestCallConfig(registry="cargo")


class TestLoadConfig:
    """Loading from pyproject.toml and the environment."""

    def test_no_sources_gives_defaults(self) -> None:
        assert load_config(environ={}) == TestCallConfig()

    def test_reads_tool_table(self, tmp_path: Path) -> None:
        pyproject = write_pyproject(
            tmp_path,
            '[tool.testcall]\nbuild_dir = "target/bin"\nlog_level = "debug"\njson_logs = true\n',
        )

        config = load_config(pyproject, environ={})

        assert config.build_dir == tmp_path / "target/bin"
        assert config.log_level == "debug"
        assert config.numeric_log_level == logging.DEBUG
        assert config.json_logs is True

    def test_absolute_build_dir_kept(self, tmp_path: Path) -> None:
        pyproject = write_pyproject(tmp_path, f'[tool.testcall]\nbuild_dir = "{tmp_path.as_posix()}/out"\n')

        assert load_config(pyproject, environ={}).build_dir == Path(f"{tmp_path.as_posix()}/out")

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "pyproject.toml", environ={}) == TestCallConfig()

    def test_without_tool_table(self, tmp_path: Path) -> None:
        pyproject = write_pyproject(tmp_path, '[project]\nname = "demo"\n')

        assert load_config(pyproject, environ={}) == TestCallConfig()

    def test_environment_overrides_file(self, tmp_path: Path) -> None:
        pyproject = write_pyproject(tmp_path, '[tool.testcall]\nbuild_dir = "a"\nlog_level = "INFO"\n')
        environ = {
            "TESTCALL_BUILD_DIR": "/opt/build",
            "TESTCALL_LOG_LEVEL": "ERROR",
            "TESTCALL_JSON_LOGS": "yes",
            "TESTCALL_REGISTRY": "path",
        }

        config = load_config(pyproject, environ=environ)

        assert config.build_dir == Path("/opt/build")
        assert config.log_level == "ERROR"
        assert config.json_logs is True
        assert config.registry_kind == "path"

    def test_malformed_toml(self, tmp_path: Path) -> None:
        pyproject = write_pyproject(tmp_path, "[tool.testcall\n")

        with pytest.raises(ConfigurationError, match="Failed to read"):
            load_config(pyproject, environ={})

    def test_unknown_keys(self, tmp_path: Path) -> None:
        pyproject = write_pyproject(tmp_path, "[tool.testcall]\ntimeout = 5\n")

        with pytest.raises(ConfigurationError, match="timeout"):
            load_config(pyproject, environ={})

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid log_level"):
            load_config(environ={"TESTCALL_LOG_LEVEL": "LOUD"})

    def test_invalid_boolean(self) -> None:
        with pytest.raises(ConfigurationError, match="TESTCALL_JSON_LOGS"):
            load_config(environ={"TESTCALL_JSON_LOGS": "maybe"})

# 🔼⚙️
