#
# src/testcall/plugin.py
#
"""
pytest plugin exposing testcall fixtures.

Configuration precedence: --testcall-build-dir > ini options >
environment variables > [tool.testcall] in pyproject.toml > defaults.
"""
from collections.abc import Callable, Iterator
from pathlib import Path

import attrs
import pytest

from testcall.call import TestCall
from testcall.config import TestCallConfig, load_config
from testcall.exceptions import ConfigurationError
from testcall.protocols import ExecutableRegistry
from testcall.registry import get_registry
from testcall.telemetry import StructLogger, get_logger, setup_logging
from testcall.testdir import TempDir

log: StructLogger = get_logger("testcall.plugin")

_CONFIG_KEY = pytest.StashKey[TestCallConfig]()
_CONFIG_ERROR_KEY = pytest.StashKey[ConfigurationError]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("testcall", "running built executables")
    group.addoption(
        "--testcall-build-dir",
        dest="testcall_build_dir",
        default=None,
        help="Directory holding the executables under test.",
    )
    parser.addini("testcall_build_dir", "Directory holding the executables under test.", default="")
    parser.addini("testcall_log_level", "Log level for testcall's own logging.", default="")


def _resolve_config(config: pytest.Config) -> TestCallConfig:
    pyproject = config.rootpath / "pyproject.toml"
    loaded = load_config(pyproject if pyproject.is_file() else None)

    overrides: dict[str, object] = {}
    ini_build_dir = config.getini("testcall_build_dir")
    if ini_build_dir:
        overrides["build_dir"] = config.rootpath / ini_build_dir
    ini_log_level = config.getini("testcall_log_level")
    if ini_log_level:
        overrides["log_level"] = ini_log_level
    option_build_dir = config.getoption("testcall_build_dir")
    if option_build_dir:
        overrides["build_dir"] = Path(option_build_dir).absolute()

    try:
        return attrs.evolve(loaded, **overrides)
    except ValueError as e:
        raise ConfigurationError(f"Invalid testcall pytest options: {e}") from e


def pytest_configure(config: pytest.Config) -> None:
    """
    Resolves the configuration once per session.

    A broken configuration only warns here, so sessions that never request a
    testcall fixture keep running. The error is raised from the fixtures.
    """
    try:
        testcall_config = _resolve_config(config)
    except ConfigurationError as e:
        config.stash[_CONFIG_ERROR_KEY] = e
        config.issue_config_time_warning(
            pytest.PytestConfigWarning(f"testcall configuration is invalid: {e}"),
            stacklevel=2,
        )
        return

    config.stash[_CONFIG_KEY] = testcall_config
    if testcall_config.logging_requested:
        setup_logging(
            level=testcall_config.numeric_log_level,
            json_logs=testcall_config.json_logs,
            log_file=str(testcall_config.log_file) if testcall_config.log_file else None,
            console=False,
        )
    log.debug("testcall plugin configured", registry=testcall_config.registry_kind)


@pytest.fixture(scope="session")
def testcall_config(pytestconfig: pytest.Config) -> TestCallConfig:
    """The resolved testcall configuration. Raises ConfigurationError if it is invalid."""
    error = pytestconfig.stash.get(_CONFIG_ERROR_KEY, None)
    if error is not None:
        raise error
    return pytestconfig.stash[_CONFIG_KEY]


@pytest.fixture(scope="session")
def executables(testcall_config: TestCallConfig) -> ExecutableRegistry:
    """The registry of executables under test, built once per session."""
    return get_registry(testcall_config)


@pytest.fixture
def testcall(executables: ExecutableRegistry) -> Iterator[Callable[[str], TestCall]]:
    """
    Factory fixture: `testcall(name)` returns a TestCall for `name`.

    Every TestCall made through the factory is closed after the test.
    """
    created: list[TestCall] = []

    def factory(name: str) -> TestCall:
        call = TestCall(executables, name)
        created.append(call)
        return call

    yield factory

    for call in created:
        call.close()


@pytest.fixture
def scoped_dir() -> Iterator[TempDir]:
    """A scoped temporary directory removed after the test."""
    with TempDir() as tempdir:
        yield tempdir

# 🔼⚙️
