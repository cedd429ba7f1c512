#
# src/testcall/registry.py
#
"""
Executable registries: map a logical program name to a built executable.

Registries are populated once at construction and are read-only afterwards,
so a single instance can be shared by concurrently running tests.
"""

import os
import shutil
import sys
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from testcall.config.models import TestCallConfig
from testcall.exceptions import ConfigurationError, ResolutionError
from testcall.protocols import ExecutableRegistry
from testcall.telemetry import StructLogger, get_logger

log: StructLogger = get_logger("testcall.registry")

WINDOWS_EXECUTABLE_SUFFIXES = (".exe", ".bat", ".cmd")


def _is_executable(path: Path) -> bool:
    if not path.is_file():
        return False
    if sys.platform == "win32":
        return path.suffix.lower() in WINDOWS_EXECUTABLE_SUFFIXES
    return os.access(path, os.X_OK)


class DirectoryRegistry:
    """
    Registers every executable file directly inside a build directory.

    On Windows executables are keyed by their stem, elsewhere by file name.
    """

    def __init__(self, build_dir: str | os.PathLike[str]):
        self.build_dir = Path(build_dir).absolute()
        if not self.build_dir.is_dir():
            log.warning("Build directory does not exist", build_dir=str(self.build_dir))
            raise ResolutionError(
                str(self.build_dir), message="Build directory does not exist"
            )

        found: dict[str, Path] = {}
        for entry in sorted(self.build_dir.iterdir()):
            if not _is_executable(entry):
                continue
            key = entry.stem if sys.platform == "win32" else entry.name
            found.setdefault(key, entry)

        self._executables = MappingProxyType(found)
        log.debug(
            "Scanned build directory",
            build_dir=str(self.build_dir),
            executables=len(found),
        )

    def names(self) -> list[str]:
        return sorted(self._executables)

    def resolve(self, name: str) -> Path:
        path = self._executables.get(name)
        if path is None:
            log.warning("Executable not found in build directory", program=name)
            raise ResolutionError(name, available=self.names())
        log.debug("Resolved executable", program=name, path=str(path))
        return path

    def __repr__(self) -> str:
        return f"DirectoryRegistry({str(self.build_dir)!r})"


class MappingRegistry:
    """An explicit name to path table."""

    def __init__(self, executables: Mapping[str, str | os.PathLike[str]]):
        self._executables = MappingProxyType(
            {name: Path(path).absolute() for name, path in executables.items()}
        )

    def names(self) -> list[str]:
        return sorted(self._executables)

    def resolve(self, name: str) -> Path:
        path = self._executables.get(name)
        if path is None:
            log.warning("Executable not registered", program=name)
            raise ResolutionError(name, available=self.names())
        if not path.exists():
            log.warning("Registered executable is missing", program=name, path=str(path))
            raise ResolutionError(name, message=f"Registered executable missing at '{path}'")
        log.debug("Resolved executable", program=name, path=str(path))
        return path


class PathRegistry:
    """Resolves names through the executable search path, like a shell would."""

    def __init__(self, search_path: str | None = None):
        self.search_path = search_path

    def resolve(self, name: str) -> Path:
        found = shutil.which(name, path=self.search_path)
        if found is None:
            log.warning("Executable not found on search path", program=name)
            raise ResolutionError(name, message="Executable not found on search path")
        path = Path(found).absolute()
        log.debug("Resolved executable", program=name, path=str(path))
        return path


REGISTRY_MAP = {
    "directory": DirectoryRegistry,
    "path": PathRegistry,
}


def get_registry(config: TestCallConfig) -> ExecutableRegistry:
    """
    Factory function to build the registry described by the configuration.
    """
    kind = config.registry_kind
    if kind not in REGISTRY_MAP:
        log.error("Unsupported registry specified", registry=kind)
        raise ConfigurationError(
            f"Unsupported registry: '{kind}'. Available registries: {list(REGISTRY_MAP.keys())}"
        )

    log.debug("Instantiating registry", registry=kind, build_dir=str(config.build_dir))
    if kind == "directory":
        if config.build_dir is None:
            raise ConfigurationError("The 'directory' registry requires 'build_dir' to be set")
        return DirectoryRegistry(config.build_dir)
    return PathRegistry()

# 🔼⚙️
