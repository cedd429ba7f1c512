#
# src/testcall/protocols.py
#
"""
Defines the runtime protocols testcall consumes from its collaborators.
"""
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ExecutableRegistry(Protocol):
    """
    Protocol for a lookup from a logical program name to a built executable.
    """
    def resolve(self, name: str) -> Path:
        """
        Resolves a program name to the absolute path of its executable.

        Args:
            name: The logical program name.

        Returns:
            The absolute path to the executable.

        Raises:
            ResolutionError: When nothing is registered under `name`.
        """
        ...


@runtime_checkable
class ScopedDirectory(Protocol):
    """
    Protocol for a directory handle that owns its backing directory.

    `cleanup()` must release the directory exactly once, however often it is
    called.
    """
    @property
    def path(self) -> Path: ...

    def cleanup(self) -> None: ...

# 🔼⚙️
