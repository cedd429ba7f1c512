#
# src/testcall/exceptions.py
#
"""
Custom exceptions for testcall.
"""

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from testcall.output import CallResult


class TestCallError(Exception):
    """Base class for errors raised while setting up or running a call."""

    __test__ = False


class ConfigurationError(TestCallError):
    """Raised when the testcall configuration cannot be loaded or is invalid."""

    pass


class ResolutionError(TestCallError):
    """Raised when a registry has no executable under the requested name."""

    def __init__(
        self,
        name: str,
        message: str | None = None,
        available: list[str] | None = None,
    ):
        self.name = name
        self.available = available
        full_message = f"[Registry] {message or 'No executable registered'} (Name: '{name}')"
        super().__init__(full_message)
        if available is not None and hasattr(self, "add_note"):
            self.add_note(f"Registered executables: {', '.join(available) or '<none>'}")


class SpawnError(TestCallError):
    """Raised when the executable could not be started as a child process."""

    def __init__(
        self,
        message: str,
        executable: str | os.PathLike[str] | None = None,
        cwd: str | os.PathLike[str] | None = None,
        details: Exception | None = None,
    ):
        self.executable = executable
        self.cwd = cwd
        self.details = details
        full_message = f"[Spawn] {message}"
        if executable:
            full_message += f" (Executable: '{executable}')"
        if cwd:
            full_message += f" (Cwd: '{cwd}')"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class CallAssertionError(AssertionError):
    """
    Raised by CallResult assertions.

    Subclasses AssertionError so that any test runner records it as a failed
    test rather than an error. The offending result is kept on `.result`.
    """

    def __init__(self, message: str, result: "CallResult"):
        self.result = result
        super().__init__(f"{message}\n{result.describe()}")


# 🔼⚙️
