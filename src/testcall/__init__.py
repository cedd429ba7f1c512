#
# src/testcall/__init__.py
#
"""
testcall: run built executables from tests and assert on their outcome.

    registry = DirectoryRegistry("build/bin")
    with TestCall(registry, "myprogram") as myprogram:
        myprogram.current_dir(TempDir())
        myprogram.call(["--version"]).assert_success().assert_stdout_utf8(r"myprogram 0\.1\.")

Assertion helpers raise CallAssertionError (an AssertionError) carrying the
captured output. Setup problems raise ResolutionError or SpawnError.
"""
from .call import NO_ARGS, TestCall, TestChild
from .exceptions import (
    CallAssertionError,
    ConfigurationError,
    ResolutionError,
    SpawnError,
    TestCallError,
)
from .output import CallResult
from .protocols import ExecutableRegistry, ScopedDirectory
from .regex import captures_utf8
from .registry import DirectoryRegistry, MappingRegistry, PathRegistry, get_registry
from .testdir import PathDir, TempDir, TempDirCleanup, TestDir

__all__ = [
    "NO_ARGS",
    "CallAssertionError",
    "CallResult",
    "ConfigurationError",
    "DirectoryRegistry",
    "ExecutableRegistry",
    "MappingRegistry",
    "PathDir",
    "PathRegistry",
    "ResolutionError",
    "ScopedDirectory",
    "SpawnError",
    "TempDir",
    "TempDirCleanup",
    "TestCall",
    "TestCallError",
    "TestChild",
    "TestDir",
    "captures_utf8",
    "get_registry",
]

# 🔼⚙️
