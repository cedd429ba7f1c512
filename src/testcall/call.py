#
# src/testcall/call.py
#
"""
TestCall binds one executable to a working directory and environment and
runs it repeatedly as a blocking child process.
"""

import os
import subprocess
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path

from testcall.exceptions import SpawnError
from testcall.output import CallResult
from testcall.protocols import ExecutableRegistry, ScopedDirectory
from testcall.telemetry import StructLogger, get_logger

log: StructLogger = get_logger("testcall.call")

StrPath = str | os.PathLike[str]

NO_ARGS: tuple[str, ...] = ()


class TestChild:
    """
    Handle to a child started in the background by `TestCall.spawn`.

    stdout and stderr are piped and collected by `wait()`. Used as a context
    manager, a child that was not waited for is killed on exit.
    """

    __test__ = False

    def __init__(self, process: subprocess.Popen[bytes], args: Sequence[str]):
        self._process = process
        self._args = tuple(args)
        self._reaped = False

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def reaped(self) -> bool:
        return self._reaped

    def wait(self) -> CallResult:
        """Waits for the child to terminate and returns its outcome."""
        stdout, stderr = self._process.communicate()
        self._reaped = True
        result = CallResult(
            args=self._args,
            returncode=self._process.returncode,
            stdout=stdout,
            stderr=stderr,
        )
        log.info("Background call finished", pid=self.pid, returncode=result.returncode)
        return result

    def kill(self) -> None:
        """Kills the child unconditionally and reaps it. Output is discarded."""
        if self._reaped:
            return
        if self._process.poll() is None:
            self._process.kill()
        self._process.communicate()
        self._reaped = True
        log.debug("Background call killed", pid=self.pid)

    def __enter__(self) -> "TestChild":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.kill()


class TestCall:
    """
    A configurable, repeatable invocation of one resolved executable.

    Configuration methods return the TestCall itself so they can be chained.
    A scoped directory passed to `current_dir` becomes owned by the TestCall
    and is released by `close()` (or when leaving a `with` block).
    """

    __test__ = False

    def __init__(self, registry: ExecutableRegistry, name: str):
        # Raises ResolutionError before anything is spawned.
        self._init(registry.resolve(name), name=name)

    @classmethod
    def external_command(cls, path: StrPath) -> "TestCall":
        """Creates a TestCall for an executable given by path, bypassing any registry."""
        call = cls.__new__(cls)
        call._init(Path(path), name=os.fspath(path))
        return call

    def _init(self, executable: Path, name: str) -> None:
        self.executable = executable
        self.name = name
        self._cwd: Path | None = None
        self._owned_dir: ScopedDirectory | tempfile.TemporaryDirectory | None = None
        self._env: dict[str, str] = {}
        self._env_removed: set[str] = set()
        self._env_clear = False
        self._log = log.bind(program=name, executable=str(executable))

    # --- Configuration ---

    def current_dir(
        self, dir: StrPath | ScopedDirectory | tempfile.TemporaryDirectory
    ) -> "TestCall":
        """
        Sets the working directory for subsequent calls.

        A scoped directory handle (anything with `path` and `cleanup()`, or a
        `tempfile.TemporaryDirectory`) is taken over and released together
        with this TestCall. A previously owned handle is released when
        replaced by a different one.
        """
        if isinstance(dir, ScopedDirectory):
            owned, cwd = dir, Path(dir.path)
        elif isinstance(dir, tempfile.TemporaryDirectory):
            owned, cwd = dir, Path(dir.name)
        elif isinstance(dir, (str, os.PathLike)):
            owned, cwd = None, Path(dir)
        else:
            raise TypeError(
                "current_dir() expects a path, a ScopedDirectory or a "
                f"tempfile.TemporaryDirectory, not {type(dir).__name__}"
            )

        if self._owned_dir is not None and self._owned_dir is not owned:
            self._release_owned_dir()

        self._owned_dir = owned
        self._cwd = cwd
        self._log.debug("Working directory set", cwd=str(self._cwd), owned=owned is not None)
        return self

    def env(self, key: str, value: str) -> "TestCall":
        """Adds or replaces one environment variable for subsequent calls."""
        self._env[key] = value
        self._env_removed.discard(key)
        return self

    def envs(self, variables: Mapping[str, str]) -> "TestCall":
        for key, value in variables.items():
            self.env(key, value)
        return self

    def env_remove(self, key: str) -> "TestCall":
        """Makes sure `key` is absent from the child's environment."""
        self._env.pop(key, None)
        self._env_removed.add(key)
        return self

    def env_clear(self) -> "TestCall":
        """Starts children from an empty environment instead of the ambient one."""
        self._env_clear = True
        return self

    def child_env(self) -> dict[str, str]:
        """The environment the next child will receive."""
        env = {} if self._env_clear else dict(os.environ)
        for key in self._env_removed:
            env.pop(key, None)
        env.update(self._env)
        return env

    # --- Execution ---

    def _argv(self, args: Sequence[StrPath]) -> list[str]:
        if isinstance(args, (str, bytes)):
            raise TypeError(
                "args must be a sequence of arguments, not a single string; "
                "use call_argstr() to split a string on whitespace"
            )
        return [os.fspath(self.executable), *(os.fspath(a) for a in args)]

    def _spawn_error(self, e: OSError) -> SpawnError:
        self._log.error("Failed to start executable", cwd=str(self._cwd), error=str(e))
        return SpawnError(
            "Failed to start executable",
            executable=self.executable,
            cwd=self._cwd,
            details=e,
        )

    def call(self, args: Sequence[StrPath] = NO_ARGS) -> CallResult:
        """
        Runs the executable with `args` and blocks until it terminates.

        stdout and stderr are captured completely. There is no timeout.

        Raises:
            SpawnError: When the process could not be started.
        """
        argv = self._argv(args)
        self._log.debug("Calling executable", argc=len(argv) - 1, cwd=str(self._cwd or "."))
        try:
            completed = subprocess.run(
                argv,
                cwd=self._cwd,
                env=self.child_env(),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise self._spawn_error(e) from e

        result = CallResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
        self._log.info("Call finished", returncode=result.returncode, success=result.success)
        self._log.debug(
            "Call output",
            stdout_len=len(result.stdout),
            stderr_len=len(result.stderr),
        )
        return result

    def call_argstr(self, argstr: str) -> CallResult:
        """
        Splits `argstr` on whitespace and calls the executable with the parts.

        Only usable when no single argument contains whitespace.
        """
        return self.call(argstr.split())

    def spawn(self, args: Sequence[StrPath] = NO_ARGS) -> TestChild:
        """Starts the executable in the background. See `TestChild`."""
        argv = self._argv(args)
        try:
            process = subprocess.Popen(
                argv,
                cwd=self._cwd,
                env=self.child_env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise self._spawn_error(e) from e
        self._log.debug("Spawned executable", pid=process.pid, argc=len(argv) - 1)
        return TestChild(process, argv)

    # --- Lifetime ---

    def _release_owned_dir(self) -> None:
        owned, self._owned_dir = self._owned_dir, None
        if owned is not None:
            self._log.debug("Releasing owned working directory", cwd=str(self._cwd))
            owned.cleanup()

    def close(self) -> None:
        """Releases an owned working directory. Safe to call more than once."""
        if self._owned_dir is not None:
            self._release_owned_dir()
            self._cwd = None

    def __enter__(self) -> "TestCall":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TestCall({self.name!r}, executable={str(self.executable)!r})"

# 🔼⚙️
