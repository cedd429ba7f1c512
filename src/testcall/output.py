#
# src/testcall/output.py
#
"""
The outcome of a single invocation and the assertions available on it.
"""
import signal

from attrs import define, field

from testcall.exceptions import CallAssertionError
from testcall.regex import (
    CaptureMap,
    captures_utf8,
    decode_lossy,
    regex_match_bytes,
    regex_match_utf8,
)
from testcall.telemetry import StructLogger, get_logger

log: StructLogger = get_logger("testcall.output")


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


@define(frozen=True, slots=True)
class CallResult:
    """
    Immutable snapshot of one terminated child process.

    `returncode` follows the subprocess convention: a negative value -N means
    the child was terminated by signal N (POSIX only).
    """
    args: tuple[str, ...] = field(converter=tuple)
    returncode: int = field()
    stdout: bytes = field(default=b"", repr=False)
    stderr: bytes = field(default=b"", repr=False)

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def code(self) -> int | None:
        """The exit code, or None when the child was killed by a signal."""
        return self.returncode if self.returncode >= 0 else None

    @property
    def stdout_text(self) -> str:
        return decode_lossy(self.stdout)

    @property
    def stderr_text(self) -> str:
        return decode_lossy(self.stderr)

    def status_description(self) -> str:
        if self.returncode < 0:
            return f"killed by {_signal_name(-self.returncode)}"
        return f"exit code {self.returncode}"

    def describe(self) -> str:
        """Human readable summary used in assertion messages."""
        return (
            f"command: {' '.join(self.args)}\n"
            f"status: {self.status_description()}\n"
            f"--- STDOUT ---\n{self.stdout_text}\n"
            f"--- STDERR ---\n{self.stderr_text}"
        )

    def _fail(self, message: str) -> CallAssertionError:
        log.debug("Call assertion failed", reason=message, returncode=self.returncode)
        return CallAssertionError(message, self)

    # --- Exit status ---

    def assert_success(self) -> "CallResult":
        if not self.success:
            raise self._fail("expected success at exit")
        return self

    def assert_failure(self) -> "CallResult":
        if self.success:
            raise self._fail("expected failure at exit")
        return self

    def assert_exitcode(self, code: int) -> "CallResult":
        if self.code != code:
            raise self._fail(f"unexpected exitcode, expected {code}")
        return self

    # --- Output matching ---

    def assert_stdout_utf8(self, pattern: str) -> "CallResult":
        """Fails unless `pattern` is found in stdout decoded as UTF-8."""
        matched, _ = regex_match_utf8(self.stdout, pattern)
        if not matched:
            raise self._fail(f"stdout does not match: {pattern!r}")
        return self

    def assert_stderr_utf8(self, pattern: str) -> "CallResult":
        """Fails unless `pattern` is found in stderr decoded as UTF-8."""
        matched, _ = regex_match_utf8(self.stderr, pattern)
        if not matched:
            raise self._fail(f"stderr does not match: {pattern!r}")
        return self

    def assert_stdout_bytes(self, pattern: str | bytes) -> "CallResult":
        """Fails unless the bytes `pattern` is found in raw stdout."""
        matched, _ = regex_match_bytes(self.stdout, pattern)
        if not matched:
            raise self._fail(f"stdout does not match: {pattern!r}")
        return self

    def assert_stderr_bytes(self, pattern: str | bytes) -> "CallResult":
        """Fails unless the bytes `pattern` is found in raw stderr."""
        matched, _ = regex_match_bytes(self.stderr, pattern)
        if not matched:
            raise self._fail(f"stderr does not match: {pattern!r}")
        return self

    def stdout_captures_utf8(self, pattern: str) -> CaptureMap:
        return captures_utf8(self.stdout, pattern)

    def stderr_captures_utf8(self, pattern: str) -> CaptureMap:
        return captures_utf8(self.stderr, pattern)

# 🔼⚙️
