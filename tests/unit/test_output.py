#
# tests/unit/test_output.py
#
"""
Tests for CallResult accessors and assertions.
"""

import signal
import sys

import attrs
import pytest

from testcall import CallAssertionError, CallResult, DirectoryRegistry, TestCall


@pytest.fixture
def ok_result() -> CallResult:
    return CallResult(
        args=["prog", "--flag"],
        returncode=0,
        stdout=b"Hello World!\nversion 1.2.3\n",
        stderr=b"warning: minor\n",
    )


@pytest.fixture
def failed_result() -> CallResult:
    return CallResult(
        args=["prog"],
        returncode=2,
        stdout=b"some output\n",
        stderr=b"error: missing input file\n",
    )


class TestCallResultState:
    """Read-only state of a CallResult."""

    def test_is_immutable(self, ok_result: CallResult) -> None:
        with pytest.raises(attrs.exceptions.FrozenInstanceError):
            ok_result.returncode = 1

    def test_args_are_a_tuple(self, ok_result: CallResult) -> None:
        assert ok_result.args == ("prog", "--flag")

    def test_success_and_code(self, ok_result: CallResult, failed_result: CallResult) -> None:
        assert ok_result.success
        assert ok_result.code == 0
        assert not failed_result.success
        assert failed_result.code == 2

    def test_killed_by_signal_has_no_code(self) -> None:
        result = CallResult(args=["prog"], returncode=-signal.SIGTERM)

        assert result.code is None
        assert not result.success
        assert "SIGTERM" in result.status_description()

    def test_text_accessors_are_lossy(self) -> None:
        result = CallResult(args=["prog"], returncode=0, stdout=b"ok \xff", stderr=b"\xfe")

        assert result.stdout_text == "ok �"
        assert result.stderr_text == "�"


class TestExitStatusAssertions:
    """assert_success, assert_failure and assert_exitcode."""

    def test_assert_success_passes_and_chains(self, ok_result: CallResult) -> None:
        assert ok_result.assert_success() is ok_result

    def test_assert_success_fails_with_streams(self, failed_result: CallResult) -> None:
        with pytest.raises(CallAssertionError) as exc_info:
            failed_result.assert_success()

        message = str(exc_info.value)
        assert "expected success at exit" in message
        assert "exit code 2" in message
        assert "error: missing input file" in message
        assert "some output" in message
        assert exc_info.value.result is failed_result

    def test_assertion_error_is_a_test_failure(self, failed_result: CallResult) -> None:
        """Any test runner treats it as an ordinary failed assertion."""
        with pytest.raises(AssertionError):
            failed_result.assert_success()

    def test_assert_failure(self, ok_result: CallResult, failed_result: CallResult) -> None:
        assert failed_result.assert_failure() is failed_result
        with pytest.raises(CallAssertionError, match="expected failure at exit"):
            ok_result.assert_failure()

    def test_assert_exitcode(self, failed_result: CallResult) -> None:
        failed_result.assert_exitcode(2)
        with pytest.raises(CallAssertionError, match="unexpected exitcode, expected 0"):
            failed_result.assert_exitcode(0)


class TestOutputAssertions:
    """Regex assertions and captures on stdout and stderr."""

    def test_stdout_utf8(self, ok_result: CallResult) -> None:
        ok_result.assert_stdout_utf8(r"Hello World!").assert_stdout_utf8(r"version \d+\.\d+")

    def test_stdout_utf8_mismatch_reports_output(self, ok_result: CallResult) -> None:
        with pytest.raises(CallAssertionError) as exc_info:
            ok_result.assert_stdout_utf8("Goodbye")

        assert "stdout does not match" in str(exc_info.value)
        assert "Hello World!" in str(exc_info.value)

    def test_stderr_utf8(self, ok_result: CallResult) -> None:
        ok_result.assert_stderr_utf8("^warning")
        with pytest.raises(CallAssertionError, match="stderr does not match"):
            ok_result.assert_stderr_utf8("fatal")

    def test_bytes_assertions(self) -> None:
        result = CallResult(args=["prog"], returncode=0, stdout=b"\xff\xfebin", stderr=b"\x00err")

        result.assert_stdout_bytes(rb"\xff\xfe").assert_stderr_bytes("err")
        with pytest.raises(CallAssertionError):
            result.assert_stdout_bytes(rb"\x00")
        with pytest.raises(CallAssertionError):
            result.assert_stderr_bytes(rb"\xff")

    def test_stdout_captures(self, ok_result: CallResult) -> None:
        captures = ok_result.stdout_captures_utf8(r"version (?P<major>\d+)\.(\d+)")

        assert captures[0] == "version 1.2"
        assert captures[1] == "1"
        assert captures[2] == "2"
        assert captures["major"] == "1"

    def test_stderr_captures_without_match(self, ok_result: CallResult) -> None:
        assert ok_result.stderr_captures_utf8(r"error: (.*)") == {}


@pytest.mark.skipif(sys.platform == "win32", reason="Script executables need a POSIX shebang")
class TestAgainstRealProcess:
    """Assertions on results produced by actual children."""

    def test_failure_message_contains_stderr(self, registry: DirectoryRegistry) -> None:
        result = TestCall(registry, "fail_loud").call()

        with pytest.raises(CallAssertionError) as exc_info:
            result.assert_success()

        assert "boom: something went wrong" in str(exc_info.value)
        assert "exit code 3" in str(exc_info.value)

    def test_binary_output(self, registry: DirectoryRegistry) -> None:
        result = TestCall(registry, "write_bytes").call().assert_success()

        assert result.stdout == b"\xff\xfebinary\x00data"
        result.assert_stdout_bytes(rb"binary\x00data").assert_stdout_utf8("binary")

# 🔼⚙️
