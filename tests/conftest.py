import stat
import sys
from pathlib import Path

import pytest

from testcall import DirectoryRegistry

pytest_plugins = ["pytester"]

# Small programs standing in for built binaries. Each runs on the current
# interpreter through its shebang line.
PROGRAMS = {
    "echo_args": """
import sys
print(" ".join(sys.argv[1:]))
""",
    "print_cwd": """
import os
print(os.getcwd())
""",
    "print_env": """
import os
for key, value in sorted(os.environ.items()):
    print(f"{key}={value}")
""",
    "fail_loud": """
import sys
print("partial output")
print("boom: something went wrong", file=sys.stderr)
sys.exit(3)
""",
    "marker": """
print("TESTCALL-MARKER")
""",
    "write_bytes": """
import sys
sys.stdout.buffer.write(b"\\xff\\xfebinary\\x00data")
""",
    "sleeper": """
import time
time.sleep(60)
""",
}


def write_program(directory: Path, name: str, body: str) -> Path:
    path = directory / name
    path.write_text(f"#!{sys.executable}\n{body.lstrip()}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    """A directory of executables, plus a non-executable file that must be ignored."""
    if sys.platform == "win32":
        pytest.skip("Script executables need a POSIX shebang")
    directory = tmp_path / "bin"
    directory.mkdir()
    for name, body in PROGRAMS.items():
        write_program(directory, name, body)
    (directory / "README.txt").write_text("not a program")
    return directory


@pytest.fixture
def registry(build_dir: Path) -> DirectoryRegistry:
    return DirectoryRegistry(build_dir)
