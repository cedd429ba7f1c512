#
# src/testcall/testdir.py
#
"""
Test directories: borrowed paths and disposable, scoped temporary directories.

Every directory type shares the same fixture helpers (creating files and
directories, installing things from outside) and directory assertions. Failed
checks raise AssertionError so they are reported as failed tests.
"""

import filecmp
import os
import shutil
import tempfile
import weakref
from collections.abc import Callable
from pathlib import Path

from testcall.regex import CaptureMap, captures_utf8, regex_match_bytes, regex_match_utf8
from testcall.telemetry import StructLogger, get_logger

log: StructLogger = get_logger("testcall.testdir")

StrPath = str | os.PathLike[str]


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def _remove_tree(path: Path) -> None:
    if not path.exists() and not path.is_symlink():
        return
    shutil.rmtree(path)
    log.debug("Removed scoped directory", path=str(path))


def _trees_equal(left: Path, right: Path) -> bool:
    if left.is_file() and right.is_file():
        return filecmp.cmp(left, right, shallow=False)
    if not (left.is_dir() and right.is_dir()):
        return False
    cmp = filecmp.dircmp(left, right)
    if cmp.left_only or cmp.right_only or cmp.funny_files:
        return False
    _, mismatch, errors = filecmp.cmpfiles(left, right, cmp.common_files, shallow=False)
    if mismatch or errors:
        return False
    return all(_trees_equal(left / sub, right / sub) for sub in cmp.common_dirs)


class TestDir:
    """
    Base class for test directory objects.

    Subclasses provide `path`. Only disposable directories allow `delete`.
    """

    __test__ = False
    disposable: bool = False

    @property
    def path(self) -> Path:
        raise NotImplementedError

    def __fspath__(self) -> str:
        return str(self.path)

    # --- Path helpers ---

    def sub_path(self, subpath: StrPath) -> Path:
        """
        Returns the normalized path of `subpath` within this directory.

        Components need not exist. Fails when the result escapes the directory.
        """
        base = Path(os.path.normpath(self.path))
        full = Path(os.path.normpath(base / subpath))
        _check(full == base or base in full.parents, f"escaped from testdir: {subpath!s}")
        return full

    def sub_path_exists(self, subpath: StrPath) -> Path:
        path = self.sub_path(subpath)
        _check(path.exists() or path.is_symlink(), f"path does not exist: {subpath!s}")
        return path

    def sub_path_available(self, subpath: StrPath) -> Path:
        path = self.sub_path(subpath)
        _check(not (path.exists() or path.is_symlink()), f"path already exists: {subpath!s}")
        return path

    # --- Fixtures ---

    def create_file(self, name: StrPath, content: bytes | str = b"") -> "TestDir":
        """Creates a new file, leading directories included. The file must not exist."""
        path = self.sub_path_available(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return self

    def create_dir(self, name: StrPath) -> "TestDir":
        path = self.sub_path_available(name)
        path.mkdir(parents=True)
        return self

    def install(self, source: StrPath, dest: StrPath = "") -> "TestDir":
        """
        Copies a file or directory from outside into this directory.

        * A directory `source` is copied to `dest/<source name>` when `dest`
          does not exist yet, or its contents are merged into `dest` when it
          is an existing directory. An existing file `dest` is an error.
        * A file `source` is copied into `dest` when it is an existing
          directory, otherwise it is written to `dest` (overwriting it).
        """
        source = Path(source)
        _check(source.exists(), f"install source does not exist: {source}")
        target = self.sub_path(dest)

        if source.is_dir():
            _check(not target.is_file(), f"cannot install directory over file: {dest!s}")
            if target.is_dir():
                shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
            else:
                shutil.copytree(source, target / source.name, symlinks=True)
        elif target.is_dir():
            shutil.copy2(source, target / source.name)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)

        log.debug("Installed into testdir", source=str(source), target=str(target))
        return self

    def symlink(self, target: StrPath, name: StrPath) -> "TestDir":
        """Creates a symlink `name` pointing at `target` (stored as given)."""
        path = self.sub_path_available(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.symlink_to(target)
        return self

    def hardlink(self, target: StrPath, name: StrPath) -> "TestDir":
        source = self.sub_path_exists(target)
        path = self.sub_path_available(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        os.link(source, path)
        return self

    def delete(self, name: StrPath) -> "TestDir":
        """Deletes a file or a whole directory. Only disposable directories allow this."""
        if not self.disposable:
            raise NotImplementedError(
                f"{type(self).__name__} is not disposable, refusing to delete '{name!s}'"
            )
        path = self.sub_path_exists(name)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
        return self

    # --- Assertions ---

    def assert_exists(self, name: StrPath) -> "TestDir":
        self.sub_path_exists(name)
        return self

    def assert_available(self, name: StrPath) -> "TestDir":
        self.sub_path_available(name)
        return self

    def assert_is_dir(self, name: StrPath) -> "TestDir":
        _check(self.sub_path_exists(name).is_dir(), f"not a directory: {name!s}")
        return self

    def assert_is_file(self, name: StrPath) -> "TestDir":
        _check(self.sub_path_exists(name).is_file(), f"not a file: {name!s}")
        return self

    def assert_is_symlink(self, name: StrPath) -> "TestDir":
        _check(self.sub_path_exists(name).is_symlink(), f"not a symlink: {name!s}")
        return self

    def _size(self, name: StrPath) -> int:
        return self.sub_path_exists(name).stat().st_size

    def assert_size(self, name: StrPath, size: int) -> "TestDir":
        actual = self._size(name)
        _check(actual == size, f"size of {name!s} is {actual}, expected {size}")
        return self

    def assert_size_greater(self, name: StrPath, size: int) -> "TestDir":
        actual = self._size(name)
        _check(actual > size, f"size of {name!s} is {actual}, expected more than {size}")
        return self

    def assert_size_smaller(self, name: StrPath, size: int) -> "TestDir":
        actual = self._size(name)
        _check(actual < size, f"size of {name!s} is {actual}, expected less than {size}")
        return self

    def assert_equal(self, left: StrPath, right: StrPath) -> "TestDir":
        """Asserts two files or directory trees in this directory have identical content."""
        left_path = self.sub_path_exists(left)
        right_path = self.sub_path_exists(right)
        _check(_trees_equal(left_path, right_path), f"contents differ: {left!s} != {right!s}")
        return self

    def assert_utf8(self, name: StrPath, pattern: str) -> "TestDir":
        matched, text = regex_match_utf8(self.sub_path_exists(name).read_bytes(), pattern)
        _check(matched, f"{name!s} does not match:\n{pattern}\ncontent was:\n{text}")
        return self

    def assert_bytes(self, name: StrPath, pattern: str | bytes) -> "TestDir":
        matched, text = regex_match_bytes(self.sub_path_exists(name).read_bytes(), pattern)
        _check(matched, f"{name!s} does not match:\n{pattern!r}\ncontent was:\n{text}")
        return self

    def captures_utf8(self, name: StrPath, pattern: str) -> CaptureMap:
        return captures_utf8(self.sub_path_exists(name).read_bytes(), pattern)


class PathDir(TestDir):
    """A borrowed, existing directory. Never deleted by testcall."""

    def __init__(self, path: StrPath):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def __repr__(self) -> str:
        return f"PathDir({str(self._path)!r})"


class TempDir(TestDir):
    """
    A freshly created temporary directory owned by this handle.

    The directory is removed exactly once: on `cleanup()`, when leaving a
    `with` block, or when the handle is garbage collected.
    """

    disposable = True

    def __init__(self, prefix: str = "testcall-", dir: StrPath | None = None):
        self._path = Path(tempfile.mkdtemp(prefix=prefix, dir=dir))
        self._finalizer = weakref.finalize(self, _remove_tree, self._path)
        log.debug("Created scoped directory", path=str(self._path))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def cleanup(self) -> None:
        self._finalizer()

    def __enter__(self) -> "TempDir":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r})"


def _cleanup_then_remove(cleanup_fn: Callable[[Path], None], path: Path) -> None:
    try:
        cleanup_fn(path)
    except Exception:
        log.exception("Cleanup callback failed, removing directory anyway", path=str(path))
        _remove_tree(path)
        raise
    _remove_tree(path)


class TempDirCleanup(TempDir):
    """
    A TempDir that runs `cleanup_fn(path)` before the directory is removed,
    e.g. to unmount a filesystem mounted inside it.
    """

    def __init__(
        self,
        cleanup_fn: Callable[[Path], None],
        prefix: str = "testcall-",
        dir: StrPath | None = None,
    ):
        super().__init__(prefix=prefix, dir=dir)
        # Replace the plain removal with one that runs the callback first.
        self._finalizer.detach()
        self._finalizer = weakref.finalize(self, _cleanup_then_remove, cleanup_fn, self._path)

# 🔼⚙️
