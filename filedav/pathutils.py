# This file is part of FileDAV - WebDAV file storage backend
# Copyright © 2026 The FileDAV developers
#
# This library is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with FileDAV.  If not, see <http://www.gnu.org/licenses/>.

"""
Helper functions for working with the file system.

"""

import errno
import os
import posixpath
import sys
import threading
from typing import Iterator, Tuple

from filedav import types

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl

if sys.platform == "darwin":
    # Definition missing in PyPy
    F_FULLFSYNC: int = getattr(fcntl, "F_FULLFSYNC", 51)

# Prefix of temporary entries created inside user trees
TMP_PREFIX: str = ".FileDAV.tmp-"


class RwLock:
    """A readers-Writer lock that locks a file."""

    _path: str
    _readers: int
    _writer: bool
    _lock: threading.Lock

    def __init__(self, path: str) -> None:
        self._path = path
        self._readers = 0
        self._writer = False
        self._lock = threading.Lock()

    @property
    def locked(self) -> str:
        with self._lock:
            if self._readers > 0:
                return "r"
            if self._writer:
                return "w"
            return ""

    @types.contextmanager
    def acquire(self, mode: str) -> Iterator[None]:
        if mode not in ("r", "w"):
            raise ValueError("Invalid mode: %r" % mode)
        with open(self._path, "w+") as lock_file:
            try:
                if sys.platform == "win32":
                    # Shared locks are not available, always lock exclusively
                    msvcrt.locking(lock_file.fileno(), msvcrt.LK_LOCK, 1)
                else:
                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX
                                if mode == "w" else fcntl.LOCK_SH)
            except OSError as e:
                raise RuntimeError("Locking %r failed: %s" % (self._path, e)
                                   ) from e
            with self._lock:
                if mode == "r":
                    self._readers += 1
                else:
                    self._writer = True
            try:
                yield
            finally:
                with self._lock:
                    if mode == "r":
                        self._readers -= 1
                    else:
                        self._writer = False


def fsync(fd: int) -> None:
    if sys.platform == "darwin":
        try:
            fcntl.fcntl(fd, F_FULLFSYNC)
            return
        except OSError as e:
            # Fallback if F_FULLFSYNC not supported by filesystem
            if e.errno != errno.EINVAL:
                raise
    os.fsync(fd)


def strip_path(path: str) -> str:
    assert sanitize_path(path) == path
    return path.strip("/")


def sanitize_path(path: str) -> str:
    """Make path absolute with leading slash to prevent access to other data.

    Preserve potential trailing slash.

    """
    trailing_slash = "/" if path.endswith("/") else ""
    path = posixpath.normpath(path)
    new_path = "/"
    for part in path.split("/"):
        if not is_safe_path_component(part):
            continue
        new_path = posixpath.join(new_path, part)
    trailing_slash = "" if new_path.endswith("/") else trailing_slash
    return new_path + trailing_slash


def sanitize_uri(uri: str) -> str:
    """Turn a URI into a sane path without leading or trailing ``/``.

    The storage root is the empty string.

    """
    return strip_path(sanitize_path(uri))


def parent_uri(sane_path: str) -> str:
    """Sane path of the parent collection, the root is its own parent."""
    return posixpath.dirname(sane_path)


def is_safe_path_component(path: str) -> bool:
    """Check if path is a single component of a path.

    Check that the path is safe to join too.

    """
    return bool(path) and "/" not in path and path not in (".", "..")


def is_safe_filesystem_path_component(path: str) -> bool:
    """Check if path is a single component of a local and posix filesystem
       path.

    Hidden names are allowed, names of temporary entries are not.

    """
    return (
        bool(path) and not os.path.splitdrive(path)[0] and
        (sys.platform != "win32" or ":" not in path) and  # Block NTFS-ADS
        not os.path.split(path)[0] and path not in (os.curdir, os.pardir) and
        not path.startswith(TMP_PREFIX) and
        is_safe_path_component(path))


def path_to_filesystem(root: str, sane_path: str) -> str:
    """Convert `sane_path` to a local filesystem path relative to `root`.

    `root` must be a secure filesystem path, it will be prepend to the path.

    `sane_path` must be a sanitized path without leading or trailing ``/``.

    Conversion of `sane_path` is done in a secure manner,
    or raises ``ValueError``.

    """
    assert sane_path == strip_path(sanitize_path(sane_path))
    safe_path = root
    parts = sane_path.split("/") if sane_path else []
    for part in parts:
        if not is_safe_filesystem_path_component(part):
            raise UnsafePathError(part)
        safe_path_parent = safe_path
        safe_path = os.path.join(safe_path, part)
        # Check for conflicting files (e.g. case-insensitive file systems
        # or short names on Windows file systems)
        if os.path.lexists(safe_path):
            with os.scandir(safe_path_parent) as entries:
                if part not in (e.name for e in entries):
                    raise CollidingPathError(part)
    return safe_path


def walk(path: str) -> Iterator[Tuple[bool, os.stat_result]]:
    """Stat every entry below the directory ``path``.

    Yields ``(is_dir, stat)`` tuples, temporary entries are skipped.

    """
    for dirpath, dirnames, filenames in os.walk(path):
        dirnames[:] = [d for d in dirnames if not d.startswith(TMP_PREFIX)]
        for is_dir, names in ((True, dirnames), (False, filenames)):
            for name in names:
                try:
                    yield is_dir, os.stat(os.path.join(dirpath, name))
                except FileNotFoundError:
                    # Removed concurrently
                    continue


def directory_size(path: str) -> int:
    """Sum of the sizes of all files below ``path``."""
    return sum(stat.st_size for is_dir, stat in walk(path) if not is_dir)


def directory_size_and_mtime(path: str) -> Tuple[int, int]:
    """Aggregate size and newest mtime (in ns) below ``path`` (itself
    included)."""
    size = 0
    mtime = os.stat(path).st_mtime_ns
    for is_dir, stat in walk(path):
        if not is_dir:
            size += stat.st_size
        mtime = max(mtime, stat.st_mtime_ns)
    return size, mtime


class UnsafePathError(ValueError):

    def __init__(self, path: str) -> None:
        super().__init__("Can't translate name safely to filesystem: %r" %
                         path)


class CollidingPathError(ValueError):

    def __init__(self, path: str) -> None:
        super().__init__("File name collision: %r" % path)
