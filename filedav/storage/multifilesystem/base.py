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

import os
import sys
from typing import IO, AnyStr, Optional, Pattern, Tuple

from filedav import (config, database, locks, pathutils, properties, storage,
                     users)


class StorageBase(storage.BaseStorage):

    _filesystem_folder: str
    _filesystem_fsync: bool
    _chunk_size: int
    _ignore_pattern: Optional[Pattern[str]]
    _serialize_writes: bool
    _users: users.BaseUsers
    _database: database.MetadataDatabase
    _locks: locks.LockTable
    _properties: properties.PropertyStore

    def __init__(self, configuration: config.Configuration) -> None:
        super().__init__(configuration)
        self._filesystem_folder = configuration.get(
            "storage", "filesystem_folder")
        self._filesystem_fsync = configuration.get(
            "storage", "_filesystem_fsync")
        self._chunk_size = configuration.get("storage", "chunk_size")
        self._ignore_pattern = configuration.get("storage", "ignore_pattern")
        self._serialize_writes = configuration.get(
            "storage", "serialize_writes")
        self._makedirs_synced(self._filesystem_folder)
        self._users = users.load(configuration)
        self._database = database.MetadataDatabase(configuration)
        self._database.init_db()
        self._locks = locks.LockTable(self._database, configuration)
        self._properties = properties.PropertyStore(self._database)

    def get_user(self, login: str) -> Optional[users.User]:
        return self._users.get(login)

    def quota(self, user: users.User) -> users.QuotaSnapshot:
        return self._users.quota(user)

    def close(self) -> None:
        self._database.close()

    def _resolve(self, user: users.User, uri: str) -> Tuple[str, str]:
        """Get the sane path and the filesystem path of ``uri``."""
        sane_path = pathutils.sanitize_uri(uri)
        try:
            return sane_path, pathutils.path_to_filesystem(
                user.path, sane_path)
        except pathutils.CollidingPathError as e:
            raise storage.ConflictError(str(e)) from e
        except ValueError as e:
            raise storage.BadRequestError(str(e)) from e

    def _fsync(self, f: IO[AnyStr]) -> None:
        if self._filesystem_fsync:
            try:
                pathutils.fsync(f.fileno())
            except OSError as e:
                raise RuntimeError("Fsync'ing file %r failed: %s" %
                                   (f.name, e)) from e

    def _sync_directory(self, path: str) -> None:
        """Sync directory to disk.

        This only works on POSIX and does nothing on other systems.

        """
        if not self._filesystem_fsync:
            return
        if sys.platform != "win32":
            try:
                fd = os.open(path, 0)
                try:
                    pathutils.fsync(fd)
                finally:
                    os.close(fd)
            except OSError as e:
                raise RuntimeError("Fsync'ing directory %r failed: %s" %
                                   (path, e)) from e

    def _makedirs_synced(self, filesystem_path: str, mode: int = 0o770
                         ) -> None:
        """Recursively create a directory and its parents in a sync'ed way.

        This method acts silently when the folder already exists.

        """
        if os.path.isdir(filesystem_path):
            return
        parent_filesystem_path = os.path.dirname(filesystem_path)
        # Prevent infinite loop
        if filesystem_path != parent_filesystem_path:
            # Create parent dirs recursively
            self._makedirs_synced(parent_filesystem_path, mode)
        # Possible race!
        os.makedirs(filesystem_path, mode, exist_ok=True)
        self._sync_directory(parent_filesystem_path)
