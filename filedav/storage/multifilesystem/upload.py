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
import posixpath
from tempfile import TemporaryDirectory
from typing import List

from filedav import pathutils, storage, types, users
from filedav.log import logger
from filedav.storage.multifilesystem.base import StorageBase


class StoragePartUpload(StorageBase):

    def put(self, user: users.User, uri: str,
            stream: types.InputStream) -> bool:
        """Store ``stream`` at ``uri``.

        Missing parent collections are created and removed again when the
        upload fails.

        """
        sane_path, path = self._resolve(user, uri)
        name = posixpath.basename(sane_path)
        if self._ignore_pattern and self._ignore_pattern.search(name):
            logger.info("Ignored upload of %r for user %r", sane_path,
                        user.login)
            return False
        if os.path.isdir(path):
            raise storage.ConflictError("Target is a collection: %r" %
                                        sane_path)
        parent_dir = os.path.dirname(path)
        with self.acquire_lock(user):
            # Missing ancestors, deepest first
            missing_dirs = []
            ancestor = parent_dir
            while not os.path.lexists(ancestor):
                missing_dirs.append(ancestor)
                ancestor = os.path.dirname(ancestor)
            if not os.path.isdir(ancestor):
                raise storage.ConflictError(
                    "Parent is not a collection: %r" % sane_path)
            self._makedirs_synced(parent_dir)
            try:
                created = self._store(sane_path, path, stream, user)
            except Exception:
                self._remove_dirs(missing_dirs)
                raise
        logger.debug("Stored %r of user %r (%s)", sane_path, user.login,
                     "created" if created else "replaced")
        return created

    def _store(self, sane_path: str, path: str, stream: types.InputStream,
               user: users.User) -> bool:
        parent_dir = os.path.dirname(path)
        created = not os.path.lexists(path)
        free = self._users.quota(user).free
        # The old content is replaced
        size = 0 if created else -os.path.getsize(path)
        # Do not use mkstemp because it creates with permissions 0o600
        with TemporaryDirectory(prefix=pathutils.TMP_PREFIX,
                                dir=parent_dir) as tmp_dir:
            tmp_path = os.path.join(tmp_dir, "upload")
            with open(tmp_path, "wb") as f:
                while True:
                    chunk = stream.read(self._chunk_size)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > free:
                        logger.warning(
                            "Upload of %r for user %r exceeds quota",
                            sane_path, user.login)
                        raise storage.QuotaExceededError()
                    f.write(chunk)
                f.flush()
                self._fsync(f)
            os.replace(tmp_path, path)
        self._sync_directory(parent_dir)
        return created

    def _remove_dirs(self, dirs: List[str]) -> None:
        for folder in dirs:
            try:
                os.rmdir(folder)
            except OSError as e:
                logger.warning("Failed to remove folder %r: %s", folder, e)
                break
