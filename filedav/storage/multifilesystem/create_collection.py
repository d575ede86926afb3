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

from filedav import storage, users
from filedav.log import logger
from filedav.storage.multifilesystem.base import StorageBase


class StoragePartCreateCollection(StorageBase):

    def mkcol(self, user: users.User, uri: str) -> None:
        sane_path, path = self._resolve(user, uri)
        with self.acquire_lock(user):
            if self._users.quota(user).free <= 0:
                raise storage.QuotaExceededError()
            if os.path.lexists(path):
                raise storage.MethodNotAllowedError(
                    "There is already a file with that name: %r" % sane_path)
            parent_dir = os.path.dirname(path)
            if not os.path.isdir(parent_dir):
                raise storage.ConflictError(
                    "The parent collection does not exist: %r" % sane_path)
            os.mkdir(path, 0o700)
            self._sync_directory(parent_dir)
        logger.debug("Created collection %r of user %r", sane_path,
                     user.login)
