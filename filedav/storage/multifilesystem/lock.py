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
from hashlib import sha256
from typing import Iterator, Optional

from filedav import pathutils, types, users
from filedav.storage.multifilesystem.base import StorageBase

LOCK_FOLDER: str = ".FileDAV.locks"


class StoragePartLock(StorageBase):

    @types.contextmanager
    def acquire_lock(self, user: users.User) -> Iterator[None]:
        if not self._serialize_writes:
            yield
            return
        lock_folder = os.path.join(self._filesystem_folder, LOCK_FOLDER)
        self._makedirs_synced(lock_folder)
        lock_path = os.path.join(
            lock_folder, sha256(user.login.encode()).hexdigest())
        lock = pathutils.RwLock(lock_path)
        with lock.acquire("w"):
            yield

    def get_lock(self, user: users.User, uri: str,
                 token: Optional[str] = None) -> Optional[str]:
        return self._locks.get_lock(user.login, uri, token)

    def lock(self, user: users.User, uri: str, token: str,
             scope: str) -> None:
        self._locks.lock(user.login, uri, token, scope)

    def unlock(self, user: users.User, uri: str, token: str) -> None:
        self._locks.unlock(user.login, uri, token)

    def sweep_locks(self) -> int:
        return self._locks.sweep()
