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
from typing import Iterator, List, Optional, Tuple

from filedav import pathutils, storage, users, utils
from filedav.log import logger
from filedav.storage.multifilesystem.base import StorageBase


def _sort_key(name: str):
    # Names that only differ in case still get a stable order
    return utils.natural_sort_key(name), name


class StoragePartGet(StorageBase):

    def list(self, user: users.User, uri: str
             ) -> Iterator[Tuple[str, None]]:
        sane_path, path = self._resolve(user, uri)
        if not os.path.isdir(path):
            raise storage.NotFoundError(
                "Collection not found: %r" % sane_path)
        collections: List[str] = []
        files: List[str] = []
        with os.scandir(path) as entries:
            for entry in entries:
                if entry.name.startswith(pathutils.TMP_PREFIX):
                    continue
                if entry.is_dir():
                    collections.append(entry.name)
                else:
                    files.append(entry.name)
        logger.debug("Listing %r of user %r: %d collection(s), %d file(s)",
                     sane_path, user.login, len(collections), len(files))
        names = (sorted(collections, key=_sort_key) +
                 sorted(files, key=_sort_key))
        return ((name, None) for name in names)

    def get(self, user: users.User, uri: str) -> Optional[str]:
        _, path = self._resolve(user, uri)
        if not os.path.exists(path):
            return None
        return path

    def exists(self, user: users.User, uri: str) -> bool:
        _, path = self._resolve(user, uri)
        return os.path.exists(path)
