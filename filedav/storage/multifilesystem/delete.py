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


class StoragePartDelete(StorageBase):

    def delete(self, user: users.User, uri: str) -> None:
        sane_path, path = self._resolve(user, uri)
        if not os.path.lexists(path):
            raise storage.NotFoundError("File not found: %r" % sane_path)
        if not sane_path:
            raise storage.ForbiddenError("The root collection can't be "
                                         "deleted")
        self._delete_tree(path)
        self._sync_directory(os.path.dirname(path))
        self._properties.delete(user.login, sane_path)
        logger.debug("Deleted %r of user %r", sane_path, user.login)

    def _delete_tree(self, path: str) -> None:
        """Delete a file or a collection with all members, depth first."""
        if os.path.isdir(path) and not os.path.islink(path):
            with os.scandir(path) as entries:
                names = [entry.name for entry in entries]
            for name in names:
                self._delete_tree(os.path.join(path, name))
            os.rmdir(path)
        else:
            os.remove(path)
