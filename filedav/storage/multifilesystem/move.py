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
import shutil

from filedav import pathutils, storage, users
from filedav.log import logger
from filedav.storage.multifilesystem.delete import StoragePartDelete


def _is_inside(sane_path: str, parent: str) -> bool:
    return sane_path == parent or sane_path.startswith(parent + "/")


class StoragePartCopyMove(StoragePartDelete):

    def copymove(self, user: users.User, move: bool, uri: str,
                 destination: str) -> bool:
        sane_path, source = self._resolve(user, uri)
        sane_destination, target = self._resolve(user, destination)
        if not os.path.lexists(source):
            raise storage.NotFoundError("File not found: %r" % sane_path)
        if not sane_path or not sane_destination:
            raise storage.ForbiddenError("The root collection can't be "
                                         "copied, moved or replaced")
        if (_is_inside(sane_destination, sane_path) or
                _is_inside(sane_path, sane_destination)):
            raise storage.ConflictError(
                "Source and destination overlap: %r and %r" %
                (sane_path, sane_destination))
        parent_dir = os.path.dirname(target)
        if not os.path.isdir(parent_dir):
            raise storage.ConflictError(
                "Target parent collection does not exist: %r" %
                sane_destination)
        with self.acquire_lock(user):
            if not move:
                if os.path.isdir(source):
                    size = pathutils.directory_size(source)
                else:
                    size = os.path.getsize(source)
                if size > self._users.quota(user).free:
                    logger.warning("Copy of %r for user %r exceeds quota",
                                   sane_path, user.login)
                    raise storage.QuotaExceededError()
            overwritten = os.path.lexists(target)
            if overwritten:
                self._delete_tree(target)
                self._properties.delete(user.login, sane_destination)
            if move:
                os.replace(source, target)
                self._sync_directory(os.path.dirname(source))
            elif os.path.isdir(source):
                self._copy_tree(source, target)
            else:
                shutil.copyfile(source, target)
            self._sync_directory(parent_dir)
            if move:
                self._properties.move(user.login, sane_path,
                                      sane_destination)
            else:
                self._properties.copy(user.login, sane_path,
                                      sane_destination)
        logger.debug("%s %r to %r of user %r", "Moved" if move else "Copied",
                     sane_path, sane_destination, user.login)
        return overwritten

    def _copy_tree(self, source: str, target: str) -> None:
        """Copy a collection, creating collections before their members.
        """
        os.mkdir(target, 0o770)
        for dirpath, dirnames, filenames in os.walk(source):
            dirnames[:] = [d for d in dirnames
                           if not d.startswith(pathutils.TMP_PREFIX)]
            target_dir = os.path.normpath(os.path.join(
                target, os.path.relpath(dirpath, source)))
            for name in dirnames:
                os.mkdir(os.path.join(target_dir, name), 0o770)
            for name in filenames:
                shutil.copyfile(os.path.join(dirpath, name),
                                os.path.join(target_dir, name))
            self._sync_directory(target_dir)
