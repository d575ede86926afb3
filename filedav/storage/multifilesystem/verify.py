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
from typing import Iterator

from filedav import types
from filedav.log import logger
from filedav.storage.multifilesystem.base import StorageBase


class StoragePartVerify(StorageBase):

    def verify(self) -> bool:
        user_errors = property_errors = 0

        @types.contextmanager
        def exception_cm(login: str) -> Iterator[None]:
            nonlocal user_errors
            try:
                yield
            except Exception as e:
                user_errors += 1
                logger.error("Invalid user %r: %s", login, e, exc_info=True)

        logins = sorted(set(self._users.logins()) |
                        set(self._properties.logins()))
        for login in logins:
            logger.info("Verifying   user %r", login)
            with exception_cm(login):
                user = self._users.get(login)
                if user is None:
                    raise RuntimeError("properties of unknown user")
                if not os.path.isdir(user.path):
                    raise RuntimeError("root %r is not a directory" %
                                       user.path)
                for sane_path in self._properties.uris(login):
                    _, path = self._resolve(user, sane_path)
                    if not os.path.lexists(path):
                        property_errors += 1
                        logger.error("Properties of missing resource %r of "
                                     "user %r", sane_path, login)
                logger.info("Verified    user %r", login)
        return user_errors == 0 and property_errors == 0
