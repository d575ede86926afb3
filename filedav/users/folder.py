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
Users backend that gives every login a folder below
``filesystem_folder``/users.

All users share the quota ``[users] folder_quota``.

"""

import os
from typing import Iterable, Optional

from filedav import pathutils, users
from filedav.log import logger

USERS_FOLDER: str = "users"


class Users(users.BaseUsers):

    def __init__(self, configuration) -> None:
        super().__init__(configuration)
        self._folder = os.path.join(
            configuration.get("storage", "filesystem_folder"), USERS_FOLDER)
        self._quota = configuration.get("users", "folder_quota")

    def get(self, login: str) -> Optional[users.User]:
        if not pathutils.is_safe_filesystem_path_component(login):
            logger.warning("Refused unsafe login: %r", login)
            return None
        path = os.path.join(self._folder, login)
        self._create_root(path)
        return users.User(login, path, self._quota)

    def logins(self) -> Iterable[str]:
        try:
            with os.scandir(self._folder) as entries:
                return sorted(entry.name for entry in entries
                              if entry.is_dir())
        except FileNotFoundError:
            return []
