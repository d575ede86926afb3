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
Users backends.

A users backend maps logins to the root folder and the quota of the user.
Authentication is left to the WebDAV front end.

Take a look at the class ``BaseUsers`` if you want to implement your own.

"""

import os
import shutil
from typing import Iterable, NamedTuple, Optional, Sequence

from filedav import config, pathutils, utils

INTERNAL_TYPES: Sequence[str] = ("folder", "from_file")


def load(configuration: "config.Configuration") -> "BaseUsers":
    """Load the users module chosen in configuration."""
    return utils.load_plugin(INTERNAL_TYPES, "users", "Users", BaseUsers,
                             configuration)


class User(NamedTuple):
    login: str
    path: str
    # ``None`` is unlimited, ``0`` disables the storage
    quota: Optional[int] = None


class QuotaSnapshot(NamedTuple):
    used: int
    free: int
    total: int


class BaseUsers:

    def __init__(self, configuration: "config.Configuration") -> None:
        """Initialize BaseUsers.

        ``configuration`` see ``filedav.config`` module.
        The ``configuration`` must not change during the lifetime of
        this object, it is kept as an internal reference.

        """
        self.configuration = configuration

    def get(self, login: str) -> Optional[User]:
        """Get the user with ``login`` or ``None`` if it doesn't exist.

        The root folder of the user is created if necessary.

        """
        raise NotImplementedError

    def logins(self) -> Iterable[str]:
        """Logins of all known users."""
        raise NotImplementedError

    def quota(self, user: User) -> QuotaSnapshot:
        """Compute the current quota usage of ``user``.

        Without quota the size of the partition is the limit.

        """
        used = pathutils.directory_size(user.path)
        if user.quota is None:
            usage = shutil.disk_usage(user.path)
            return QuotaSnapshot(used, usage.free, usage.total)
        return QuotaSnapshot(used, max(user.quota - used, 0), user.quota)

    @staticmethod
    def _create_root(path: str) -> None:
        os.makedirs(path, 0o770, exist_ok=True)
