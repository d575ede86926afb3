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
Users backend that reads the users from an INI file.

Every section is a login::

    [alice]
    path = /srv/dav/alice
    quota = 10G

``quota`` is optional, an empty or missing value means unlimited.

"""

from configparser import RawConfigParser
from typing import Iterable, Optional

from filedav import config, users
from filedav.log import logger


class Users(users.BaseUsers):

    def __init__(self, configuration) -> None:
        super().__init__(configuration)
        self._filename = configuration.get("users", "file")

    def _read(self) -> RawConfigParser:
        parser = RawConfigParser()
        try:
            with open(self._filename, encoding="utf-8") as f:
                parser.read_file(f)
        except Exception as e:
            raise RuntimeError("Failed to load users file %r: %s" %
                               (self._filename, e)) from e
        return parser

    def get(self, login: str) -> Optional[users.User]:
        # The file is read again for every request to pick up changes
        parser = self._read()
        if not parser.has_section(login):
            logger.debug("Unknown user: %r", login)
            return None
        try:
            path = config.filepath(parser.get(login, "path"))
            quota = config.size(parser.get(login, "quota", fallback=""))
        except Exception as e:
            raise RuntimeError("Invalid entry %r in users file %r: %s" %
                               (login, self._filename, e)) from e
        if not path:
            raise RuntimeError("Missing path of %r in users file %r" %
                               (login, self._filename))
        self._create_root(path)
        return users.User(login, path, quota)

    def logins(self) -> Iterable[str]:
        return self._read().sections()
