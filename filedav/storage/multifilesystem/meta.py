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

from typing import Iterable, Mapping, Union

from filedav import properties, storage, users, xmlutils
from filedav.log import logger
from filedav.storage.multifilesystem.base import StorageBase


class StoragePartMeta(StorageBase):

    def get_properties(self, user: users.User, uri: str
                       ) -> Mapping[str, properties.StoredProperty]:
        sane_path, _ = self._resolve(user, uri)
        return self._properties.get(user.login, sane_path)

    def set_properties(
            self, user: users.User, uri: str,
            body: Union[str, bytes, Iterable[properties.PropertyOperation]]
            ) -> None:
        sane_path, _ = self._resolve(user, uri)
        if isinstance(body, (str, bytes)):
            try:
                operations = xmlutils.parse_proppatch(body)
            except ValueError as e:
                logger.warning("Bad PROPPATCH request on %r of user %r: %s",
                               sane_path, user.login, e)
                raise storage.BadRequestError(str(e)) from e
        else:
            operations = list(body)
        self._properties.apply(user.login, sane_path, operations)
