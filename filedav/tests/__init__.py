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
Tests for FileDAV.

"""

import io
import logging
import shutil
import tempfile
from typing import Optional

import filedav
from filedav import config, storage, types, users

# Enable debug output
filedav.log.logger.setLevel(logging.DEBUG)


class BaseTest:
    """Base class for tests."""

    colpath: str
    configuration: config.Configuration
    storage: "Optional[storage.BaseStorage]" = None
    user: users.User

    def setup_method(self) -> None:
        self.configuration = config.load()
        self.colpath = tempfile.mkdtemp()
        self.configure({
            "storage": {"filesystem_folder": self.colpath,
                        # Disable syncing to disk for better performance
                        "_filesystem_fsync": "False"}})

    def configure(self, config_: types.CONFIG) -> None:
        self.configuration.update(config_, "test", privileged=True)
        if self.storage is not None:
            self.storage.close()
        self.storage = storage.load(self.configuration)
        user = self.storage.get_user("alice")
        assert user is not None
        self.user = user

    def teardown_method(self) -> None:
        if self.storage is not None:
            self.storage.close()
            self.storage = None
        shutil.rmtree(self.colpath)

    def put(self, uri: str, data: bytes = b"", check: Optional[bool] = None
            ) -> bool:
        """Upload ``data`` to ``uri`` for the test user."""
        assert self.storage is not None
        created = self.storage.put(self.user, uri, io.BytesIO(data))
        if check is not None:
            assert created is check
        return created

    def read(self, uri: str) -> bytes:
        assert self.storage is not None
        path = self.storage.get(self.user, uri)
        assert path is not None, "%r doesn't exist" % uri
        with open(path, "rb") as f:
            return f.read()
