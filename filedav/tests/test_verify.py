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

from filedav.properties import PropertyOperation
from filedav.tests import BaseTest

NS = "http://example.com/ns"


class TestVerify(BaseTest):
    """Test the verification of the storage."""

    def test_verify_empty(self) -> None:
        assert self.storage.verify()

    def test_verify(self) -> None:
        self.put("/d/a.txt", b"x")
        self.storage.set_properties(self.user, "/d/a.txt", [
            PropertyOperation("set", NS, "color", "<x:color/>")])
        assert self.storage.verify()

    def test_verify_orphaned_properties(self) -> None:
        self.put("/a.txt", b"x")
        self.storage.set_properties(self.user, "/a.txt", [
            PropertyOperation("set", NS, "color", "<x:color/>")])
        # Changed behind the back of the storage
        os.remove(os.path.join(self.user.path, "a.txt"))
        assert not self.storage.verify()
