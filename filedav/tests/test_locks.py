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
Tests for WebDAV locks.

"""

from datetime import timedelta

import pytest

from filedav import database, storage
from filedav.tests import BaseTest


class TestLocks(BaseTest):
    """Test the lock table of the storage."""

    def test_lock(self) -> None:
        assert self.storage.get_lock(self.user, "/a") is None
        self.storage.lock(self.user, "/a", "token1", "exclusive")
        assert self.storage.get_lock(self.user, "/a") == "exclusive"
        assert self.storage.get_lock(self.user, "/a", "token1") == "exclusive"
        assert self.storage.get_lock(self.user, "/a", "token2") is None

    def test_lock_applies_to_children(self) -> None:
        self.storage.lock(self.user, "/a/b", "token", "exclusive")
        assert self.storage.get_lock(self.user, "/a/b/c") == "exclusive"
        # Only direct children are covered
        assert self.storage.get_lock(self.user, "/a/b/c/d") is None
        assert self.storage.get_lock(self.user, "/a") is None

    def test_lock_replaces_previous(self) -> None:
        self.storage.lock(self.user, "/a", "token1", "exclusive")
        self.storage.lock(self.user, "/a", "token2", "shared")
        assert self.storage.get_lock(self.user, "/a") == "shared"
        assert self.storage.get_lock(self.user, "/a", "token1") is None

    def test_lock_invalid_scope(self) -> None:
        with pytest.raises(storage.BadRequestError):
            self.storage.lock(self.user, "/a", "token", "write")

    def test_locks_are_per_user(self) -> None:
        other = self.storage.get_user("bob")
        self.storage.lock(self.user, "/a", "token", "exclusive")
        assert self.storage.get_lock(other, "/a") is None

    def test_unlock(self) -> None:
        self.storage.lock(self.user, "/a", "token", "exclusive")
        self.storage.unlock(self.user, "/a", "wrong")
        assert self.storage.get_lock(self.user, "/a") == "exclusive"
        self.storage.unlock(self.user, "/a", "token")
        assert self.storage.get_lock(self.user, "/a") is None
        assert self.storage.get_lock(self.user, "/a/b") is None

    def test_expired_lock(self) -> None:
        db = database.MetadataDatabase(self.configuration)
        try:
            with db.transaction() as session:
                session.add(database.Lock(
                    user=self.user.login, uri="a", token="token",
                    scope="exclusive",
                    expires=database.utcnow() - timedelta(seconds=1)))
        finally:
            db.close()
        assert self.storage.get_lock(self.user, "/a") is None
        assert self.storage.sweep_locks() == 1
        assert self.storage.sweep_locks() == 0

    def test_lock_timeout(self) -> None:
        self.configure({"locks": {"timeout": "3600"}})
        before = database.utcnow()
        self.storage.lock(self.user, "/a", "token", "shared")
        db = database.MetadataDatabase(self.configuration)
        try:
            with db.session() as session:
                lock = session.query(database.Lock).one()
                assert lock.expires >= before + timedelta(seconds=3600)
        finally:
            db.close()
