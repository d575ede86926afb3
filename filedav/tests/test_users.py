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
Tests for the users backends and the quota.

"""

import os
import shutil
import tempfile

import pytest

from filedav import config, users
from filedav.tests.helpers import write_ini


class TestFolderUsers:
    """Test the folder users backend."""

    def setup_method(self) -> None:
        self.colpath = tempfile.mkdtemp()
        self.configuration = config.load()
        self.configuration.update({
            "storage": {"filesystem_folder": self.colpath},
            "users": {"folder_quota": "1K"}}, "test")

    def teardown_method(self) -> None:
        shutil.rmtree(self.colpath)

    def test_get(self) -> None:
        backend = users.load(self.configuration)
        user = backend.get("alice")
        assert user == users.User(
            "alice", os.path.join(self.colpath, "users", "alice"), 1024)
        assert os.path.isdir(user.path)
        assert list(backend.logins()) == ["alice"]

    def test_unsafe_login(self) -> None:
        backend = users.load(self.configuration)
        assert backend.get("..") is None
        assert backend.get("a/b") is None
        assert list(backend.logins()) == []

    def test_quota(self) -> None:
        backend = users.load(self.configuration)
        user = backend.get("alice")
        with open(os.path.join(user.path, "file"), "wb") as f:
            f.write(b"x" * 100)
        os.mkdir(os.path.join(user.path, "sub"))
        with open(os.path.join(user.path, "sub", "file"), "wb") as f:
            f.write(b"x" * 24)
        assert backend.quota(user) == users.QuotaSnapshot(124, 900, 1024)

    def test_quota_exhausted(self) -> None:
        backend = users.load(self.configuration)
        user = backend.get("alice")
        with open(os.path.join(user.path, "file"), "wb") as f:
            f.write(b"x" * 2000)
        assert backend.quota(user) == users.QuotaSnapshot(2000, 0, 1024)

    def test_unlimited_quota(self) -> None:
        self.configuration.update({"users": {"folder_quota": ""}}, "test")
        backend = users.load(self.configuration)
        user = backend.get("alice")
        assert user.quota is None
        snapshot = backend.quota(user)
        usage = shutil.disk_usage(user.path)
        assert snapshot.used == 0
        assert snapshot.total == usage.total
        assert 0 < snapshot.free <= snapshot.total

    def test_custom_backend(self) -> None:
        class Users(users.BaseUsers):
            def get(self, login):
                return users.User(login, "/nonexistent", 0)

        self.configuration.update({"users": {"type": Users}}, "test")
        backend = users.load(self.configuration)
        assert backend.get("bob").quota == 0


class TestFromFileUsers:
    """Test the from_file users backend."""

    def setup_method(self) -> None:
        self.colpath = tempfile.mkdtemp()
        self.users_path = write_ini(self.colpath, "users", {
            "alice": {"path": os.path.join(self.colpath, "alice"),
                      "quota": "10M"},
            "bob": {"path": os.path.join(self.colpath, "bob")}})
        self.configuration = config.load()
        self.configuration.update({
            "storage": {"filesystem_folder": self.colpath},
            "users": {"type": "from_file", "file": self.users_path}}, "test")

    def teardown_method(self) -> None:
        shutil.rmtree(self.colpath)

    def test_get(self) -> None:
        backend = users.load(self.configuration)
        alice = backend.get("alice")
        assert alice == users.User(
            "alice", os.path.join(self.colpath, "alice"), 10 * 1024 ** 2)
        assert os.path.isdir(alice.path)
        assert backend.get("bob").quota is None
        assert backend.get("carol") is None
        assert sorted(backend.logins()) == ["alice", "bob"]

    def test_reload(self) -> None:
        backend = users.load(self.configuration)
        assert backend.get("carol") is None
        write_ini(self.colpath, "users", {
            "carol": {"path": os.path.join(self.colpath, "carol"),
                      "quota": "0"}})
        assert backend.get("carol").quota == 0

    def test_invalid_quota(self) -> None:
        write_ini(self.colpath, "users", {
            "alice": {"path": os.path.join(self.colpath, "alice"),
                      "quota": "lots"}})
        backend = users.load(self.configuration)
        with pytest.raises(RuntimeError) as exc_info:
            backend.get("alice")
        assert "Invalid entry 'alice'" in str(exc_info.value)

    def test_missing_file(self) -> None:
        os.remove(self.users_path)
        backend = users.load(self.configuration)
        with pytest.raises(RuntimeError) as exc_info:
            backend.get("alice")
        assert "Failed to load users file" in str(exc_info.value)
