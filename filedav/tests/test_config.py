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
import tempfile

import pytest

from filedav import config
from filedav.tests.helpers import configuration_to_dict, write_ini


class TestConfig:
    """Test the configuration."""

    def setup_method(self):
        self.colpath = tempfile.mkdtemp()

    def teardown_method(self):
        shutil.rmtree(self.colpath)

    def _write_config(self, config_dict, name):
        return write_ini(self.colpath, name, config_dict)

    def test_parse_compound_paths(self):
        assert len(config.parse_compound_paths()) == 0
        assert len(config.parse_compound_paths("")) == 0
        assert len(config.parse_compound_paths(None, "")) == 0
        assert len(config.parse_compound_paths("config", "")) == 0
        assert len(config.parse_compound_paths("config", None)) == 1

        assert len(config.parse_compound_paths(os.pathsep.join(["", ""]))) == 0
        assert len(config.parse_compound_paths(os.pathsep.join([
            "", "config", ""]))) == 1

        paths = config.parse_compound_paths(os.pathsep.join([
            "config1", "?config2", "config3"]))
        assert len(paths) == 3
        for i, (name, ignore_if_missing) in enumerate([
                ("config1", False), ("config2", True), ("config3", False)]):
            assert os.path.isabs(paths[i][0])
            assert os.path.basename(paths[i][0]) == name
            assert paths[i][1] is ignore_if_missing

    def test_load_empty(self):
        config_path = self._write_config({}, "config")
        config.load([(config_path, False)])

    def test_load_full(self):
        config_path = self._write_config(
            configuration_to_dict(config.load()), "config")
        configuration = config.load([(config_path, False)])
        assert configuration.get("storage", "chunk_size") == 8192
        assert configuration.get("users", "folder_quota") is None

    def test_load_missing(self):
        config_path = os.path.join(self.colpath, "does_not_exist")
        config.load([(config_path, True)])
        with pytest.raises(Exception) as exc_info:
            config.load([(config_path, False)])
        e = exc_info.value
        assert "Failed to load config file %r" % config_path in str(e)

    def test_load_multiple(self):
        config_path1 = self._write_config({
            "storage": {"chunk_size": "4096"}}, "config1")
        config_path2 = self._write_config({
            "locks": {"timeout": "60"}}, "config2")
        configuration = config.load([(config_path1, False),
                                     (config_path2, False)])
        assert configuration.get("storage", "chunk_size") == 4096
        assert configuration.get("locks", "timeout") == 60

    def test_copy(self):
        configuration1 = config.load()
        configuration1.update({"locks": {"timeout": "1111"}}, "test")
        configuration2 = configuration1.copy()
        configuration2.update({"locks": {"timeout": "1112"}}, "test")
        assert configuration1.get("locks", "timeout") == 1111
        assert configuration2.get("locks", "timeout") == 1112

    def test_invalid_section(self):
        configuration = config.load()
        with pytest.raises(Exception) as exc_info:
            configuration.update({"does_not_exist": {"x": "x"}}, "test")
        e = exc_info.value
        assert "Invalid section 'does_not_exist'" in str(e)

    def test_invalid_option(self):
        configuration = config.load()
        with pytest.raises(Exception) as exc_info:
            configuration.update({"locks": {"x": "x"}}, "test")
        e = exc_info.value
        assert "Invalid option 'x'" in str(e)
        assert "section 'locks'" in str(e)

    def test_invalid_option_plugin(self):
        configuration = config.load()
        with pytest.raises(Exception) as exc_info:
            configuration.update({"users": {"x": "x"}}, "test")
        e = exc_info.value
        assert "Invalid option 'x'" in str(e)
        assert "section 'users'" in str(e)

    def test_external_plugin_options(self):
        configuration = config.load()
        configuration.update({"users": {"type": "example_users",
                                        "x": "x"}}, "test")
        assert configuration.get("users", "x") == "x"

    def test_invalid_value(self):
        configuration = config.load()
        with pytest.raises(Exception) as exc_info:
            configuration.update({"storage": {"chunk_size": "x"}}, "test")
        e = exc_info.value
        assert "Invalid nonzero_int" in str(e)
        assert "option 'chunk_size" in str(e)
        assert "section 'storage" in str(e)
        assert "'x'" in str(e)

    def test_zero_chunk_size(self):
        configuration = config.load()
        with pytest.raises(Exception):
            configuration.update({"storage": {"chunk_size": "0"}}, "test")

    def test_privileged(self):
        configuration = config.load()
        configuration.update({"storage": {"_filesystem_fsync": "False"}},
                             "test", privileged=True)
        assert configuration.get("storage", "_filesystem_fsync") is False
        with pytest.raises(Exception) as exc_info:
            configuration.update(
                {"storage": {"_filesystem_fsync": "True"}}, "test")
        e = exc_info.value
        assert "Invalid option '_filesystem_fsync'" in str(e)

    def test_size(self):
        assert config.size("") is None
        assert config.size("0") == 0
        assert config.size("512") == 512
        assert config.size("2k") == 2048
        assert config.size("3 MiB") == 3 * 1024 ** 2
        assert config.size("1G") == 1024 ** 3
        with pytest.raises(ValueError):
            config.size("-1")
        with pytest.raises(ValueError):
            config.size("1.5G")

    def test_ignore_pattern(self):
        configuration = config.load()
        pattern = configuration.get("storage", "ignore_pattern")
        assert pattern.search(".DS_Store")
        assert pattern.search("._photo.jpg")
        assert not pattern.search("photo.jpg")
        configuration.update({"storage": {"ignore_pattern": ""}}, "test")
        assert configuration.get("storage", "ignore_pattern") is None
