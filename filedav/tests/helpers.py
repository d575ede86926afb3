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
FileDAV Helpers module.

This module offers helpers to use in tests.

"""

import io
import os
from configparser import RawConfigParser


def configuration_to_dict(configuration):
    """Convert configuration to a dict with raw values."""
    return {section: {option: configuration.get_raw(section, option)
                      for option in configuration.options(section)
                      if not option.startswith("_")}
            for section in configuration.sections()
            if not section.startswith("_")}


def write_ini(folder, name, config_dict):
    parser = RawConfigParser()
    parser.read_dict(config_dict)
    path = os.path.join(folder, name)
    with open(path, "w") as f:
        parser.write(f)
    return path


class FailingStream(io.RawIOBase):
    """Stream that breaks after ``fail_after`` bytes like a lost client."""

    def __init__(self, data, fail_after):
        self._data = io.BytesIO(data)
        self._remaining = fail_after

    def readable(self):
        return True

    def read(self, size=-1):
        if self._remaining <= 0:
            raise ConnectionResetError("client disconnected")
        chunk = self._data.read(min(size, self._remaining)
                                if size >= 0 else self._remaining)
        self._remaining -= len(chunk)
        return chunk
