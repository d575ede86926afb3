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
Storage backend for WebDAV servers.

WebDAV front ends get a shared storage instance with ``get_storage()``.
Configuration files can be specified in the environment variable
``FILEDAV_CONFIG``.

"""

import os
import sys
import threading
from typing import Optional, cast

from filedav import config, log, storage, types, utils
from filedav.log import logger

VERSION: str = utils.package_version("filedav")

_storage_instance: Optional[storage.BaseStorage] = None
_storage_config_path: Optional[str] = None
_storage_lock = threading.Lock()


def get_storage(config_path: Optional[str] = None,
                errors: Optional[types.ErrorStream] = None
                ) -> storage.BaseStorage:
    """Get the storage configured in ``config_path``.

    The storage is created on first use and shared afterwards.
    ``FILEDAV_CONFIG`` is used when ``config_path`` is ``None``.

    """
    global _storage_instance, _storage_config_path
    if config_path is None:
        config_path = os.environ.get("FILEDAV_CONFIG")
    with _storage_lock:
        if _storage_instance is None:
            log.setup()
            with log.register_stream(errors or sys.stderr):
                _storage_config_path = config_path
                configuration = config.load(config.parse_compound_paths(
                    config.DEFAULT_CONFIG_PATH, config_path))
                log.set_level(cast(str, configuration.get("logging", "level")),
                              configuration.get("logging",
                                                "backtrace_on_debug"))
                # Log configuration after logger is configured
                for source, miss in configuration.sources():
                    logger.info("%s %s", "Skipped missing/unreadable" if miss
                                else "Loaded", source)
                _storage_instance = storage.load(configuration)
    if _storage_config_path != config_path:
        raise ValueError("FILEDAV_CONFIG must not change: %r != %r" %
                         (config_path, _storage_config_path))
    return _storage_instance
