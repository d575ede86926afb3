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
Storage backend that stores files in the file system.

Every user has a root folder, collections are folders and files are
files. Locks and dead properties are kept in an SQLite database.

"""

from filedav import config
from filedav.log import logger
from filedav.storage.multifilesystem.base import StorageBase
from filedav.storage.multifilesystem.create_collection import \
    StoragePartCreateCollection
from filedav.storage.multifilesystem.get import StoragePartGet
from filedav.storage.multifilesystem.live import StoragePartLive
from filedav.storage.multifilesystem.lock import StoragePartLock
from filedav.storage.multifilesystem.meta import StoragePartMeta
from filedav.storage.multifilesystem.move import StoragePartCopyMove
from filedav.storage.multifilesystem.upload import StoragePartUpload
from filedav.storage.multifilesystem.verify import StoragePartVerify


class Storage(
        StoragePartCreateCollection, StoragePartCopyMove, StoragePartUpload,
        StoragePartMeta, StoragePartLive, StoragePartGet, StoragePartLock,
        StoragePartVerify, StorageBase):

    def __init__(self, configuration: config.Configuration) -> None:
        super().__init__(configuration)
        logger.info("Storage location: %r", self._filesystem_folder)
        logger.info("Metadata database: %r", self._database.path)
        logger.info("Serialized writes: %s", self._serialize_writes)
