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
Live properties, computed from the file system on every request.

"""

import mimetypes
import os
import stat
from collections import OrderedDict
from datetime import datetime, timezone
from hashlib import md5, sha1
from typing import (Any, Callable, Iterable, Mapping, Optional, Tuple,
                    Union)

from filedav import pathutils, storage, users
from filedav.storage.multifilesystem.base import StorageBase

DEFAULT_MIMETYPE: str = "application/octet-stream"


class _Resource:
    """State of a file or collection, read once per request."""

    def __init__(self, login: str, sane_path: str, path: str,
                 depth: int) -> None:
        self.login = login
        self.sane_path = sane_path
        self.path = path
        self.depth = depth
        self.stat_result = os.stat(path)
        self.is_dir = stat.S_ISDIR(self.stat_result.st_mode)
        self._aggregate: Optional[Tuple[int, int]] = None

    @property
    def is_root(self) -> bool:
        return not self.sane_path and self.depth == 0

    @property
    def aggregate(self) -> Tuple[int, int]:
        """Size and mtime of the whole tree."""
        if self._aggregate is None:
            self._aggregate = pathutils.directory_size_and_mtime(self.path)
        return self._aggregate


def _from_ns(timestamp_ns: int) -> Optional[datetime]:
    if not timestamp_ns:
        return None
    return datetime.fromtimestamp(timestamp_ns / 1e9, timezone.utc)


def _mtime_ns(resource: _Resource) -> int:
    if resource.is_root:
        return resource.aggregate[1]
    return resource.stat_result.st_mtime_ns


def _content_length(resource: _Resource) -> int:
    return 0 if resource.is_dir else resource.stat_result.st_size


def _content_type(resource: _Resource) -> Optional[str]:
    if resource.is_dir:
        return None
    mimetype, _ = mimetypes.guess_type(resource.path)
    return mimetype or DEFAULT_MIMETYPE


def _resource_type(resource: _Resource) -> str:
    return "collection" if resource.is_dir else ""


def _last_modified(resource: _Resource) -> Optional[datetime]:
    return _from_ns(_mtime_ns(resource))


def _etag(resource: _Resource) -> str:
    if resource.is_root:
        size, mtime = resource.aggregate
        data = "%d%d%s" % (size, mtime, resource.path)
    else:
        data = "%d%d%s" % (resource.stat_result.st_mtime_ns,
                           resource.stat_result.st_size, resource.path)
    return md5(data.encode()).hexdigest()


def _display_name(resource: _Resource) -> str:
    return os.path.basename(resource.path)


def _is_hidden(resource: _Resource) -> bool:
    return os.path.basename(resource.path).startswith(".")


def _last_accessed(resource: _Resource) -> Optional[datetime]:
    return _from_ns(resource.stat_result.st_atime_ns)


def _creation_date(resource: _Resource) -> Optional[datetime]:
    # Birth time is only available on some platforms
    created = getattr(resource.stat_result, "st_birthtime", None)
    if created is None:
        return _from_ns(resource.stat_result.st_ctime_ns)
    return datetime.fromtimestamp(created, timezone.utc)


def _oc_id(resource: _Resource) -> str:
    return sha1(("%s:%s" % (resource.login, resource.sane_path)).encode()
                ).hexdigest()


def _oc_permissions(resource: _Resource) -> str:
    return storage.PERMISSIONS


def _oc_size(resource: _Resource) -> int:
    if resource.is_dir:
        return resource.aggregate[0]
    return resource.stat_result.st_size


PROPERTY_GETTERS: Mapping[storage.FileProperty,
                          Callable[[_Resource], Any]] = {
    storage.FileProperty.RESOURCE_TYPE: _resource_type,
    storage.FileProperty.CONTENT_TYPE: _content_type,
    storage.FileProperty.LAST_MODIFIED: _last_modified,
    storage.FileProperty.CONTENT_LENGTH: _content_length,
    storage.FileProperty.DISPLAY_NAME: _display_name,
    storage.FileProperty.IS_HIDDEN: _is_hidden,
    storage.FileProperty.ETAG: _etag,
    storage.FileProperty.LAST_ACCESSED: _last_accessed,
    storage.FileProperty.CREATION_DATE: _creation_date,
    storage.FileProperty.OC_ID: _oc_id,
    storage.FileProperty.OC_PERMISSIONS: _oc_permissions,
    storage.FileProperty.OC_SIZE: _oc_size}

assert set(PROPERTY_GETTERS) == set(storage.FileProperty)


def _file_property(name: Union[str, storage.FileProperty]
                   ) -> Optional[storage.FileProperty]:
    try:
        return storage.FileProperty(name)
    except ValueError:
        return None


class StoragePartLive(StorageBase):

    def _resource(self, user: users.User, uri: str,
                  depth: int) -> Optional[_Resource]:
        sane_path, path = self._resolve(user, uri)
        try:
            return _Resource(user.login, sane_path, path, depth)
        except FileNotFoundError:
            return None

    def get_file_property(self, user: users.User, uri: str,
                          name: Union[str, storage.FileProperty],
                          depth: int) -> Any:
        file_property = _file_property(name)
        if file_property is None:
            return None
        resource = self._resource(user, uri, depth)
        if resource is None:
            return None
        return PROPERTY_GETTERS[file_property](resource)

    def properties(self, user: users.User, uri: str,
                   names: Optional[Iterable[Union[str, storage.FileProperty]]],
                   depth: int) -> Optional[Mapping[str, Any]]:
        resource = self._resource(user, uri, depth)
        if resource is None:
            return None
        if names is None:
            names = storage.DEFAULT_PROPERTIES
        dead_properties = None
        result: "OrderedDict[str, Any]" = OrderedDict()
        for name in names:
            file_property = _file_property(name)
            if file_property is not None:
                key = file_property.value
                value = PROPERTY_GETTERS[file_property](resource)
            else:
                key = str(name)
                if dead_properties is None:
                    dead_properties = self._properties.get(
                        user.login, resource.sane_path)
                value = dead_properties.get(key)
            if value is not None:
                result[key] = value
        return result
