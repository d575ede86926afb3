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
The storage module that maps WebDAV resources of users onto the file system.

Take a look at the class ``BaseStorage`` if you want to implement your own.

"""

import enum
from http import client
from typing import (Any, Iterable, Iterator, Mapping, Optional, Sequence,
                    Tuple, Union)

from filedav import config, properties, types, users, utils
from filedav.log import logger

INTERNAL_TYPES: Sequence[str] = ("multifilesystem",)


def load(configuration: "config.Configuration") -> "BaseStorage":
    """Load the storage module chosen in configuration."""
    logger.debug("storage packages: %s", utils.packages_version())
    return utils.load_plugin(INTERNAL_TYPES, "storage", "Storage", BaseStorage,
                             configuration)


class ErrorKind(enum.Enum):
    NOT_FOUND = "not-found"
    CONFLICT = "conflict"
    QUOTA_EXCEEDED = "quota-exceeded"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad-request"
    METHOD_NOT_ALLOWED = "method-not-allowed"


ERROR_STATUS: Mapping[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: client.NOT_FOUND,
    ErrorKind.CONFLICT: client.CONFLICT,
    ErrorKind.QUOTA_EXCEEDED: client.FORBIDDEN,
    ErrorKind.FORBIDDEN: client.FORBIDDEN,
    ErrorKind.BAD_REQUEST: client.BAD_REQUEST,
    ErrorKind.METHOD_NOT_ALLOWED: client.METHOD_NOT_ALLOWED}


class StorageError(Exception):
    """Base class of all errors the protocol engine has to translate."""

    kind: ErrorKind = ErrorKind.FORBIDDEN

    @property
    def status(self) -> int:
        """Conventional HTTP status code of the error."""
        return ERROR_STATUS[self.kind]


class NotFoundError(StorageError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(StorageError):
    kind = ErrorKind.CONFLICT


class QuotaExceededError(StorageError):
    kind = ErrorKind.QUOTA_EXCEEDED

    def __init__(self, message: str = "Your quota is exhausted") -> None:
        super().__init__(message)


class ForbiddenError(StorageError):
    kind = ErrorKind.FORBIDDEN


class BadRequestError(StorageError):
    kind = ErrorKind.BAD_REQUEST


class MethodNotAllowedError(StorageError):
    kind = ErrorKind.METHOD_NOT_ALLOWED


class FileProperty(enum.Enum):
    """Live properties computed from the file system.

    Values are ``NAMESPACE:NAME``.

    """
    RESOURCE_TYPE = "DAV::resourcetype"
    CONTENT_TYPE = "DAV::getcontenttype"
    LAST_MODIFIED = "DAV::getlastmodified"
    CONTENT_LENGTH = "DAV::getcontentlength"
    DISPLAY_NAME = "DAV::displayname"
    IS_HIDDEN = "DAV::ishidden"
    ETAG = "DAV::getetag"
    LAST_ACCESSED = "DAV::lastaccessed"
    CREATION_DATE = "DAV::creationdate"
    OC_ID = "http://owncloud.org/ns:id"
    OC_PERMISSIONS = "http://owncloud.org/ns:permissions"
    OC_SIZE = "http://owncloud.org/ns:size"


BASIC_PROPERTIES: Sequence[FileProperty] = (
    FileProperty.RESOURCE_TYPE, FileProperty.CONTENT_TYPE,
    FileProperty.LAST_MODIFIED, FileProperty.CONTENT_LENGTH,
    FileProperty.DISPLAY_NAME, FileProperty.IS_HIDDEN)

DEFAULT_PROPERTIES: Sequence[FileProperty] = (
    *BASIC_PROPERTIES, FileProperty.ETAG, FileProperty.OC_ID)

# Read, write, create file and folder, delete, rename and move
PERMISSIONS: str = "GWCKDNV"


class BaseStorage:

    def __init__(self, configuration: "config.Configuration") -> None:
        """Initialize BaseStorage.

        ``configuration`` see ``filedav.config`` module.
        The ``configuration`` must not change during the lifetime of
        this object, it is kept as an internal reference.

        """
        self.configuration = configuration

    def list(self, user: "users.User", uri: str
             ) -> Iterator[Tuple[str, None]]:
        """List the direct children of the collection ``uri``.

        Yields ``(name, None)`` tuples, collections first, each group in
        case-insensitive natural order. Raises ``NotFoundError`` if ``uri``
        is not a collection.

        """
        raise NotImplementedError

    def get(self, user: "users.User", uri: str) -> Optional[str]:
        """Get the filesystem path of the resource or ``None``.

        The caller decides how to transfer the content.

        """
        raise NotImplementedError

    def exists(self, user: "users.User", uri: str) -> bool:
        """Check if a file or collection exists at ``uri``."""
        raise NotImplementedError

    def get_file_property(self, user: "users.User", uri: str, name: str,
                          depth: int) -> Any:
        """Compute the live property ``name`` of ``uri``.

        ``name`` is ``NAMESPACE:NAME`` (e.g. ``DAV::getetag``). Returns
        ``None`` for unknown or not applicable properties.

        """
        raise NotImplementedError

    def properties(self, user: "users.User", uri: str,
                   names: Optional[Iterable[Union[str, "FileProperty"]]],
                   depth: int
                   ) -> Optional[Mapping[str, Any]]:
        """Get the properties ``names`` of ``uri``.

        A default set is used when ``names`` is ``None``. Properties without
        value are left out. Returns ``None`` if ``uri`` doesn't exist.

        """
        raise NotImplementedError

    def put(self, user: "users.User", uri: str,
            stream: types.InputStream) -> bool:
        """Store the content of ``stream`` at ``uri``.

        Returns ``True`` if the file was created.

        """
        raise NotImplementedError

    def delete(self, user: "users.User", uri: str) -> None:
        """Delete the file or the collection (recursively) at ``uri``."""
        raise NotImplementedError

    def copymove(self, user: "users.User", move: bool, uri: str,
                 destination: str) -> bool:
        """Copy or move ``uri`` to ``destination``.

        An existing destination is replaced. Returns ``True`` if the
        destination was overwritten.

        """
        raise NotImplementedError

    def copy(self, user: "users.User", uri: str, destination: str) -> bool:
        return self.copymove(user, False, uri, destination)

    def move(self, user: "users.User", uri: str, destination: str) -> bool:
        return self.copymove(user, True, uri, destination)

    def mkcol(self, user: "users.User", uri: str) -> None:
        """Create the collection ``uri``."""
        raise NotImplementedError

    def get_lock(self, user: "users.User", uri: str,
                 token: Optional[str] = None) -> Optional[str]:
        """Get the scope of the lock on ``uri`` or its parent."""
        raise NotImplementedError

    def lock(self, user: "users.User", uri: str, token: str,
             scope: str) -> None:
        """Lock ``uri``, replacing any previous lock on it."""
        raise NotImplementedError

    def unlock(self, user: "users.User", uri: str, token: str) -> None:
        """Remove the lock ``token`` from ``uri``."""
        raise NotImplementedError

    def get_properties(self, user: "users.User", uri: str
                       ) -> Mapping[str, "properties.StoredProperty"]:
        """Get the dead properties stored for ``uri``."""
        raise NotImplementedError

    def set_properties(
            self, user: "users.User", uri: str,
            body: Union[str, bytes, Iterable["properties.PropertyOperation"]]
            ) -> None:
        """Apply a PROPPATCH ``body`` (or parsed operations) atomically."""
        raise NotImplementedError

    @types.contextmanager
    def acquire_lock(self, user: "users.User") -> Iterator[None]:
        """Context manager that serializes the writes of ``user``."""
        raise NotImplementedError

    def get_user(self, login: str) -> Optional["users.User"]:
        """Get the user with ``login`` from the users backend."""
        raise NotImplementedError

    def quota(self, user: "users.User") -> "users.QuotaSnapshot":
        raise NotImplementedError

    def sweep_locks(self) -> int:
        """Delete expired locks and return their number."""
        raise NotImplementedError

    def verify(self) -> bool:
        """Check the storage for errors."""
        raise NotImplementedError

    def close(self) -> None:
        """Release the resources of the storage."""
