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
Dead properties of resources.

Properties are stored per user and resource, keyed by namespace and name.
The value is the serialized XML element with the namespace prefixes that
are required to reproduce it.

"""

import json
from collections import OrderedDict
from typing import Iterable, List, Mapping, NamedTuple, Optional

from sqlalchemy import or_

from filedav import database, pathutils, storage
from filedav.log import logger


class StoredProperty(NamedTuple):
    namespace: str
    name: str
    value: str
    xmlns: Mapping[str, str]

    @property
    def key(self) -> str:
        """``NAMESPACE:NAME`` as used for live properties."""
        return "%s:%s" % (self.namespace, self.name)


class PropertyOperation(NamedTuple):
    """``set`` (with ``value``) or ``remove`` of one property."""
    action: str
    namespace: str
    name: str
    value: Optional[str] = None
    xmlns: Optional[Mapping[str, str]] = None


def _to_stored(row: "database.Property") -> StoredProperty:
    return StoredProperty(row.namespace, row.name, row.value,
                          json.loads(row.xmlns))


def _subtree(query, sane_path: str):
    if not sane_path:
        return query
    return query.filter(or_(
        database.Property.uri == sane_path,
        database.Property.uri.startswith(sane_path + "/", autoescape=True)))


class PropertyStore:

    def __init__(self, db: "database.MetadataDatabase") -> None:
        self._database = db

    def get(self, login: str, uri: str) -> Mapping[str, StoredProperty]:
        """Properties of ``uri`` keyed by ``NAMESPACE:NAME``."""
        sane_path = pathutils.sanitize_uri(uri)
        with self._database.session() as session:
            rows = session.query(database.Property).filter_by(
                user=login, uri=sane_path).order_by(
                    database.Property.namespace, database.Property.name)
            result = OrderedDict()
            for row in rows:
                prop = _to_stored(row)
                result[prop.key] = prop
            return result

    def apply(self, login: str, uri: str,
              operations: Iterable[PropertyOperation]) -> None:
        """Apply all ``operations`` or none of them."""
        sane_path = pathutils.sanitize_uri(uri)
        with self._database.transaction() as session:
            for operation in operations:
                if operation.action == "set":
                    if not operation.namespace:
                        raise storage.BadRequestError("Empty xmlns")
                    session.merge(database.Property(
                        user=login, uri=sane_path,
                        namespace=operation.namespace, name=operation.name,
                        value=operation.value or "",
                        xmlns=json.dumps(dict(operation.xmlns or {}))))
                elif operation.action == "remove":
                    session.query(database.Property).filter_by(
                        user=login, uri=sane_path,
                        namespace=operation.namespace,
                        name=operation.name).delete(
                            synchronize_session=False)
                else:
                    raise storage.BadRequestError(
                        "Unknown property operation: %r" % operation.action)
                # Write immediately, a failure later on rolls it back
                session.flush()
        logger.debug("Updated properties of %r of user %r", sane_path, login)

    def delete(self, login: str, uri: str) -> None:
        """Delete the properties of ``uri`` and its members."""
        sane_path = pathutils.sanitize_uri(uri)
        with self._database.transaction() as session:
            _subtree(session.query(database.Property).filter_by(user=login),
                     sane_path).delete(synchronize_session=False)

    def move(self, login: str, uri: str, destination: str) -> None:
        self._transfer(login, uri, destination, keep=False)

    def copy(self, login: str, uri: str, destination: str) -> None:
        self._transfer(login, uri, destination, keep=True)

    def _transfer(self, login: str, uri: str, destination: str,
                  keep: bool) -> None:
        sane_path = pathutils.sanitize_uri(uri)
        sane_destination = pathutils.sanitize_uri(destination)
        with self._database.transaction() as session:
            _subtree(session.query(database.Property).filter_by(user=login),
                     sane_destination).delete(synchronize_session=False)
            rows = _subtree(session.query(database.Property).filter_by(
                user=login), sane_path).all()
            for row in rows:
                new_uri = sane_destination + row.uri[len(sane_path):]
                session.add(database.Property(
                    user=login, uri=new_uri.strip("/"),
                    namespace=row.namespace, name=row.name, value=row.value,
                    xmlns=row.xmlns))
                if not keep:
                    session.delete(row)

    def logins(self) -> List[str]:
        """Users that have properties."""
        with self._database.session() as session:
            return [login for login, in session.query(
                database.Property.user).distinct()]

    def uris(self, login: str) -> List[str]:
        with self._database.session() as session:
            return [uri for uri, in session.query(
                database.Property.uri).filter_by(user=login).distinct()]
