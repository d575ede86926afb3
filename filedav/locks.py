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
Advisory WebDAV locks.

A lock on a resource also applies to its direct children. Locks expire
after ``[locks] timeout`` seconds and are removed lazily.

"""

from datetime import timedelta
from typing import Optional, Sequence

from filedav import config, database, pathutils, storage
from filedav.log import logger

SCOPES: Sequence[str] = ("exclusive", "shared")


class LockTable:

    def __init__(self, db: "database.MetadataDatabase",
                 configuration: "config.Configuration") -> None:
        self._database = db
        self._timeout = timedelta(
            seconds=configuration.get("locks", "timeout"))

    def get_lock(self, login: str, uri: str,
                 token: Optional[str] = None) -> Optional[str]:
        """Scope of the active lock on ``uri`` or its parent collection."""
        sane_path = pathutils.sanitize_uri(uri)
        uris = {sane_path, pathutils.parent_uri(sane_path)}
        with self._database.session() as session:
            query = session.query(database.Lock).filter(
                database.Lock.user == login,
                database.Lock.uri.in_(sorted(uris)),
                database.Lock.expires > database.utcnow())
            if token:
                query = query.filter(database.Lock.token == token)
            # The lock on the resource itself wins over the parent's
            lock = query.order_by(database.Lock.uri.desc()).first()
            return lock.scope if lock else None

    def lock(self, login: str, uri: str, token: str, scope: str) -> None:
        if scope not in SCOPES:
            raise storage.BadRequestError("Invalid lock scope: %r" % scope)
        sane_path = pathutils.sanitize_uri(uri)
        now = database.utcnow()
        with self._database.transaction() as session:
            self._sweep(session, now)
            session.merge(database.Lock(
                user=login, uri=sane_path, token=token, scope=scope,
                expires=now + self._timeout))
        logger.debug("Locked %r of user %r (%s)", sane_path, login, scope)

    def unlock(self, login: str, uri: str, token: str) -> None:
        sane_path = pathutils.sanitize_uri(uri)
        with self._database.transaction() as session:
            count = session.query(database.Lock).filter(
                database.Lock.user == login,
                database.Lock.uri == sane_path,
                database.Lock.token == token).delete(
                    synchronize_session=False)
        if count:
            logger.debug("Unlocked %r of user %r", sane_path, login)

    def sweep(self) -> int:
        """Delete expired locks and return their number."""
        with self._database.transaction() as session:
            count = self._sweep(session, database.utcnow())
        if count:
            logger.info("Removed %d expired lock(s)", count)
        return count

    @staticmethod
    def _sweep(session, now) -> int:
        return session.query(database.Lock).filter(
            database.Lock.expires <= now).delete(synchronize_session=False)
