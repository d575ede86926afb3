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
SQLite database holding the metadata that the file system can't store.

Locks and dead properties of all users live in one database that is
accessed through SQLAlchemy.

"""

import os
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import Column, DateTime, String, Text, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from filedav import config, types
from filedav.log import logger

DATABASE_NAME: str = ".FileDAV.db"


def utcnow() -> datetime:
    """Current time as naive UTC datetime, the way it is stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class Lock(Base):
    """Advisory WebDAV lock, at most one per resource."""

    __tablename__ = "locks"

    user = Column(String, primary_key=True)
    uri = Column(String, primary_key=True)
    token = Column(String, nullable=False)
    scope = Column(String, nullable=False)  # exclusive or shared
    expires = Column(DateTime, nullable=False, index=True)


class Property(Base):
    """Dead property set with PROPPATCH."""

    __tablename__ = "properties"

    user = Column(String, primary_key=True)
    uri = Column(String, primary_key=True)
    namespace = Column(String, primary_key=True)
    name = Column(String, primary_key=True)
    value = Column(Text, nullable=False)  # serialized XML element
    xmlns = Column(Text, nullable=False, default="{}")  # JSON prefix map


def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=10000")
    finally:
        cursor.close()


class MetadataDatabase:
    """Connection to the metadata database."""

    def __init__(self, configuration: "config.Configuration") -> None:
        database_path = configuration.get("storage", "database_path")
        if not database_path:
            database_path = os.path.join(
                configuration.get("storage", "filesystem_folder"),
                DATABASE_NAME)
        self.path = os.path.abspath(os.path.expanduser(database_path))
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        self.engine = create_engine(f"sqlite:///{self.path}")
        event.listen(self.engine, "connect", _set_sqlite_pragma)
        self.Session = scoped_session(sessionmaker(bind=self.engine))

    def init_db(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(self.engine)

    def close(self) -> None:
        """Close all database connections."""
        self.Session.remove()
        self.engine.dispose()

    @types.contextmanager
    def session(self) -> Iterator[Session]:
        """Session for reading, closed on exit."""
        session = self.Session()
        try:
            yield session
        finally:
            session.close()

    @types.contextmanager
    def transaction(self) -> Iterator[Session]:
        """Session that is committed on success and rolled back on errors.
        """
        session = self.Session()
        try:
            yield session
            session.commit()
        except Exception:
            logger.debug("Rolling back metadata transaction")
            session.rollback()
            raise
        finally:
            session.close()
