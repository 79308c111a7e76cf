"""Persistence gateway over the users and donations tables.

Records cross this boundary as plain dicts of column values. Every call runs in
its own session: committed on success, rolled back on failure, and any
SQLAlchemy error surfaces as ``PersistenceError``.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from donation_api.core.exceptions import PersistenceError
from donation_api.database import Base
from donation_api.models.donation import Donation
from donation_api.models.user import User

logger = logging.getLogger(__name__)

Record = dict[str, Any]


def to_record(instance: Base, populate: Iterable[str] = ()) -> Record:
    """Convert a mapped instance to a dict, attaching populated relations."""
    mapper = inspect(instance).mapper
    record = {attr.key: getattr(instance, attr.key) for attr in mapper.column_attrs}
    for name in populate:
        record[name] = [to_record(related) for related in getattr(instance, name)]
    return record


class Collection:
    """Find/create/update/destroy access to one mapped model.

    Args:
        model: Mapped class backing the collection
        session_factory: Factory producing SQLAlchemy sessions
    """

    def __init__(self, model: type[Base], session_factory: sessionmaker) -> None:
        self.model = model
        self.session_factory = session_factory
        mapper = inspect(model)
        self.columns = frozenset(attr.key for attr in mapper.column_attrs)
        self.relations = frozenset(mapper.relationships.keys())

    @property
    def identity(self) -> str:
        return self.model.__tablename__

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Storage failure on {self.identity}: {e}")
            raise PersistenceError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _check_fields(self, names: Iterable[str]) -> None:
        unknown = sorted(set(names) - self.columns)
        if unknown:
            raise PersistenceError(f"unknown {self.identity} attribute(s): {', '.join(unknown)}")

    def _check_populate(self, populate: Iterable[str]) -> tuple[str, ...]:
        populate = tuple(populate)
        unknown = sorted(set(populate) - self.relations)
        if unknown:
            raise PersistenceError(f"unknown {self.identity} relation(s): {', '.join(unknown)}")
        return populate

    def _query(self, session: Session, filters: Optional[Record], populate: tuple[str, ...]):
        filters = filters or {}
        self._check_fields(filters)
        query = session.query(self.model).filter_by(**filters)
        for name in populate:
            query = query.options(selectinload(getattr(self.model, name)))
        return query.order_by(self.model.id)

    def find(self, filters: Optional[Record] = None, populate: Iterable[str] = ()) -> list[Record]:
        """Return every record matching ``filters`` (all records when empty)."""
        populate = self._check_populate(populate)
        with self._session() as session:
            rows = self._query(session, filters, populate).all()
            return [to_record(row, populate) for row in rows]

    def find_one(self, filters: Record, populate: Iterable[str] = ()) -> Optional[Record]:
        """Return the first record matching ``filters``, or None."""
        populate = self._check_populate(populate)
        with self._session() as session:
            row = self._query(session, filters, populate).first()
            return to_record(row, populate) if row is not None else None

    def create(self, fields: Record) -> Record:
        """Insert a record and return it with server-assigned values."""
        self._check_fields(fields)
        with self._session() as session:
            row = self.model(**fields)
            session.add(row)
            session.flush()
            session.refresh(row)
            return to_record(row)

    def update(self, filters: Record, fields: Record) -> Optional[Record]:
        """Apply ``fields`` to every matching record.

        Returns:
            The first updated record, or None if nothing matched
        """
        self._check_fields(fields)
        with self._session() as session:
            rows = self._query(session, filters, ()).all()
            for row in rows:
                for key, value in fields.items():
                    setattr(row, key, value)
            session.flush()
            for row in rows:
                session.refresh(row)
            return to_record(rows[0]) if rows else None

    def destroy(self, filters: Record) -> int:
        """Delete every matching record and return how many were removed."""
        with self._session() as session:
            rows = self._query(session, filters, ()).all()
            for row in rows:
                session.delete(row)
            return len(rows)


class PersistenceGateway:
    """Typed access to the ``users`` and ``donations`` collections.

    Built once at startup and handed to the routers through ``get_gateway``.

    Example:
        ```python
        from donation_api.core.gateway import PersistenceGateway
        from donation_api.database import create_db_engine, create_session_factory

        gateway = PersistenceGateway(create_session_factory(create_db_engine(url)))
        user = gateway.users.find_one({"email": "a@x.com"}, populate=["donations"])
        ```
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory
        self.users = Collection(User, session_factory)
        self.donations = Collection(Donation, session_factory)
