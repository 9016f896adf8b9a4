from __future__ import annotations

from types import TracebackType

from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from floorops.application.ports.repositories import DuplicateKeyError, UnitOfWork
from floorops.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuCatalog
from floorops.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from floorops.infrastructure.db.repositories.reservation_repo import (
    SqlAlchemyReservationRepository,
)
from floorops.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from floorops.infrastructure.db.session import get_engine


class SqlAlchemyUnitOfWork(UnitOfWork):
    """One database transaction per ``with`` block; leaving without commit rolls back."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise RuntimeError("unit of work is already in progress")
        session = Session(self._engine, expire_on_commit=False)
        self._session = session
        self.tables = SqlAlchemyTableRepository(session)
        self.orders = SqlAlchemyOrderRepository(session)
        self.reservations = SqlAlchemyReservationRepository(session)
        self.menu = SqlAlchemyMenuCatalog(session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self._session
        self._session = None
        if session is None:
            return
        try:
            session.rollback()
        finally:
            session.close()

    def commit(self) -> None:
        session = self._require_session()
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise DuplicateKeyError(str(exc.orig)) from exc

    def rollback(self) -> None:
        self._require_session().rollback()

    def _require_session(self) -> Session:
        if self._session is None:
            raise RuntimeError("unit of work is not in progress")
        return self._session
