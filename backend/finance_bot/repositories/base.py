from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..domain.errors import PersistenceError, operation_failed


def as_date(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


def as_decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def apply_limit(stmt: Select, limit: int | None) -> Select:
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


class SQLAlchemyRepository:
    """Opens one short-lived session per repository call."""

    entity_label = "record"

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(operation_failed(operation, self.entity_label, exc)) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
