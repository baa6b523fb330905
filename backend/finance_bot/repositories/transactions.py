from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import Select, delete, func, select

from ..domain.entities import FinancialTransaction, TransactionType, utcnow
from ..domain.errors import NotFoundError, entity_not_found
from ..domain.repositories import DEFAULT_LIMIT, TransactionRepository
from ..mappers import apply_transaction, transaction_to_domain
from ..models import TransactionModel
from .base import SQLAlchemyRepository, apply_limit, as_date, as_decimal


def _ordered(stmt: Select) -> Select:
    return stmt.order_by(
        TransactionModel.date.desc(),
        TransactionModel.created_at.desc(),
        TransactionModel.id.desc(),
    )


def _in_range(stmt: Select, start: date | None, end: date | None) -> Select:
    start, end = as_date(start), as_date(end)
    if start is not None:
        stmt = stmt.where(TransactionModel.date >= start)
    if end is not None:
        stmt = stmt.where(TransactionModel.date <= end)
    return stmt


class SQLTransactionRepository(SQLAlchemyRepository, TransactionRepository):
    entity_label = "financial transaction"

    def _new_row(self, transaction: FinancialTransaction) -> TransactionModel:
        row = TransactionModel(created_at=transaction.created_at)
        apply_transaction(row, transaction)
        return row

    def save(self, transaction: FinancialTransaction) -> FinancialTransaction:
        with self._session("save") as session:
            row = self._new_row(transaction)
            session.add(row)
            session.commit()
            session.refresh(row)
            return transaction_to_domain(row)

    def save_many(self, transactions: Iterable[FinancialTransaction]) -> list[FinancialTransaction]:
        with self._session("save") as session:
            rows = [self._new_row(transaction) for transaction in transactions]
            session.add_all(rows)
            session.commit()
            for row in rows:
                session.refresh(row)
            return [transaction_to_domain(row) for row in rows]

    def find_by_id(self, transaction_id: int) -> FinancialTransaction | None:
        with self._session("find") as session:
            row = session.get(TransactionModel, transaction_id)
            return transaction_to_domain(row) if row else None

    def _list(self, stmt: Select, limit: int | None) -> list[FinancialTransaction]:
        with self._session("list") as session:
            rows = session.scalars(apply_limit(_ordered(stmt), limit))
            return [transaction_to_domain(row) for row in rows]

    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialTransaction]:
        stmt = select(TransactionModel).where(TransactionModel.user_id == user_id)
        return self._list(stmt, limit)

    def find_by_user_id_and_type(
        self, user_id: int, type_: TransactionType, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialTransaction]:
        stmt = select(TransactionModel).where(
            TransactionModel.user_id == user_id, TransactionModel.type == type_
        )
        return self._list(stmt, limit)

    def find_by_user_id_and_category(
        self, user_id: int, category: str, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialTransaction]:
        stmt = select(TransactionModel).where(
            TransactionModel.user_id == user_id, TransactionModel.category == category
        )
        return self._list(stmt, limit)

    def find_by_date_range(
        self, user_id: int, start: date, end: date, limit: int | None = None
    ) -> list[FinancialTransaction]:
        stmt = _in_range(select(TransactionModel).where(TransactionModel.user_id == user_id), start, end)
        return self._list(stmt, limit)

    def update(self, transaction: FinancialTransaction) -> FinancialTransaction:
        with self._session("update") as session:
            row = session.get(TransactionModel, transaction.id) if transaction.id else None
            if row is None:
                raise NotFoundError(entity_not_found("Financial transaction", transaction.id))
            apply_transaction(row, transaction)
            row.updated_at = transaction.updated_at or utcnow()
            session.commit()
            session.refresh(row)
            return transaction_to_domain(row)

    def delete(self, transaction_id: int) -> bool:
        with self._session("delete") as session:
            result = session.execute(delete(TransactionModel).where(TransactionModel.id == transaction_id))
            session.commit()
            return result.rowcount > 0

    def _sum(self, user_id: int, type_: TransactionType, start: date | None, end: date | None) -> Decimal:
        stmt = select(func.coalesce(func.sum(TransactionModel.amount), 0)).where(
            TransactionModel.user_id == user_id, TransactionModel.type == type_
        )
        with self._session("sum") as session:
            return as_decimal(session.scalar(_in_range(stmt, start, end)))

    def get_total_income(self, user_id: int, start: date | None = None, end: date | None = None) -> Decimal:
        return self._sum(user_id, "income", start, end)

    def get_total_expenses(self, user_id: int, start: date | None = None, end: date | None = None) -> Decimal:
        return self._sum(user_id, "expense", start, end)

    def get_summary_by_category(
        self,
        user_id: int,
        type_: TransactionType,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[str, Decimal]:
        total = func.sum(TransactionModel.amount)
        stmt = (
            select(TransactionModel.category, total)
            .where(TransactionModel.user_id == user_id, TransactionModel.type == type_)
            .group_by(TransactionModel.category)
            .order_by(total.desc())
        )
        with self._session("summarise") as session:
            rows = session.execute(_in_range(stmt, start, end)).all()
        return {category: as_decimal(amount) for category, amount in rows}
