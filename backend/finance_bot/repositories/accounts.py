from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Select, delete, func, select

from ..domain.entities import AccountType, FinancialAccount, utcnow
from ..domain.errors import NotFoundError, entity_not_found
from ..domain.repositories import DEFAULT_LIMIT, AccountRepository
from ..mappers import account_to_domain, apply_account
from ..models import AccountModel
from .base import SQLAlchemyRepository, apply_limit, as_decimal


class SQLAccountRepository(SQLAlchemyRepository, AccountRepository):
    entity_label = "financial account"

    def save(self, account: FinancialAccount) -> FinancialAccount:
        with self._session("save") as session:
            row = AccountModel(created_at=account.created_at)
            apply_account(row, account)
            session.add(row)
            session.commit()
            session.refresh(row)
            return account_to_domain(row)

    def find_by_id(self, account_id: int) -> FinancialAccount | None:
        with self._session("find") as session:
            row = session.get(AccountModel, account_id)
            return account_to_domain(row) if row else None

    def _list(self, stmt: Select, limit: int | None) -> list[FinancialAccount]:
        stmt = stmt.order_by(AccountModel.created_at.desc(), AccountModel.id.desc())
        with self._session("list") as session:
            return [account_to_domain(row) for row in session.scalars(apply_limit(stmt, limit))]

    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialAccount]:
        return self._list(select(AccountModel).where(AccountModel.user_id == user_id), limit)

    def find_active_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialAccount]:
        stmt = select(AccountModel).where(AccountModel.user_id == user_id, AccountModel.is_active.is_(True))
        return self._list(stmt, limit)

    def find_by_user_id_and_type(
        self, user_id: int, type_: AccountType, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialAccount]:
        stmt = select(AccountModel).where(AccountModel.user_id == user_id, AccountModel.type == type_)
        return self._list(stmt, limit)

    def find_by_user_id_and_name(self, user_id: int, name: str) -> FinancialAccount | None:
        stmt = (
            select(AccountModel)
            .where(AccountModel.user_id == user_id, AccountModel.name == name)
            .order_by(AccountModel.id)
            .limit(1)
        )
        with self._session("find") as session:
            row = session.scalar(stmt)
            return account_to_domain(row) if row else None

    def update(self, account: FinancialAccount) -> FinancialAccount:
        with self._session("update") as session:
            row = session.get(AccountModel, account.id) if account.id else None
            if row is None:
                raise NotFoundError(entity_not_found("Financial account", account.id))
            apply_account(row, account)
            row.updated_at = account.updated_at or utcnow()
            session.commit()
            session.refresh(row)
            return account_to_domain(row)

    def delete(self, account_id: int) -> bool:
        with self._session("delete") as session:
            result = session.execute(delete(AccountModel).where(AccountModel.id == account_id))
            session.commit()
            return result.rowcount > 0

    def get_total_balance(self, user_id: int, include_credit: bool = False) -> Decimal:
        stmt = select(func.coalesce(func.sum(AccountModel.balance), 0)).where(
            AccountModel.user_id == user_id, AccountModel.is_active.is_(True)
        )
        if not include_credit:
            stmt = stmt.where(AccountModel.type != "credit")
        with self._session("sum") as session:
            return as_decimal(session.scalar(stmt))
