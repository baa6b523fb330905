"""Persistence contracts for the finance bot entities.

Listings sort by business date (descending) then creation time (descending).
``update`` raises ``NotFoundError`` for an unknown id, ``delete`` reports
whether a row was removed, and aggregates return zero when nothing matches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Iterable

from .dtos import ExtractedFinancialData
from .entities import (
    AccountType,
    FinancialAccount,
    FinancialGoal,
    FinancialTransaction,
    GoalStatus,
    Transcription,
    TransactionType,
)

DEFAULT_LIMIT = 100


class TransactionRepository(ABC):
    @abstractmethod
    def save(self, transaction: FinancialTransaction) -> FinancialTransaction:
        """Insert a transaction and return it with its assigned id."""

    @abstractmethod
    def save_many(self, transactions: Iterable[FinancialTransaction]) -> list[FinancialTransaction]:
        """Insert several transactions in one database transaction."""

    @abstractmethod
    def find_by_id(self, transaction_id: int) -> FinancialTransaction | None:
        """Get a transaction by id."""

    @abstractmethod
    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialTransaction]:
        """List a user's transactions."""

    @abstractmethod
    def find_by_user_id_and_type(
        self, user_id: int, type_: TransactionType, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialTransaction]:
        """List a user's transactions of one type."""

    @abstractmethod
    def find_by_user_id_and_category(
        self, user_id: int, category: str, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialTransaction]:
        """List a user's transactions in one category."""

    @abstractmethod
    def find_by_date_range(
        self, user_id: int, start: date, end: date, limit: int | None = None
    ) -> list[FinancialTransaction]:
        """List a user's transactions dated within ``[start, end]``."""

    @abstractmethod
    def update(self, transaction: FinancialTransaction) -> FinancialTransaction:
        """Persist changes to an existing transaction."""

    @abstractmethod
    def delete(self, transaction_id: int) -> bool:
        """Delete a transaction. Returns True if a row was removed."""

    @abstractmethod
    def get_total_income(self, user_id: int, start: date | None = None, end: date | None = None) -> Decimal:
        """Sum of income amounts."""

    @abstractmethod
    def get_total_expenses(self, user_id: int, start: date | None = None, end: date | None = None) -> Decimal:
        """Sum of expense amounts."""

    @abstractmethod
    def get_summary_by_category(
        self,
        user_id: int,
        type_: TransactionType,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[str, Decimal]:
        """Totals per category for one transaction type."""


class AccountRepository(ABC):
    @abstractmethod
    def save(self, account: FinancialAccount) -> FinancialAccount:
        """Insert an account and return it with its assigned id."""

    @abstractmethod
    def find_by_id(self, account_id: int) -> FinancialAccount | None:
        """Get an account by id."""

    @abstractmethod
    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialAccount]:
        """List a user's accounts."""

    @abstractmethod
    def find_active_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialAccount]:
        """List a user's active accounts."""

    @abstractmethod
    def find_by_user_id_and_type(
        self, user_id: int, type_: AccountType, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialAccount]:
        """List a user's accounts of one type."""

    @abstractmethod
    def find_by_user_id_and_name(self, user_id: int, name: str) -> FinancialAccount | None:
        """Get a user's account by name."""

    @abstractmethod
    def update(self, account: FinancialAccount) -> FinancialAccount:
        """Persist changes to an existing account."""

    @abstractmethod
    def delete(self, account_id: int) -> bool:
        """Delete an account. Returns True if a row was removed."""

    @abstractmethod
    def get_total_balance(self, user_id: int, include_credit: bool = False) -> Decimal:
        """Sum of balances over active accounts."""


class GoalRepository(ABC):
    @abstractmethod
    def save(self, goal: FinancialGoal) -> FinancialGoal:
        """Insert a goal and return it with its assigned id."""

    @abstractmethod
    def find_by_id(self, goal_id: int) -> FinancialGoal | None:
        """Get a goal by id."""

    @abstractmethod
    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialGoal]:
        """List a user's goals."""

    @abstractmethod
    def find_active_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[FinancialGoal]:
        """List a user's active goals."""

    @abstractmethod
    def find_by_user_id_and_status(
        self, user_id: int, status: GoalStatus, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialGoal]:
        """List a user's goals in one status."""

    @abstractmethod
    def find_by_user_id_and_category(
        self, user_id: int, category: str, limit: int | None = DEFAULT_LIMIT
    ) -> list[FinancialGoal]:
        """List a user's goals in one category."""

    @abstractmethod
    def find_overdue_by_user_id(self, user_id: int, today: date | None = None) -> list[FinancialGoal]:
        """Active goals whose target date has passed."""

    @abstractmethod
    def find_nearing_target_date(
        self, user_id: int, days_threshold: int, today: date | None = None
    ) -> list[FinancialGoal]:
        """Active goals whose target date falls within the next ``days_threshold`` days."""

    @abstractmethod
    def update(self, goal: FinancialGoal) -> FinancialGoal:
        """Persist changes to an existing goal."""

    @abstractmethod
    def delete(self, goal_id: int) -> bool:
        """Delete a goal. Returns True if a row was removed."""

    @abstractmethod
    def get_average_completion(self, user_id: int) -> float:
        """Mean completion percentage of active goals, 0 when there are none."""


class TranscriptionRepository(ABC):
    @abstractmethod
    def save(self, transcription: Transcription) -> Transcription:
        """Insert a transcription and return it with its assigned id."""

    @abstractmethod
    def find_by_id(self, transcription_id: int) -> Transcription | None:
        """Get a transcription by id."""

    @abstractmethod
    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[Transcription]:
        """List a user's transcriptions, newest first."""

    @abstractmethod
    def find_recent(self, limit: int | None = DEFAULT_LIMIT) -> list[Transcription]:
        """List the newest transcriptions of all users."""

    @abstractmethod
    def update(self, transcription: Transcription) -> Transcription:
        """Persist changes to an existing transcription."""

    @abstractmethod
    def delete(self, transcription_id: int) -> bool:
        """Delete a transcription. Returns True if a row was removed."""


class ExtractionLogRepository(ABC):
    @abstractmethod
    def save(self, transcription_text: str, data: ExtractedFinancialData) -> int:
        """Record one extraction run. Returns the log id."""

    @abstractmethod
    def find_by_user_id(self, user_id: int, limit: int | None = DEFAULT_LIMIT) -> list[dict[str, object]]:
        """List a user's extraction runs, newest first."""
