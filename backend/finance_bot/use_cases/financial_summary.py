from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from ..domain.dtos import FinancialSummary
from ..domain.entities import utcnow
from ..domain.repositories import AccountRepository, GoalRepository, TransactionRepository

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30


class GetFinancialSummaryUseCase:
    """Read-only aggregation over a user's transactions, accounts and goals.

    Without explicit bounds the window covers the last 30 days up to now.
    """

    def __init__(
        self,
        transactions: TransactionRepository,
        accounts: AccountRepository,
        goals: GoalRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._transactions = transactions
        self._accounts = accounts
        self._goals = goals
        self._clock = clock

    def execute(
        self,
        user_id: int,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> FinancialSummary:
        end = end_date or self._clock()
        start = start_date or end - timedelta(days=DEFAULT_WINDOW_DAYS)
        logger.info("Getting financial summary for user %s (%s to %s)", user_id, start, end)

        try:
            total_income = self._transactions.get_total_income(user_id, start, end)
            total_expenses = self._transactions.get_total_expenses(user_id, start, end)
            summary = FinancialSummary(
                user_id=user_id,
                start_date=start,
                end_date=end,
                total_income=total_income,
                total_expenses=total_expenses,
                net_balance=total_income - total_expenses,
                account_count=len(self._accounts.find_active_by_user_id(user_id, limit=None)),
                total_balance=self._accounts.get_total_balance(user_id, include_credit=False),
                goal_count=len(self._goals.find_by_user_id(user_id, limit=None)),
                active_goal_count=len(self._goals.find_active_by_user_id(user_id, limit=None)),
                average_goal_completion=self._goals.get_average_completion(user_id),
                category_summary=self._transactions.get_summary_by_category(
                    user_id, "expense", start, end
                ),
                transaction_count=len(self._transactions.find_by_date_range(user_id, start, end)),
            )
        except Exception:
            logger.exception("Error getting financial summary for user %s", user_id)
            raise
        return summary
