"""Tests for GetFinancialSummaryUseCase."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from finance_bot.domain.entities import FinancialAccount, FinancialGoal
from finance_bot.use_cases.financial_summary import GetFinancialSummaryUseCase

NOW = datetime(2024, 5, 31, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def summary_use_case(transaction_repo, account_repo, goal_repo):
    return GetFinancialSummaryUseCase(transaction_repo, account_repo, goal_repo, clock=lambda: NOW)


class TestFinancialSummary:
    """Tests for the read-only summary aggregation."""

    def test_empty_user(self, summary_use_case):
        summary = summary_use_case.execute(42)

        assert summary.total_income == Decimal("0")
        assert summary.total_expenses == Decimal("0")
        assert summary.net_balance == Decimal("0")
        assert summary.account_count == 0
        assert summary.goal_count == 0
        assert summary.average_goal_completion == 0.0
        assert summary.category_summary == {}
        assert summary.transaction_count == 0

    def test_default_window_is_last_30_days(self, summary_use_case, transaction_repo, make_transaction):
        transaction_repo.save(make_transaction(amount=40, date=date(2024, 5, 20)))
        transaction_repo.save(make_transaction(amount=999, date=date(2024, 3, 1)))

        summary = summary_use_case.execute(42)

        assert summary.end_date == NOW
        assert summary.start_date == datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)
        assert summary.total_expenses == Decimal("40")
        assert summary.transaction_count == 1

    def test_full_summary(self, summary_use_case, transaction_repo, account_repo, goal_repo, make_transaction):
        transaction_repo.save(make_transaction(amount=50, date=date(2024, 5, 30)))
        transaction_repo.save(make_transaction(amount=20, category="transporte", date=date(2024, 5, 29)))
        transaction_repo.save(
            make_transaction(amount=2000, type="income", category="salário", date=date(2024, 5, 5))
        )
        account_repo.save(FinancialAccount(user_id=42, name="Conta", type="checking", balance=500))
        account_repo.save(FinancialAccount(user_id=42, name="Cartão", type="credit", balance=900))
        goal_repo.save(
            FinancialGoal(user_id=42, title="Viagem", target_amount=1000, current_amount=500, category="lazer")
        )
        done = FinancialGoal(user_id=42, title="Notebook", target_amount=100, current_amount=0, category="compras")
        done.mark_as_completed()
        goal_repo.save(done)

        summary = summary_use_case.execute(42)

        assert summary.total_income == Decimal("2000")
        assert summary.total_expenses == Decimal("70")
        assert summary.net_balance == Decimal("1930")
        assert summary.account_count == 2
        assert summary.total_balance == Decimal("500")
        assert summary.goal_count == 2
        assert summary.active_goal_count == 1
        assert summary.average_goal_completion == pytest.approx(50.0)
        assert summary.category_summary == {"alimentação": Decimal("50"), "transporte": Decimal("20")}
        assert summary.transaction_count == 3

    def test_explicit_range(self, summary_use_case, transaction_repo, make_transaction):
        transaction_repo.save(make_transaction(amount=15, date=date(2024, 1, 10)))
        summary = summary_use_case.execute(
            42,
            start_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
            end_date=datetime(2024, 1, 31, tzinfo=timezone.utc),
        )
        assert summary.total_expenses == Decimal("15")
        assert summary.to_dict()["total_expenses"] == 15.0
