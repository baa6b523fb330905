"""Tests for SaveFinancialDataUseCase."""

from decimal import Decimal

from finance_bot.domain.dtos import ExtractedFinancialData
from finance_bot.domain.entities import FinancialAccount, FinancialGoal
from finance_bot.domain.errors import PersistenceError
from finance_bot.use_cases.save_financial_data import SaveFinancialDataUseCase


def goal(**overrides):
    values = {"user_id": 42, "title": "Viagem", "target_amount": 5000, "current_amount": 0, "category": "lazer"}
    values.update(overrides)
    return FinancialGoal(**values)


class TestSaveFinancialData:
    """Tests for persisting extracted entities."""

    def test_saves_everything(self, transaction_repo, account_repo, goal_repo, make_transaction):
        use_case = SaveFinancialDataUseCase(transaction_repo, account_repo, goal_repo)
        data = ExtractedFinancialData(
            user_id=42,
            transactions=[make_transaction(), make_transaction(type="income", amount=2000)],
            accounts=[FinancialAccount(user_id=42, name="Nubank", type="checking")],
            goals=[goal()],
            confidence=0.9,
        )

        result = use_case.execute(data)

        assert len(result.transaction_ids) == 2
        assert len(result.account_ids) == 1
        assert len(result.goal_ids) == 1
        assert result.extraction_log_id is None

    def test_existing_account_is_reused(self, transaction_repo, account_repo, goal_repo):
        existing = account_repo.save(FinancialAccount(user_id=42, name="Nubank", type="checking", balance=100))
        use_case = SaveFinancialDataUseCase(transaction_repo, account_repo, goal_repo)

        same = use_case.execute(
            ExtractedFinancialData(user_id=42, accounts=[FinancialAccount(user_id=42, name="Nubank", type="checking")])
        )
        assert same.account_ids == [existing.id]
        assert account_repo.find_by_id(existing.id).balance == Decimal("100")

        changed = use_case.execute(
            ExtractedFinancialData(
                user_id=42, accounts=[FinancialAccount(user_id=42, name="Nubank", type="checking", balance=250)]
            )
        )
        assert changed.account_ids == [existing.id]
        assert account_repo.find_by_id(existing.id).balance == Decimal("250")
        assert len(account_repo.find_by_user_id(42)) == 1

    def test_item_failure_does_not_abort_batch(self, account_repo, goal_repo, transaction_repo, make_transaction):
        class FlakyTransactions:
            def __init__(self):
                self.calls = 0

            def save(self, transaction):
                self.calls += 1
                if self.calls == 1:
                    raise PersistenceError("Failed to save financial transaction: disk full")
                return transaction_repo.save(transaction)

        use_case = SaveFinancialDataUseCase(FlakyTransactions(), account_repo, goal_repo)
        result = use_case.execute(
            ExtractedFinancialData(
                user_id=42,
                transactions=[make_transaction(), make_transaction(amount=10)],
                goals=[goal()],
            )
        )

        assert len(result.transaction_ids) == 1
        assert len(result.goal_ids) == 1

    def test_low_confidence_saves_nothing(
        self, transaction_repo, account_repo, goal_repo, extraction_log_repo, make_transaction
    ):
        use_case = SaveFinancialDataUseCase(
            transaction_repo, account_repo, goal_repo, extraction_log_repo, min_confidence=0.3
        )
        result = use_case.execute(
            ExtractedFinancialData(user_id=42, transactions=[make_transaction()], confidence=0.1),
            transcription_text="hmm talvez cinquenta",
        )

        assert result.transaction_ids == []
        assert transaction_repo.find_by_user_id(42) == []
        assert result.extraction_log_id is not None

    def test_extraction_log_written(
        self, transaction_repo, account_repo, goal_repo, extraction_log_repo, make_transaction
    ):
        use_case = SaveFinancialDataUseCase(transaction_repo, account_repo, goal_repo, extraction_log_repo)
        result = use_case.execute(
            ExtractedFinancialData(user_id=42, transactions=[make_transaction()], confidence=0.7),
            transcription_text="gastei cinquenta no almoço",
        )

        logs = extraction_log_repo.find_by_user_id(42)
        assert [log["id"] for log in logs] == [result.extraction_log_id]
        assert logs[0]["transcription_text"] == "gastei cinquenta no almoço"
