"""Tests for ExtractFinancialDataUseCase and the raw extraction payload."""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from conftest import FakeExtractor
from finance_bot.domain.dtos import FinanceExtractionRequest, RawExtraction
from finance_bot.domain.errors import ExtractionError
from finance_bot.schemas import ExtractionPayload
from finance_bot.use_cases.extract_financial_data import ExtractFinancialDataUseCase
from finance_bot.use_cases.save_financial_data import SaveFinancialDataUseCase

SPOKEN_AT = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def run(raw: RawExtraction):
    use_case = ExtractFinancialDataUseCase(FakeExtractor(raw))
    return use_case.execute(
        FinanceExtractionRequest(user_id=42, transcription_text="texto", timestamp=SPOKEN_AT)
    )


class TestExtractFinancialData:
    """Tests for mapping raw items into entities."""

    def test_maps_transactions_with_default_date(self, extractor):
        data = ExtractFinancialDataUseCase(extractor).execute(
            FinanceExtractionRequest(user_id=42, transcription_text="texto", timestamp=SPOKEN_AT)
        )
        assert [tx.amount for tx in data.transactions] == [Decimal("50"), Decimal("2000")]
        assert all(tx.date == date(2024, 5, 10) for tx in data.transactions)
        assert all(tx.user_id == 42 for tx in data.transactions)
        assert data.confidence == 0.95
        assert data.notes == ["Primeiro registro do mês"]
        assert not data.is_empty()

    def test_invalid_item_is_skipped(self):
        data = run(
            RawExtraction(
                transactions=[
                    {"amount": 10, "type": "expense", "category": "café", "description": "café"},
                    {"amount": -5, "type": "expense", "category": "café", "description": "café"},
                    {"amount": 30, "type": "income", "category": "venda", "description": "bolo"},
                ],
                confidence=0.8,
            )
        )
        assert [tx.description for tx in data.transactions] == ["café", "bolo"]

    def test_negative_amount_is_skipped_and_rest_persisted(
        self, caplog, transaction_repo, account_repo, goal_repo
    ):
        raw = RawExtraction(
            transactions=[
                {"amount": 10, "type": "expense", "category": "café", "description": "café"},
                {"amount": -5, "type": "expense", "category": "café", "description": "café"},
                {"amount": 30, "type": "income", "category": "venda", "description": "bolo"},
            ],
            confidence=0.8,
        )
        with caplog.at_level(logging.WARNING, logger="finance_bot.use_cases.extract_financial_data"):
            data = run(raw)
        SaveFinancialDataUseCase(transaction_repo, account_repo, goal_repo).execute(data)

        assert len(transaction_repo.find_by_user_id(42)) == 2
        skips = [r for r in caplog.records if r.getMessage().startswith("Error mapping transaction entity")]
        assert len(skips) == 1

    def test_incomplete_items_are_skipped(self):
        data = run(
            RawExtraction(
                transactions=[{"amount": 10, "type": "expense", "category": "café"}],
                accounts=[{"name": "Nubank"}],
                goals=[{"title": "Carro", "targetAmount": 10000, "category": "transporte"}],
            )
        )
        assert data.is_empty()

    def test_explicit_date_and_bad_date(self):
        data = run(
            RawExtraction(
                transactions=[
                    {"amount": 10, "type": "expense", "category": "a", "description": "b", "date": "2024-05-01"},
                    {"amount": 10, "type": "expense", "category": "a", "description": "c", "date": "ontem"},
                ]
            )
        )
        assert [tx.date for tx in data.transactions] == [date(2024, 5, 1)]

    def test_accounts_and_goals(self):
        data = run(
            RawExtraction(
                accounts=[
                    {"name": "Nubank", "type": "Checking", "bank": "Nubank", "balance": 1500},
                    {"name": "Outra", "type": "wallet"},
                ],
                goals=[
                    {
                        "title": "Viagem",
                        "targetAmount": 5000,
                        "currentAmount": 0,
                        "category": "lazer",
                        "targetDate": "2024-12-20",
                    }
                ],
            )
        )
        assert [acc.name for acc in data.accounts] == ["Nubank"]
        assert data.accounts[0].type == "checking"
        assert data.accounts[0].balance == Decimal("1500")
        assert data.goals[0].target_date == date(2024, 12, 20)
        assert data.goals[0].current_amount == Decimal("0")

    def test_port_failure_propagates(self):
        use_case = ExtractFinancialDataUseCase(FakeExtractor(error=ExtractionError("invalid JSON format")))
        with pytest.raises(ExtractionError):
            use_case.execute(FinanceExtractionRequest(user_id=1, transcription_text="x"))


class TestExtractionPayload:
    """Tests for the lenient top-level payload model."""

    @pytest.mark.parametrize("value", [1.5, -0.1, "alta", None, True])
    def test_confidence_out_of_range_becomes_zero(self, value):
        assert ExtractionPayload.model_validate({"confidence": value}).confidence == 0.0

    def test_notes_keep_only_strings(self):
        payload = ExtractionPayload.model_validate({"notes": ["ok", 3, None, "fim"]})
        assert payload.notes == ["ok", "fim"]

    def test_non_list_sections_become_empty(self):
        raw = ExtractionPayload.model_validate({"transactions": "nada", "goals": [1, {"title": "x"}]}).to_raw()
        assert raw.transactions == []
        assert raw.goals == [{"title": "x"}]
