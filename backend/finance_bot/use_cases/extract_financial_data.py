from __future__ import annotations

import logging
from datetime import date
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..domain.dtos import ExtractedFinancialData, FinanceExtractionRequest
from ..domain.entities import FinancialAccount, FinancialGoal, FinancialTransaction
from ..domain.errors import ValidationError
from ..domain.ports import FinanceExtractionPort
from ..schemas import RawAccountItem, RawGoalItem, RawTransactionItem

logger = logging.getLogger(__name__)

_ITEM_ERRORS = (ValidationError, PydanticValidationError)


def parse_iso_date(value: str | None, default: date | None = None) -> date | None:
    """Parse ``YYYY-MM-DD`` (a trailing time part is ignored)."""
    if not value:
        return default
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value}") from exc


class ExtractFinancialDataUseCase:
    """Map raw model output to validated entities, one item at a time.

    An item that is incomplete or fails entity validation is logged and
    skipped; the rest of the batch is kept. A failure of the extraction port
    itself propagates.
    """

    def __init__(self, extraction_port: FinanceExtractionPort):
        self._extraction_port = extraction_port

    def execute(self, request: FinanceExtractionRequest) -> ExtractedFinancialData:
        logger.info(
            "Extracting financial data for user %s (%s chars)",
            request.user_id,
            len(request.transcription_text),
        )
        try:
            raw = self._extraction_port.extract(
                request.transcription_text,
                {
                    "user_id": request.user_id,
                    "username": request.username,
                    "audio_duration": request.audio_duration,
                    "timestamp": request.timestamp,
                },
            )
        except Exception:
            logger.exception("Error extracting financial data for user %s", request.user_id)
            raise

        today = request.timestamp.date()
        transactions = [
            tx for item in raw.transactions if (tx := self._transaction(request.user_id, item, today))
        ]
        accounts = [acc for item in raw.accounts if (acc := self._account(request.user_id, item))]
        goals = [goal for item in raw.goals if (goal := self._goal(request.user_id, item))]

        return ExtractedFinancialData(
            user_id=request.user_id,
            transactions=transactions,
            accounts=accounts,
            goals=goals,
            notes=list(raw.notes),
            confidence=raw.confidence,
            timestamp=request.timestamp,
        )

    def _transaction(self, user_id: int, raw: dict[str, Any], today: date) -> FinancialTransaction | None:
        try:
            item = RawTransactionItem.model_validate(raw)
            missing = item.missing("amount", "type", "category", "description")
            if missing:
                logger.warning("Skipping transaction without %s: %s", ", ".join(missing), raw)
                return None
            return FinancialTransaction(
                user_id=user_id,
                amount=item.amount,
                type=item.type,
                category=item.category,
                description=item.description,
                date=parse_iso_date(item.date, today),
                account=item.account or None,
                tags=item.tags,
            )
        except _ITEM_ERRORS as exc:
            logger.warning("Error mapping transaction entity: %s", exc)
            return None

    def _account(self, user_id: int, raw: dict[str, Any]) -> FinancialAccount | None:
        try:
            item = RawAccountItem.model_validate(raw)
            missing = item.missing("name", "type")
            if missing:
                logger.warning("Skipping account without %s: %s", ", ".join(missing), raw)
                return None
            return FinancialAccount(
                user_id=user_id,
                name=item.name,
                type=item.type,
                bank=item.bank or None,
                balance=item.balance,
            )
        except _ITEM_ERRORS as exc:
            logger.warning("Error mapping account entity: %s", exc)
            return None

    def _goal(self, user_id: int, raw: dict[str, Any]) -> FinancialGoal | None:
        try:
            item = RawGoalItem.model_validate(raw)
            missing = item.missing("title", "target_amount", "current_amount", "category")
            if missing:
                logger.warning("Skipping goal without %s: %s", ", ".join(missing), raw)
                return None
            return FinancialGoal(
                user_id=user_id,
                title=item.title,
                target_amount=item.target_amount,
                current_amount=item.current_amount,
                category=item.category,
                description=item.description or None,
                target_date=parse_iso_date(item.target_date),
            )
        except _ITEM_ERRORS as exc:
            logger.warning("Error mapping goal entity: %s", exc)
            return None
