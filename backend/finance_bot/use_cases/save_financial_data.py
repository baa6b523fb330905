from __future__ import annotations

import logging

from ..domain.dtos import ExtractedFinancialData, SaveResult
from ..domain.entities import FinancialAccount
from ..domain.errors import DomainError, PersistenceError
from ..domain.repositories import (
    AccountRepository,
    ExtractionLogRepository,
    GoalRepository,
    TransactionRepository,
)

logger = logging.getLogger(__name__)

_ITEM_ERRORS = (PersistenceError, DomainError)


class SaveFinancialDataUseCase:
    """Persist extracted entities.

    Each item is written on its own, so one failing row does not prevent the
    others from being stored. Accounts are matched by (user, name) and only
    their balance is refreshed when they already exist.
    """

    def __init__(
        self,
        transactions: TransactionRepository,
        accounts: AccountRepository,
        goals: GoalRepository,
        extraction_logs: ExtractionLogRepository | None = None,
        min_confidence: float = 0.0,
    ):
        self._transactions = transactions
        self._accounts = accounts
        self._goals = goals
        self._extraction_logs = extraction_logs
        self._min_confidence = min_confidence

    def execute(self, data: ExtractedFinancialData, transcription_text: str | None = None) -> SaveResult:
        logger.info(
            "Saving financial data for user %s: %s transactions, %s accounts, %s goals",
            data.user_id,
            len(data.transactions),
            len(data.accounts),
            len(data.goals),
        )
        result = SaveResult()

        if data.confidence < self._min_confidence:
            logger.warning(
                "Extraction confidence %.2f below %.2f for user %s; nothing saved",
                data.confidence,
                self._min_confidence,
                data.user_id,
            )
        else:
            for transaction in data.transactions:
                try:
                    saved = self._transactions.save(transaction)
                except _ITEM_ERRORS as exc:
                    logger.warning("Error saving transaction %s: %s", transaction.description, exc)
                    continue
                if saved.id is not None:
                    result.transaction_ids.append(saved.id)

            for account in data.accounts:
                try:
                    account_id = self._save_account(account)
                except _ITEM_ERRORS as exc:
                    logger.warning("Error saving account %s: %s", account.name, exc)
                    continue
                if account_id is not None:
                    result.account_ids.append(account_id)

            for goal in data.goals:
                try:
                    saved = self._goals.save(goal)
                except _ITEM_ERRORS as exc:
                    logger.warning("Error saving goal %s: %s", goal.title, exc)
                    continue
                if saved.id is not None:
                    result.goal_ids.append(saved.id)

        if self._extraction_logs is not None and transcription_text:
            try:
                result.extraction_log_id = self._extraction_logs.save(transcription_text, data)
            except PersistenceError as exc:
                logger.warning("Error saving extraction log for user %s: %s", data.user_id, exc)

        logger.info(
            "Financial data saved: %s transactions, %s accounts, %s goals",
            len(result.transaction_ids),
            len(result.account_ids),
            len(result.goal_ids),
        )
        return result

    def _save_account(self, account: FinancialAccount) -> int | None:
        existing = self._accounts.find_by_user_id_and_name(account.user_id, account.name)
        if existing is None:
            return self._accounts.save(account).id
        if account.balance is not None and existing.balance != account.balance:
            existing.update_balance(account.balance)
            return self._accounts.update(existing).id
        return existing.id
