"""Conversion between ORM rows and domain entities."""

from __future__ import annotations

from .domain.entities import FinancialAccount, FinancialGoal, FinancialTransaction, Transcription
from .models import AccountModel, GoalModel, TransactionModel, TranscriptionLogModel


def transaction_to_domain(row: TransactionModel) -> FinancialTransaction:
    return FinancialTransaction(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        type=row.type,
        category=row.category,
        description=row.description,
        date=row.date,
        account=row.account,
        tags=list(row.tags) if row.tags is not None else None,
        metadata=dict(row.metadata_) if row.metadata_ is not None else None,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def apply_transaction(row: TransactionModel, transaction: FinancialTransaction) -> None:
    row.user_id = transaction.user_id
    row.amount = transaction.amount
    row.type = transaction.type
    row.category = transaction.category
    row.description = transaction.description
    row.date = transaction.date
    row.account = transaction.account
    row.tags = list(transaction.tags) if transaction.tags is not None else None
    row.metadata_ = dict(transaction.metadata) if transaction.metadata is not None else None


def account_to_domain(row: AccountModel) -> FinancialAccount:
    return FinancialAccount(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        type=row.type,
        bank=row.bank,
        balance=row.balance,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def apply_account(row: AccountModel, account: FinancialAccount) -> None:
    row.user_id = account.user_id
    row.name = account.name
    row.type = account.type
    row.bank = account.bank
    row.balance = account.balance
    row.is_active = account.is_active


def goal_to_domain(row: GoalModel) -> FinancialGoal:
    return FinancialGoal(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        target_amount=row.target_amount,
        current_amount=row.current_amount,
        target_date=row.target_date,
        status=row.status,
        category=row.category,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def apply_goal(row: GoalModel, goal: FinancialGoal) -> None:
    row.user_id = goal.user_id
    row.title = goal.title
    row.description = goal.description
    row.target_amount = goal.target_amount
    row.current_amount = goal.current_amount
    row.target_date = goal.target_date
    row.status = goal.status
    row.category = goal.category


def transcription_to_domain(row: TranscriptionLogModel) -> Transcription:
    return Transcription(
        id=row.id,
        user_id=row.user_id,
        username=row.username,
        text=row.text,
        audio_duration=row.audio_duration,
        created_at=row.created_at,
        metadata=dict(row.metadata_) if row.metadata_ is not None else None,
    )


def apply_transcription(row: TranscriptionLogModel, transcription: Transcription) -> None:
    row.user_id = transcription.user_id
    row.username = transcription.username
    row.text = transcription.text
    row.audio_duration = transcription.audio_duration
    row.metadata_ = dict(transcription.metadata) if transcription.metadata is not None else None
