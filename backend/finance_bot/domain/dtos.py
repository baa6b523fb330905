"""Data transfer objects passed between adapters and use cases."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from .entities import AudioFile, FinancialAccount, FinancialGoal, FinancialTransaction, utcnow


@dataclass(slots=True)
class TranscriptionRequest:
    audio_file: AudioFile
    user_id: int
    username: str | None = None
    audio_duration: float | None = None
    timestamp: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class TranscriptionResult:
    """Transcribed text plus the context it was produced in.

    ``metadata`` carries ``duration``, ``format``, ``timestamp``, ``user_id``,
    ``username``, ``file_size`` and ``word_count``.
    """

    text: str
    file_id: str
    metadata: dict[str, Any]


@dataclass(slots=True)
class FinanceExtractionRequest:
    user_id: int
    transcription_text: str
    username: str | None = None
    audio_duration: float | None = None
    timestamp: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class RawExtraction:
    """Unvalidated output of the extraction port."""

    transactions: list[dict[str, Any]] = field(default_factory=list)
    accounts: list[dict[str, Any]] = field(default_factory=list)
    goals: list[dict[str, Any]] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    confidence: float = 0.0


@dataclass(slots=True)
class ExtractedFinancialData:
    """Validated candidates ready to be persisted."""

    user_id: int
    transactions: list[FinancialTransaction] = field(default_factory=list)
    accounts: list[FinancialAccount] = field(default_factory=list)
    goals: list[FinancialGoal] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    confidence: float = 0.0
    timestamp: datetime = field(default_factory=utcnow)

    def is_empty(self) -> bool:
        return not (self.transactions or self.accounts or self.goals)

    def to_dict(self) -> dict[str, object]:
        return {
            "user_id": self.user_id,
            "transactions": [tx.to_dict() for tx in self.transactions],
            "accounts": [acc.to_dict() for acc in self.accounts],
            "goals": [goal.to_dict() for goal in self.goals],
            "notes": list(self.notes),
            "confidence": self.confidence,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(slots=True)
class SaveResult:
    transaction_ids: list[int] = field(default_factory=list)
    account_ids: list[int] = field(default_factory=list)
    goal_ids: list[int] = field(default_factory=list)
    extraction_log_id: int | None = None


@dataclass(slots=True)
class FinancialSummary:
    user_id: int
    start_date: datetime
    end_date: datetime
    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    account_count: int
    total_balance: Decimal
    goal_count: int
    active_goal_count: int
    average_goal_completion: float
    category_summary: dict[str, Decimal]
    transaction_count: int

    def to_dict(self) -> dict[str, object]:
        return {
            "user_id": self.user_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_income": float(self.total_income),
            "total_expenses": float(self.total_expenses),
            "net_balance": float(self.net_balance),
            "account_count": self.account_count,
            "total_balance": float(self.total_balance),
            "goal_count": self.goal_count,
            "active_goal_count": self.active_goal_count,
            "average_goal_completion": self.average_goal_completion,
            "category_summary": {name: float(total) for name, total in self.category_summary.items()},
            "transaction_count": self.transaction_count,
        }
