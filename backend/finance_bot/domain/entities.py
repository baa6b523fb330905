"""Domain entities for the finance bot.

Entities validate their own invariants when constructed and whenever a
validated field is mutated. A failed check raises ``ValidationError`` and
leaves no partially built object behind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from .errors import ValidationError

TransactionType = Literal["income", "expense", "transfer"]
AccountType = Literal["checking", "savings", "credit", "investment", "cash"]
GoalStatus = Literal["active", "completed", "paused", "cancelled"]

TRANSACTION_TYPES: tuple[str, ...] = ("income", "expense", "transfer")
ACCOUNT_TYPES: tuple[str, ...] = ("checking", "savings", "credit", "investment", "cash")
GOAL_STATUSES: tuple[str, ...] = ("active", "completed", "paused", "cancelled")

MAX_AUDIO_SIZE_BYTES = 20 * 1024 * 1024

MIME_TO_EXTENSION = {
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/ogg": "ogg",
    "audio/flac": "flac",
    "audio/aac": "aac",
    "audio/mp4": "m4a",
    "audio/x-m4a": "m4a",
    "audio/webm": "webm",
}
SUPPORTED_AUDIO_MIME_TYPES = frozenset(MIME_TO_EXTENSION)

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value: Any, label: str) -> Decimal:
    """Convert ints, floats, strings and decimals to ``Decimal``."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{label} must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"{label} must be a number") from exc
    if not result.is_finite():
        raise ValidationError(f"{label} must be a finite number")
    return result


def _require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value


def _require_user_id(user_id: Any) -> None:
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        raise ValidationError("User ID must be a positive number")


def _require_date(value: Any, message: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise ValidationError(message)
    return value


@dataclass(slots=True)
class FinancialTransaction:
    """A single income, expense or transfer reported by a user."""

    user_id: int
    amount: Decimal
    type: TransactionType
    category: str
    description: str
    date: date
    account: str | None = None
    tags: list[str] | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        _require_user_id(self.user_id)
        self.amount = self._validate_amount(self.amount)
        if self.type not in TRANSACTION_TYPES:
            raise ValidationError("Transaction type must be income, expense, or transfer")
        _require_text(self.category, "Transaction category cannot be empty")
        _require_text(self.description, "Transaction description cannot be empty")
        self.date = _require_date(self.date, "Transaction date must be a valid date")
        if self.tags is not None:
            self.tags = [str(tag) for tag in self.tags]

    @staticmethod
    def _validate_amount(amount: Any) -> Decimal:
        value = to_decimal(amount, "Transaction amount")
        if value <= 0:
            raise ValidationError("Transaction amount must be greater than zero")
        return value

    def update_amount(self, amount: Any) -> None:
        self.amount = self._validate_amount(amount)
        self.updated_at = utcnow()

    def update_category(self, category: str) -> None:
        self.category = _require_text(category, "Transaction category cannot be empty")
        self.updated_at = utcnow()

    def update_description(self, description: str) -> None:
        self.description = _require_text(description, "Transaction description cannot be empty")
        self.updated_at = utcnow()

    def update_date(self, value: date) -> None:
        self.date = _require_date(value, "Transaction date must be a valid date")
        self.updated_at = utcnow()

    def update_account(self, account: str | None) -> None:
        self.account = account
        self.updated_at = utcnow()

    def update_tags(self, tags: list[str] | None) -> None:
        self.tags = list(tags) if tags is not None else None
        self.updated_at = utcnow()

    def is_income(self) -> bool:
        return self.type == "income"

    def is_expense(self) -> bool:
        return self.type == "expense"

    def is_transfer(self) -> bool:
        return self.type == "transfer"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "amount": str(self.amount),
            "type": self.type,
            "category": self.category,
            "description": self.description,
            "date": self.date.isoformat(),
            "account": self.account,
            "tags": self.tags,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(slots=True)
class FinancialAccount:
    """A bank account, card or cash pocket mentioned by a user."""

    user_id: int
    name: str
    type: AccountType
    bank: str | None = None
    balance: Decimal | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        _require_user_id(self.user_id)
        _require_text(self.name, "Account name cannot be empty")
        self._validate_type(self.type)
        if self.balance is not None:
            self.balance = to_decimal(self.balance, "Account balance")

    @staticmethod
    def _validate_type(type_: Any) -> None:
        if type_ not in ACCOUNT_TYPES:
            raise ValidationError(
                "Account type must be checking, savings, credit, investment, or cash"
            )

    def update_name(self, name: str) -> None:
        self.name = _require_text(name, "Account name cannot be empty")
        self.updated_at = utcnow()

    def update_type(self, type_: AccountType) -> None:
        self._validate_type(type_)
        self.type = type_
        self.updated_at = utcnow()

    def update_bank(self, bank: str | None) -> None:
        self.bank = bank
        self.updated_at = utcnow()

    def update_balance(self, balance: Any | None) -> None:
        self.balance = to_decimal(balance, "Account balance") if balance is not None else None
        self.updated_at = utcnow()

    def deposit(self, amount: Any) -> None:
        value = to_decimal(amount, "Deposit amount")
        if value <= 0:
            raise ValidationError("Deposit amount must be greater than zero")
        self.balance = value if self.balance is None else self.balance + value
        self.updated_at = utcnow()

    def withdraw(self, amount: Any) -> None:
        value = to_decimal(amount, "Withdrawal amount")
        if value <= 0:
            raise ValidationError("Withdrawal amount must be greater than zero")
        if self.balance is None:
            raise ValidationError("Cannot withdraw from account with undefined balance")
        if self.balance < value:
            raise ValidationError("Insufficient funds")
        self.balance -= value
        self.updated_at = utcnow()

    def activate(self) -> None:
        self.is_active = True
        self.updated_at = utcnow()

    def deactivate(self) -> None:
        self.is_active = False
        self.updated_at = utcnow()

    def is_credit_account(self) -> bool:
        return self.type == "credit"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "type": self.type,
            "bank": self.bank,
            "balance": str(self.balance) if self.balance is not None else None,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(slots=True)
class FinancialGoal:
    """A savings target.

    The status moves to ``completed`` on its own only while it is ``active``
    and the current amount reaches the target. Every other transition goes
    through the ``mark_as_*`` methods.
    """

    user_id: int
    title: str
    target_amount: Decimal
    current_amount: Decimal
    category: str
    description: str | None = None
    target_date: date | None = None
    status: GoalStatus = "active"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        _require_user_id(self.user_id)
        _require_text(self.title, "Goal title cannot be empty")
        self.target_amount = self._validate_target(self.target_amount)
        self.current_amount = self._validate_current(self.current_amount)
        _require_text(self.category, "Goal category cannot be empty")
        if self.target_date is not None:
            self.target_date = _require_date(self.target_date, "Goal target date must be a valid date")
        if self.status not in GOAL_STATUSES:
            raise ValidationError("Goal status must be active, completed, paused, or cancelled")

    @staticmethod
    def _validate_target(amount: Any) -> Decimal:
        value = to_decimal(amount, "Goal target amount")
        if value <= 0:
            raise ValidationError("Goal target amount must be greater than zero")
        return value

    @staticmethod
    def _validate_current(amount: Any) -> Decimal:
        value = to_decimal(amount, "Goal current amount")
        if value < 0:
            raise ValidationError("Goal current amount cannot be negative")
        return value

    def _complete_if_reached(self) -> None:
        if self.status == "active" and self.current_amount >= self.target_amount:
            self.status = "completed"

    def update_title(self, title: str) -> None:
        self.title = _require_text(title, "Goal title cannot be empty")
        self.updated_at = utcnow()

    def update_description(self, description: str | None) -> None:
        self.description = description
        self.updated_at = utcnow()

    def update_target_amount(self, amount: Any) -> None:
        self.target_amount = self._validate_target(amount)
        self.updated_at = utcnow()
        self._complete_if_reached()

    def update_current_amount(self, amount: Any) -> None:
        self.current_amount = self._validate_current(amount)
        self.updated_at = utcnow()
        self._complete_if_reached()

    def add_progress(self, amount: Any) -> None:
        value = to_decimal(amount, "Progress amount")
        if value <= 0:
            raise ValidationError("Progress amount must be greater than zero")
        self.current_amount += value
        self.updated_at = utcnow()
        self._complete_if_reached()

    def update_target_date(self, target_date: date | None) -> None:
        if target_date is not None:
            target_date = _require_date(target_date, "Goal target date must be a valid date")
        self.target_date = target_date
        self.updated_at = utcnow()

    def update_category(self, category: str) -> None:
        self.category = _require_text(category, "Goal category cannot be empty")
        self.updated_at = utcnow()

    def mark_as_active(self) -> None:
        self.status = "active"
        self.updated_at = utcnow()

    def mark_as_completed(self) -> None:
        self.status = "completed"
        self.updated_at = utcnow()

    def mark_as_paused(self) -> None:
        self.status = "paused"
        self.updated_at = utcnow()

    def mark_as_cancelled(self) -> None:
        self.status = "cancelled"
        self.updated_at = utcnow()

    def progress_percentage(self) -> Decimal:
        return self.current_amount / self.target_amount * 100

    def is_completed(self) -> bool:
        return self.status == "completed"

    def is_overdue(self, today: date | None = None) -> bool:
        if self.target_date is None:
            return False
        today = today or date.today()
        return self.target_date < today and self.status == "active"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "target_amount": str(self.target_amount),
            "current_amount": str(self.current_amount),
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "category": self.category,
            "status": self.status,
            "progress_percentage": float(self.progress_percentage()),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(slots=True)
class Transcription:
    """Text recognised from one audio message."""

    user_id: int
    text: str
    created_at: datetime = field(default_factory=utcnow)
    audio_duration: float | None = None
    metadata: dict[str, Any] | None = None
    username: str | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        _require_user_id(self.user_id)
        _require_text(self.text, "Transcription text cannot be empty")

    def is_recent(self, now: datetime | None = None) -> bool:
        now = now or utcnow()
        created = self.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return created > now - timedelta(hours=24)

    def word_count(self) -> int:
        return len(self.text.split())

    def summary(self, max_length: int = 100) -> str:
        if len(self.text) <= max_length:
            return self.text
        return f"{self.text[:max_length]}..."

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "username": self.username,
            "text": self.text,
            "audio_duration": self.audio_duration,
            "created_at": self.created_at.isoformat(),
            "metadata": self.metadata,
        }


@dataclass(frozen=True, slots=True)
class AudioFile:
    """Reference to an audio payload awaiting transcription. Never persisted."""

    file_id: str
    file_path: str
    mime_type: str
    file_size: int | None

    def __post_init__(self) -> None:
        _require_text(self.file_id, "File ID cannot be empty")
        _require_text(self.file_path, "File path cannot be empty")
        # None means Telegram did not report a size
        if self.file_size is not None and (
            isinstance(self.file_size, bool) or not isinstance(self.file_size, int) or self.file_size <= 0
        ):
            raise ValidationError("File size must be greater than 0")

    def file_extension(self) -> str:
        return MIME_TO_EXTENSION.get(self.mime_type, "unknown")

    def is_supported_format(self) -> bool:
        return self.mime_type in SUPPORTED_AUDIO_MIME_TYPES

    def is_within_size_limit(self, limit_in_bytes: int = MAX_AUDIO_SIZE_BYTES) -> bool:
        return self.file_size is None or self.file_size <= limit_in_bytes

    def is_remote(self) -> bool:
        return self.file_path.startswith(("http://", "https://"))


@dataclass(slots=True)
class User:
    """The Telegram sender behind a request."""

    id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        _require_user_id(self.id)
        if self.username:
            self._validate_username(self.username)

    @staticmethod
    def _validate_username(username: str) -> None:
        if not 3 <= len(username) <= 50:
            raise ValidationError("Username must be between 3 and 50 characters")
        if not _USERNAME_RE.match(username):
            raise ValidationError("Username can only contain letters, numbers, and underscores")

    @property
    def full_name(self) -> str | None:
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts) or None

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or f"User{self.id}"
