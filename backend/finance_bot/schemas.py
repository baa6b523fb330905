import math
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .domain.dtos import RawExtraction


class RawItem(BaseModel):
    """Base for items produced by the language model.

    Every field is optional; the use case decides which ones an item needs.
    Both snake_case and camelCase keys are accepted.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def missing(self, *names: str) -> list[str]:
        return [name for name in names if getattr(self, name) in (None, "")]


class RawTransactionItem(RawItem):
    amount: Optional[Any] = None
    type: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    account: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalise_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("date", mode="before")
    @classmethod
    def stringify_date(cls, value: object) -> object:
        if isinstance(value, date):
            return value.isoformat()
        return value


class RawAccountItem(RawItem):
    name: Optional[str] = None
    type: Optional[str] = None
    bank: Optional[str] = None
    balance: Optional[Any] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalise_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class RawGoalItem(RawItem):
    title: Optional[str] = None
    target_amount: Optional[Any] = Field(default=None, alias="targetAmount")
    current_amount: Optional[Any] = Field(default=None, alias="currentAmount")
    category: Optional[str] = None
    description: Optional[str] = None
    target_date: Optional[str] = Field(default=None, alias="targetDate")

    @field_validator("target_date", mode="before")
    @classmethod
    def stringify_date(cls, value: object) -> object:
        if isinstance(value, date):
            return value.isoformat()
        return value


class ExtractionPayload(BaseModel):
    """Top-level JSON document returned by the extraction model."""

    model_config = ConfigDict(extra="ignore")

    transactions: list[dict[str, Any]] = Field(default_factory=list)
    accounts: list[dict[str, Any]] = Field(default_factory=list)
    goals: list[dict[str, Any]] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
    confidence: float = 0.0

    @field_validator("transactions", "accounts", "goals", mode="before")
    @classmethod
    def keep_objects(cls, value: object) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @field_validator("notes", mode="before")
    @classmethod
    def keep_strings(cls, value: object) -> list[str]:
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    @field_validator("confidence", mode="before")
    @classmethod
    def confidence_or_zero(cls, value: object) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            return 0.0
        try:
            number = float(value)
        except ValueError:
            return 0.0
        if math.isnan(number) or not 0.0 <= number <= 1.0:
            return 0.0
        return number

    def to_raw(self) -> RawExtraction:
        return RawExtraction(
            transactions=self.transactions,
            accounts=self.accounts,
            goals=self.goals,
            notes=self.notes,
            confidence=self.confidence,
        )


class TransactionOut(BaseModel):
    id: int
    user_id: int
    amount: float
    type: str
    category: str
    description: str
    date: date
    account: Optional[str] = None
    tags: Optional[list[str]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FinancialSummaryOut(BaseModel):
    user_id: int
    start_date: datetime
    end_date: datetime
    total_income: float
    total_expenses: float
    net_balance: float
    account_count: int
    total_balance: float
    goal_count: int
    active_goal_count: int
    average_goal_completion: float
    category_summary: dict[str, float]
    transaction_count: int
