"""
Core Data Models for FinTrack

These models define the schemas for everything the store persists and
everything the derivation layer hands to the presentation layer.

Persisted field names follow the browser blob format
(`type`, `date`), so snapshots written by earlier versions still load.
Python code uses the descriptive attribute names (`kind`, `timestamp`).

Blobs read back from storage are validated with the `from_storage`
context flag. Under that flag the content rules enforced on new input
(non-negative amount, non-empty text) are relaxed, so rows the browser
application accepted still load.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)


def _from_storage(info: ValidationInfo) -> bool:
    return bool(info.context and info.context.get("from_storage"))


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(str, Enum):
    """Direction of money flow for a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    One recorded income or expense event.

    Transactions are immutable once created. The only way to remove one
    is to bulk-replace the whole log through the store.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: int = Field(
        ...,
        ge=0,
        description="Creation time in epoch milliseconds, bumped on collision"
    )
    kind: TransactionKind = Field(
        ...,
        alias="type",
        description="Income or expense"
    )
    description: str = Field(
        ...,
        description="Free-text description"
    )
    category: str = Field(
        ...,
        description="Category label; not required to exist in the category set"
    )
    amount: Decimal = Field(
        ...,
        description="Non-negative amount; stored rows may carry negatives"
    )
    timestamp: datetime = Field(
        ...,
        alias="date",
        description="When the transaction was recorded"
    )

    @field_validator('description', 'category')
    @classmethod
    def require_text(cls, v: str, info: ValidationInfo) -> str:
        if not v and not _from_storage(info):
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @field_validator('amount')
    @classmethod
    def require_non_negative(cls, v: Decimal, info: ValidationInfo) -> Decimal:
        if v < 0 and not _from_storage(info):
            raise ValueError("amount must not be negative")
        return v

    @field_validator('timestamp')
    @classmethod
    def assume_utc_when_naive(cls, v: datetime) -> datetime:
        """Naive timestamps are read as UTC so month filtering is well-defined."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_income(self) -> bool:
        return self.kind == TransactionKind.INCOME

    @property
    def is_expense(self) -> bool:
        return self.kind == TransactionKind.EXPENSE

    @property
    def month_key(self) -> str:
        """Calendar month of the timestamp in UTC, as YYYY-MM."""
        return self.timestamp.astimezone(timezone.utc).strftime("%Y-%m")


class TransactionDraft(BaseModel):
    """
    Staged input of the add-transaction form.

    The presentation layer binds its widgets to a draft and submits it
    through the store, which clears it after a successful add.
    """
    model_config = ConfigDict(validate_assignment=True)

    kind: TransactionKind = TransactionKind.INCOME
    description: str = ""
    category: str = ""
    amount_text: str = ""

    def clear(self) -> None:
        """Reset the text fields. The selected kind is kept."""
        self.description = ""
        self.category = ""
        self.amount_text = ""


# =============================================================================
# PERSISTED SNAPSHOT
# =============================================================================

class Snapshot(BaseModel):
    """
    The full persisted state, stored as one JSON blob under one key.

    Each collection defaults to empty on its own, so a blob missing a
    key still loads the others.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    goals: dict[str, Decimal] = Field(default_factory=dict)

    @field_validator('transactions', 'categories', mode='before')
    @classmethod
    def null_as_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator('transactions', mode='before')
    @classmethod
    def drop_null_amounts(cls, v: Any, info: ValidationInfo) -> Any:
        """
        Older blobs carry transactions with a null amount (a NaN
        serialized by the browser). Those rows are dropped on load and
        their ids are collected in the context's `dropped` list.
        """
        if not _from_storage(info) or not isinstance(v, list):
            return v

        kept = []
        for row in v:
            if isinstance(row, dict) and "amount" in row and row["amount"] is None:
                dropped = info.context.get("dropped")
                if dropped is not None:
                    dropped.append(row.get("id"))
                continue
            kept.append(row)
        return kept

    @field_validator('goals', mode='before')
    @classmethod
    def drop_null_goals(cls, v: Any) -> Any:
        """
        Older blobs carry null goal values (a NaN serialized by the browser).
        Those were displayed as "no goal", so they are dropped here.
        """
        if v is None:
            return {}
        if isinstance(v, dict):
            return {k: val for k, val in v.items() if val is not None}
        return v

    def to_blob(self) -> str:
        """Serialize using the persisted field names."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_blob(cls, blob: str, dropped: Optional[list] = None) -> "Snapshot":
        """
        Parse a stored blob.

        Args:
            blob: JSON text as written by `to_blob` or the browser application
            dropped: If given, receives the ids of rows dropped for a null amount
        """
        context = {"from_storage": True, "dropped": dropped}
        return cls.model_validate_json(blob, context=context)


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class Totals(BaseModel):
    """Income, expense and balance over a list of transactions."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")


class CategoryReportRow(BaseModel):
    """Spent-vs-goal figures for one category."""
    model_config = ConfigDict(frozen=True)

    category: str
    spent: Decimal = Decimal("0")
    goal: Decimal = Decimal("0")

    @property
    def remaining(self) -> Decimal:
        """Goal minus spent. Negative once the goal is exceeded."""
        return self.goal - self.spent

    @property
    def over_goal(self) -> bool:
        """True when a goal is set and spending went past it."""
        return self.goal > 0 and self.spent > self.goal


class FinanceView(BaseModel):
    """
    Everything the presentation layer renders for one month filter.

    `month_key` is empty when no filter is active.
    """
    model_config = ConfigDict(frozen=True)

    month_key: str = ""
    transactions: list[Transaction] = Field(default_factory=list)
    totals: Totals = Field(default_factory=Totals)
    report: list[CategoryReportRow] = Field(default_factory=list)
