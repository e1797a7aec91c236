from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AccountType = Literal["asset", "liability", "equity", "income", "expense"]
MatchMode = Literal["exact", "fuzzy", "keyword"]
PredictionSource = Literal["pattern", "database", "ai"]

ACCOUNT_TYPES: tuple[str, ...] = ("asset", "liability", "equity", "income", "expense")


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes become naive UTC so all stored dates compare."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class LedgerModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Account(LedgerModel):
    id: int
    code: str
    name: str
    type: AccountType
    parent_id: Optional[int] = None
    description: Optional[str] = None
    active: bool = True


class Transaction(LedgerModel):
    id: int
    date: datetime
    description: str
    amount: float
    explanation: Optional[str] = None
    account_id: Optional[int] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    predicted_by: Optional[PredictionSource] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("date")
    @classmethod
    def _naive_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class Pattern(LedgerModel):
    id: int
    pattern: str = Field(min_length=1)
    type: MatchMode
    account_id: int
    confidence: float = Field(ge=0.0, le=1.0)  # static weight
    explanation: Optional[str] = None
    enabled: bool = True


class HistoricalMatch(LedgerModel):
    id: int
    transaction_description: str
    explanation: str
    account_id: int
    frequency: int = Field(default=1, ge=1)
    last_used: datetime = Field(default_factory=datetime.now)


class Prediction(LedgerModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    explanation: str
    account_id: int
    account_name: str
    confidence: float = Field(ge=0.0, le=1.0)
    source: PredictionSource = Field(alias="type")
