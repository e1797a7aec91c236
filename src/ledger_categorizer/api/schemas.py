from datetime import datetime
from typing import Optional

from pydantic import Field

from ledger_categorizer.models import (
    Account,
    AccountType,
    LedgerModel,
    MatchMode,
    PredictionSource,
    Transaction,
)


class TransactionCreate(LedgerModel):
    date: datetime
    description: str
    amount: float


class TransactionUpdate(LedgerModel):
    account_id: Optional[int] = None
    explanation: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    predicted_by: Optional[PredictionSource] = None


class TransactionView(Transaction):
    account: Optional[Account] = None


class AccountCreate(LedgerModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    type: AccountType
    parent_id: Optional[int] = None
    description: Optional[str] = None
    active: bool = True


class AccountUpdate(LedgerModel):
    code: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[AccountType] = None
    parent_id: Optional[int] = None
    description: Optional[str] = None
    active: Optional[bool] = None


class PatternCreate(LedgerModel):
    pattern: str = Field(min_length=1)
    type: MatchMode
    account_id: int
    confidence: float = Field(ge=0.0, le=1.0)
    explanation: Optional[str] = None
    enabled: bool = True


class PatternUpdate(LedgerModel):
    pattern: Optional[str] = Field(default=None, min_length=1)
    type: Optional[MatchMode] = None
    account_id: Optional[int] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    explanation: Optional[str] = None
    enabled: Optional[bool] = None
