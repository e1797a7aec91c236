from datetime import datetime

import pytest

from ledger_categorizer.models import Account, HistoricalMatch, Pattern, Transaction
from ledger_categorizer.repositories.store import LedgerStore

ACCOUNTS = [
    Account(id=1, code="4000", name="Salary Income", type="income"),
    Account(id=2, code="5000", name="Rent Expense", type="expense"),
    Account(id=3, code="4100", name="Interest Income", type="income"),
    Account(id=4, code="1000", name="Bank", type="asset"),
    Account(id=5, code="5100", name="Old Expense", type="expense", active=False),
]


def make_transaction(description: str, transaction_id: int = 1, amount: float = -10.0) -> Transaction:
    return Transaction(
        id=transaction_id,
        date=datetime(2024, 3, 1),
        description=description,
        amount=amount,
    )


def make_pattern(pattern_id: int, pattern: str, mode: str, account_id: int = 1, weight: float = 1.0, **kwargs) -> Pattern:
    return Pattern(id=pattern_id, pattern=pattern, type=mode, account_id=account_id, confidence=weight, **kwargs)


def make_history(
    record_id: int,
    description: str,
    account_id: int = 1,
    frequency: int = 1,
    last_used: datetime | None = None,
    explanation: str = "seen before",
) -> HistoricalMatch:
    return HistoricalMatch(
        id=record_id,
        transaction_description=description,
        explanation=explanation,
        account_id=account_id,
        frequency=frequency,
        last_used=last_used or datetime(2024, 1, 1),
    )


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> LedgerStore:
    ledger = LedgerStore()
    ledger.accounts = {account.id: account for account in ACCOUNTS}
    return ledger
