"""
Repository interfaces used by the prediction engine and the services.

The engine only needs the read methods. Writes are used by the services
that create records and accept predictions.
"""
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from ledger_categorizer.models import Account, AccountType, HistoricalMatch, Pattern, Transaction


class PatternRepository(ABC):
    @abstractmethod
    async def list_enabled(self) -> list[Pattern]:
        """Enabled patterns in ascending id order."""
        pass

    @abstractmethod
    async def list_patterns(self) -> list[Pattern]:
        pass

    @abstractmethod
    async def get_pattern(self, pattern_id: int) -> Pattern | None:
        pass

    @abstractmethod
    async def add_pattern(self, **fields: Any) -> Pattern:
        pass

    @abstractmethod
    async def update_pattern(self, pattern_id: int, **fields: Any) -> Pattern | None:
        pass


class HistoricalMatchRepository(ABC):
    @abstractmethod
    async def find_overlapping(self, description: str) -> list[HistoricalMatch]:
        """
        Records whose stored description contains ``description`` or is
        contained in it, compared case-insensitively. Order is unspecified.
        """
        pass

    @abstractmethod
    async def record_usage(
        self,
        description: str,
        account_id: int,
        explanation: str,
        used_at: datetime | None = None,
    ) -> HistoricalMatch:
        """Insert the (description, account) pair or bump its frequency."""
        pass


class AccountRepository(ABC):
    @abstractmethod
    async def get_active_by_ids(self, account_ids: Iterable[int]) -> dict[int, Account]:
        """Active accounts keyed by id. Missing or inactive ids are absent."""
        pass

    @abstractmethod
    async def first_active_of_type(self, account_type: AccountType) -> Account | None:
        """The active account of the given type with the lowest id."""
        pass

    @abstractmethod
    async def list_accounts(self, active_only: bool = False) -> list[Account]:
        pass

    @abstractmethod
    async def get_account(self, account_id: int) -> Account | None:
        pass

    @abstractmethod
    async def get_account_by_code(self, code: str) -> Account | None:
        pass

    @abstractmethod
    async def add_account(self, **fields: Any) -> Account:
        pass

    @abstractmethod
    async def update_account(self, account_id: int, **fields: Any) -> Account | None:
        pass


class TransactionRepository(ABC):
    @abstractmethod
    async def get_transaction(self, transaction_id: int) -> Transaction | None:
        pass

    @abstractmethod
    async def list_transactions(self) -> list[Transaction]:
        """All transactions, newest date first."""
        pass

    @abstractmethod
    async def add_transactions(self, rows: Iterable[dict[str, Any]]) -> list[Transaction]:
        pass

    @abstractmethod
    async def update_transaction(self, transaction_id: int, **fields: Any) -> Transaction | None:
        pass
