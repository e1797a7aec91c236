import asyncio
import json
import os
from collections.abc import Iterable
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Account, AccountType, HistoricalMatch, Pattern, Transaction

from .base import AccountRepository, HistoricalMatchRepository, PatternRepository, TransactionRepository

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class LedgerStore(AccountRepository, PatternRepository, HistoricalMatchRepository, TransactionRepository):
    """
    In-memory ledger data, optionally mirrored to a JSON file.

    When ``data_path`` is set, the file is loaded on construction and
    rewritten after every write.
    """

    def __init__(self, data_path: str | None = None):
        self.data_path = data_path
        self.accounts: dict[int, Account] = {}
        self.patterns: dict[int, Pattern] = {}
        self.history: dict[int, HistoricalMatch] = {}
        self.transactions: dict[int, Transaction] = {}
        self._lock = asyncio.Lock()
        self.load()

    # Persistence

    def load(self) -> None:
        if not self.data_path or not os.path.exists(self.data_path):
            return
        try:
            with open(self.data_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("[STORE] %s is not valid JSON, starting empty.", self.data_path)
            return

        try:
            accounts = self._load_section(data, "accounts", Account)
            patterns = self._load_section(data, "patterns", Pattern)
            history = self._load_section(data, "historical_matches", HistoricalMatch)
            transactions = self._load_section(data, "transactions", Transaction)
        except ModelValidationError as exc:
            logger.error("[STORE] %s has an invalid record, refusing to load: %s", self.data_path, exc)
            raise
        self.accounts = accounts
        self.patterns = patterns
        self.history = history
        self.transactions = transactions
        logger.info(
            "[STORE] Loaded %d accounts, %d patterns, %d historical matches, %d transactions.",
            len(self.accounts),
            len(self.patterns),
            len(self.history),
            len(self.transactions),
        )

    @staticmethod
    def _load_section(data: dict[str, Any], key: str, model: type[ModelT]) -> dict[int, ModelT]:
        items = (model.model_validate(raw) for raw in data.get(key, []))
        return {item.id: item for item in items}  # type: ignore[attr-defined]

    def save(self) -> None:
        if not self.data_path:
            return
        payload = {
            "accounts": [a.model_dump(mode="json") for a in self.accounts.values()],
            "patterns": [p.model_dump(mode="json") for p in self.patterns.values()],
            "historical_matches": [h.model_dump(mode="json") for h in self.history.values()],
            "transactions": [t.model_dump(mode="json") for t in self.transactions.values()],
        }
        with open(self.data_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    @staticmethod
    def _next_id(items: dict[int, Any]) -> int:
        return max(items, default=0) + 1

    # Accounts

    async def get_active_by_ids(self, account_ids: Iterable[int]) -> dict[int, Account]:
        found: dict[int, Account] = {}
        for account_id in account_ids:
            account = self.accounts.get(account_id)
            if account is not None and account.active:
                found[account_id] = account
        return found

    async def first_active_of_type(self, account_type: AccountType) -> Account | None:
        candidates = [a for a in self.accounts.values() if a.active and a.type == account_type]
        return min(candidates, key=lambda a: a.id, default=None)

    async def list_accounts(self, active_only: bool = False) -> list[Account]:
        accounts = [a for a in self.accounts.values() if a.active or not active_only]
        return sorted(accounts, key=lambda a: a.code)

    async def get_account(self, account_id: int) -> Account | None:
        return self.accounts.get(account_id)

    async def get_account_by_code(self, code: str) -> Account | None:
        return next((a for a in self.accounts.values() if a.code == code), None)

    async def add_account(self, **fields: Any) -> Account:
        async with self._lock:
            account = Account(id=self._next_id(self.accounts), **fields)
            self.accounts[account.id] = account
            self.save()
        return account

    async def update_account(self, account_id: int, **fields: Any) -> Account | None:
        async with self._lock:
            account = self.accounts.get(account_id)
            if account is None:
                return None
            updated = Account.model_validate({**account.model_dump(), **fields})
            self.accounts[account_id] = updated
            self.save()
        return updated

    # Patterns

    async def list_enabled(self) -> list[Pattern]:
        return [p for p in await self.list_patterns() if p.enabled]

    async def list_patterns(self) -> list[Pattern]:
        return [self.patterns[pattern_id] for pattern_id in sorted(self.patterns)]

    async def get_pattern(self, pattern_id: int) -> Pattern | None:
        return self.patterns.get(pattern_id)

    async def add_pattern(self, **fields: Any) -> Pattern:
        async with self._lock:
            pattern = Pattern(id=self._next_id(self.patterns), **fields)
            self.patterns[pattern.id] = pattern
            self.save()
        return pattern

    async def update_pattern(self, pattern_id: int, **fields: Any) -> Pattern | None:
        async with self._lock:
            pattern = self.patterns.get(pattern_id)
            if pattern is None:
                return None
            updated = Pattern.model_validate({**pattern.model_dump(), **fields})
            self.patterns[pattern_id] = updated
            self.save()
        return updated

    # Historical matches

    async def find_overlapping(self, description: str) -> list[HistoricalMatch]:
        needle = description.lower()
        if not needle:
            return []
        matches = []
        for record in self.history.values():
            stored = record.transaction_description.lower()
            if stored and (needle in stored or stored in needle):
                matches.append(record)
        return matches

    async def record_usage(
        self,
        description: str,
        account_id: int,
        explanation: str,
        used_at: datetime | None = None,
    ) -> HistoricalMatch:
        used_at = used_at or datetime.now()
        async with self._lock:
            existing = next(
                (
                    h for h in self.history.values()
                    if h.transaction_description == description and h.account_id == account_id
                ),
                None,
            )
            if existing is None:
                record = HistoricalMatch(
                    id=self._next_id(self.history),
                    transaction_description=description,
                    explanation=explanation,
                    account_id=account_id,
                    frequency=1,
                    last_used=used_at,
                )
            else:
                # Repeat use keeps the stored explanation.
                record = existing.model_copy(
                    update={"frequency": existing.frequency + 1, "last_used": used_at}
                )
            self.history[record.id] = record
            self.save()
        return record

    # Transactions

    async def get_transaction(self, transaction_id: int) -> Transaction | None:
        return self.transactions.get(transaction_id)

    async def list_transactions(self) -> list[Transaction]:
        return sorted(self.transactions.values(), key=lambda t: (t.date, t.id), reverse=True)

    async def add_transactions(self, rows: Iterable[dict[str, Any]]) -> list[Transaction]:
        created: list[Transaction] = []
        async with self._lock:
            for row in rows:
                transaction = Transaction(id=self._next_id(self.transactions), **row)
                self.transactions[transaction.id] = transaction
                created.append(transaction)
            self.save()
        return created

    async def update_transaction(self, transaction_id: int, **fields: Any) -> Transaction | None:
        async with self._lock:
            transaction = self.transactions.get(transaction_id)
            if transaction is None:
                return None
            updated = Transaction.model_validate(
                {**transaction.model_dump(), **fields, "updated_at": datetime.now()}
            )
            self.transactions[transaction_id] = updated
            self.save()
        return updated
