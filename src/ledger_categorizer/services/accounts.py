from typing import Any

from ledger_categorizer.domain.accounts import AccountNode, build_hierarchy, creates_cycle
from ledger_categorizer.errors import ConflictError, NotFoundError, ValidationError
from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Account
from ledger_categorizer.repositories.base import AccountRepository, TransactionRepository

logger = get_logger(__name__)


class AccountService:
    def __init__(self, accounts: AccountRepository, transactions: TransactionRepository) -> None:
        self.accounts = accounts
        self.transactions = transactions

    async def hierarchy(self) -> list[AccountNode]:
        return build_hierarchy(await self.accounts.list_accounts(active_only=True))

    async def create(self, **fields: Any) -> Account:
        parent_id = fields.get("parent_id")
        if parent_id is not None and await self.accounts.get_account(parent_id) is None:
            raise NotFoundError("Parent account", parent_id)
        if await self.accounts.get_account_by_code(fields["code"]) is not None:
            raise ConflictError(f"Account code {fields['code']} already exists")

        account = await self.accounts.add_account(**fields)
        logger.info("[ACCOUNTS] Created %s %s (%s).", account.code, account.name, account.type)
        return account

    async def update(self, account_id: int, **fields: Any) -> Account:
        existing = await self.accounts.get_account(account_id)
        if existing is None:
            raise NotFoundError("Account", account_id)

        code = fields.get("code")
        if code and code != existing.code and await self.accounts.get_account_by_code(code) is not None:
            raise ConflictError(f"Account code {code} already exists")

        if "parent_id" in fields and fields["parent_id"] is not None:
            parent_id = fields["parent_id"]
            if await self.accounts.get_account(parent_id) is None:
                raise NotFoundError("Parent account", parent_id)
            parents = {a.id: a.parent_id for a in await self.accounts.list_accounts()}
            if creates_cycle(account_id, parent_id, parents):
                raise ValidationError(f"Account {parent_id} cannot be the parent of account {account_id}")

        updated = await self.accounts.update_account(account_id, **fields)
        if updated is None:
            raise NotFoundError("Account", account_id)
        return updated

    async def deactivate(self, account_id: int) -> Account:
        """
        Soft delete: the account stays in the store with ``active=False`` and
        stops resolving for predictions. Accounts that still have active
        children or linked transactions are refused.
        """
        if await self.accounts.get_account(account_id) is None:
            raise NotFoundError("Account", account_id)

        children = [a for a in await self.accounts.list_accounts(active_only=True) if a.parent_id == account_id]
        if children:
            raise ConflictError(f"Account {account_id} has child accounts")
        if any(t.account_id == account_id for t in await self.transactions.list_transactions()):
            raise ConflictError(f"Account {account_id} has linked transactions")

        updated = await self.accounts.update_account(account_id, active=False)
        if updated is None:
            raise NotFoundError("Account", account_id)
        logger.info("[ACCOUNTS] Deactivated %s %s.", updated.code, updated.name)
        return updated
