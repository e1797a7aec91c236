from __future__ import annotations

from dataclasses import dataclass, field

from ledger_categorizer.models import Account


@dataclass
class AccountNode:
    account: Account
    children: list[AccountNode] = field(default_factory=list)

    def to_payload(self) -> dict:
        payload = self.account.model_dump(by_alias=True)
        payload["children"] = [child.to_payload() for child in self.children]
        return payload


def build_hierarchy(accounts: list[Account]) -> list[AccountNode]:
    """
    Nest accounts under their parents, keeping input order among siblings.

    Accounts whose parent is not in the list become roots.
    """
    nodes = {account.id: AccountNode(account) for account in accounts}
    roots: list[AccountNode] = []
    for account in accounts:
        node = nodes[account.id]
        parent = nodes.get(account.parent_id) if account.parent_id is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots


def creates_cycle(account_id: int, new_parent_id: int | None, parents: dict[int, int | None]) -> bool:
    """True if making ``new_parent_id`` the parent of ``account_id`` closes a loop."""
    seen: set[int] = set()
    current = new_parent_id
    while current is not None:
        if current == account_id or current in seen:
            return True
        seen.add(current)
        current = parents.get(current)
    return False
