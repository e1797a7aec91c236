from collections.abc import Mapping
from dataclasses import dataclass

from ledger_categorizer.models import AccountType, Prediction, Transaction
from ledger_categorizer.repositories.base import AccountRepository

from .base import Classifier


@dataclass(frozen=True)
class KeywordRule:
    account_type: AccountType
    confidence: float


DEFAULT_KEYWORD_TABLE: dict[str, KeywordRule] = {
    "salary": KeywordRule("income", 0.9),
    "rent": KeywordRule("expense", 0.85),
    "interest": KeywordRule("income", 0.8),
    "payment": KeywordRule("expense", 0.7),
    "transfer": KeywordRule("asset", 0.6),
}


def rules_from_table(table: Mapping[str, tuple[str, float]]) -> dict[str, KeywordRule]:
    return {
        word: KeywordRule(account_type, confidence)  # type: ignore[arg-type]
        for word, (account_type, confidence) in table.items()
    }


def best_keyword_rule(description: str, table: Mapping[str, KeywordRule]) -> KeywordRule | None:
    """Highest-confidence rule hit by a whitespace token; ties go to the earliest token."""
    best: KeywordRule | None = None
    for word in description.lower().split():
        rule = table.get(word)
        if rule is not None and (best is None or rule.confidence > best.confidence):
            best = rule
    return best


class KeywordHeuristicClassifier(Classifier):
    source = "ai"

    def __init__(
        self,
        accounts: AccountRepository,
        keyword_table: Mapping[str, KeywordRule] | None = None,
    ):
        self.accounts = accounts
        self.keyword_table = dict(DEFAULT_KEYWORD_TABLE if keyword_table is None else keyword_table)

    async def predict(self, transaction: Transaction) -> list[Prediction]:
        rule = best_keyword_rule(transaction.description, self.keyword_table)
        if rule is None:
            return []

        account = await self.accounts.first_active_of_type(rule.account_type)
        if account is None:
            return []

        return [Prediction(
            explanation=f"AI suggested {rule.account_type} based on description",
            account_id=account.id,
            account_name=account.name,
            confidence=rule.confidence,
            source=self.source,
        )]
