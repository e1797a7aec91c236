from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Pattern, Prediction, Transaction
from ledger_categorizer.repositories.base import AccountRepository, PatternRepository

from .base import Classifier
from .similarity import similarity

logger = get_logger(__name__)

KEYWORD_SCORE = 0.9
MIN_MATCH_SCORE = 0.5
DEFAULT_LIMIT = 3


def match_score(pattern: Pattern, description: str) -> float:
    """Raw score of a single pattern against a description, before weighting."""
    if pattern.type == "exact":
        return 1.0 if pattern.pattern == description else 0.0
    if pattern.type == "fuzzy":
        return similarity(pattern.pattern, description)
    if pattern.type == "keyword":
        return KEYWORD_SCORE if pattern.pattern.lower() in description.lower() else 0.0
    raise ValueError(f"Unknown match mode {pattern.type!r} on pattern {pattern.id}")


class PatternMatcher(Classifier):
    source = "pattern"

    def __init__(
        self,
        patterns: PatternRepository,
        accounts: AccountRepository,
        limit: int = DEFAULT_LIMIT,
        min_score: float = MIN_MATCH_SCORE,
    ):
        self.patterns = patterns
        self.accounts = accounts
        self.limit = limit
        self.min_score = min_score

    async def predict(self, transaction: Transaction) -> list[Prediction]:
        scored: list[tuple[Pattern, float]] = []
        for pattern in await self.patterns.list_enabled():
            score = match_score(pattern, transaction.description)
            if score >= self.min_score:
                scored.append((pattern, score))

        if not scored:
            return []

        accounts = await self.accounts.get_active_by_ids({p.account_id for p, _ in scored})

        predictions: list[Prediction] = []
        for pattern, score in scored:
            account = accounts.get(pattern.account_id)
            if account is None:
                logger.debug(
                    "[PREDICT] Pattern %s points at missing account %s, skipped.",
                    pattern.id,
                    pattern.account_id,
                )
                continue
            predictions.append(Prediction(
                explanation=pattern.explanation or "",
                account_id=account.id,
                account_name=account.name,
                confidence=pattern.confidence * score,
                source=self.source,
            ))

        # sorted() is stable, so equal confidences keep pattern id order.
        predictions = sorted(predictions, key=lambda p: p.confidence, reverse=True)
        return predictions[:self.limit]
