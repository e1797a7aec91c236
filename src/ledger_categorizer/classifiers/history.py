from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import HistoricalMatch, Prediction, Transaction
from ledger_categorizer.repositories.base import AccountRepository, HistoricalMatchRepository

from .base import Classifier

logger = get_logger(__name__)

BASE_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.9
FREQUENCY_SCALE = 10.0
DEFAULT_LIMIT = 3


def frequency_confidence(frequency: int) -> float:
    """0.6 for a single use, +0.1 per extra use, capped at 0.9."""
    return min(MAX_CONFIDENCE, BASE_CONFIDENCE + frequency / FREQUENCY_SCALE)


def rank_key(record: HistoricalMatch) -> tuple[int, float, int]:
    # Negated so an ascending sort gives frequency desc, last_used desc, id asc.
    return (-record.frequency, -record.last_used.timestamp(), record.id)


class HistoricalMatcher(Classifier):
    """
    Reuses accounts chosen for earlier transactions with overlapping
    descriptions. More frequent and more recent choices rank first.
    """
    source = "database"

    def __init__(
        self,
        history: HistoricalMatchRepository,
        accounts: AccountRepository,
        limit: int = DEFAULT_LIMIT,
    ):
        self.history = history
        self.accounts = accounts
        self.limit = limit

    async def predict(self, transaction: Transaction) -> list[Prediction]:
        candidates = await self.history.find_overlapping(transaction.description)
        if not candidates:
            return []

        top = sorted(candidates, key=rank_key)[:self.limit]
        accounts = await self.accounts.get_active_by_ids({r.account_id for r in top})

        predictions: list[Prediction] = []
        for record in top:
            account = accounts.get(record.account_id)
            if account is None:
                logger.debug(
                    "[PREDICT] Historical match %s points at missing account %s, skipped.",
                    record.id,
                    record.account_id,
                )
                continue
            predictions.append(Prediction(
                explanation=record.explanation,
                account_id=account.id,
                account_name=account.name,
                confidence=frequency_confidence(record.frequency),
                source=self.source,
            ))
        return predictions
