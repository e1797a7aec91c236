import asyncio
import logging
from collections.abc import Mapping
from time import perf_counter

from ledger_categorizer.classifiers.base import Classifier
from ledger_categorizer.classifiers.heuristic import KeywordHeuristicClassifier, KeywordRule
from ledger_categorizer.classifiers.history import HistoricalMatcher
from ledger_categorizer.classifiers.pattern import PatternMatcher
from ledger_categorizer.errors import PredictionUnavailableError
from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Prediction, Transaction
from ledger_categorizer.repositories.base import (
    AccountRepository,
    HistoricalMatchRepository,
    PatternRepository,
)

logger = get_logger(__name__)

DEFAULT_PREDICTION_LIMIT = 5


class PredictionEngine:
    def __init__(
        self,
        classifiers: list[Classifier],
        limit: int = DEFAULT_PREDICTION_LIMIT,
    ):
        # Order matters: it is the tie-break between sources.
        self.classifiers = classifiers
        self.limit = limit

    @classmethod
    def build(
        cls,
        patterns: PatternRepository,
        history: HistoricalMatchRepository,
        accounts: AccountRepository,
        keyword_table: Mapping[str, KeywordRule] | None = None,
        limit: int = DEFAULT_PREDICTION_LIMIT,
    ) -> "PredictionEngine":
        return cls(
            [
                PatternMatcher(patterns, accounts),
                HistoricalMatcher(history, accounts),
                KeywordHeuristicClassifier(accounts, keyword_table),
            ],
            limit=limit,
        )

    async def predict(self, transaction: Transaction) -> list[Prediction]:
        """
        Run every classifier concurrently and merge their suggestions.

        A classifier that raises contributes nothing. If all of them raise,
        PredictionUnavailableError is raised from the first failure.
        """
        started = perf_counter()
        results = await asyncio.gather(
            *(classifier.predict(transaction) for classifier in self.classifiers),
            return_exceptions=True,
        )

        merged: list[Prediction] = []
        failures: list[Exception] = []
        for classifier, result in zip(self.classifiers, results):
            name = classifier.__class__.__name__
            if isinstance(result, Exception):
                failures.append(result)
                logger.warning(
                    "[PREDICT] %s failed for transaction %s: %s",
                    name,
                    transaction.id,
                    result,
                    exc_info=result if logger.isEnabledFor(logging.DEBUG) else None,
                )
                continue
            if isinstance(result, BaseException):
                raise result
            logger.debug("[PREDICT] %s returned %d suggestion(s).", name, len(result))
            merged.extend(result)

        if self.classifiers and len(failures) == len(self.classifiers):
            raise PredictionUnavailableError(
                f"All prediction sources failed for transaction {transaction.id}"
            ) from failures[0]

        # Stable sort: ties keep classifier order, then each classifier's own order.
        ranked = sorted(merged, key=lambda p: p.confidence, reverse=True)[:self.limit]
        logger.debug(
            "[PREDICT] Transaction %s: %d suggestion(s) in %.1f ms.",
            transaction.id,
            len(ranked),
            (perf_counter() - started) * 1000,
        )
        return ranked
