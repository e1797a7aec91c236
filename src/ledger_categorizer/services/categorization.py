from typing import Any

from ledger_categorizer.errors import NotFoundError
from ledger_categorizer.logger import get_logger
from ledger_categorizer.manager import PredictionEngine
from ledger_categorizer.models import Prediction, Transaction
from ledger_categorizer.repositories.base import (
    AccountRepository,
    HistoricalMatchRepository,
    TransactionRepository,
)

logger = get_logger(__name__)


class CategorizationPipeline:
    def __init__(
        self,
        engine: PredictionEngine,
        transactions: TransactionRepository,
        history: HistoricalMatchRepository,
        accounts: AccountRepository,
    ) -> None:
        self.engine = engine
        self.transactions = transactions
        self.history = history
        self.accounts = accounts

    async def get_transaction(self, transaction_id: int) -> Transaction:
        transaction = await self.transactions.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    async def predict_for_id(self, transaction_id: int) -> list[Prediction]:
        transaction = await self.get_transaction(transaction_id)
        logger.debug("[PREDICT] Starting categorization for transaction ID: %s", transaction_id)
        return await self.engine.predict(transaction)

    async def assign(self, transaction_id: int, **changes: Any) -> Transaction:
        """
        Apply user changes to a transaction.

        When the result carries both an account and an explanation, the
        description/account pair is recorded as a historical match.
        """
        await self.get_transaction(transaction_id)

        account_id = changes.get("account_id")
        if account_id is not None and await self.accounts.get_account(account_id) is None:
            raise NotFoundError("Account", account_id)

        updated = await self.transactions.update_transaction(transaction_id, **changes)
        if updated is None:
            raise NotFoundError("Transaction", transaction_id)

        explanation = changes.get("explanation")
        if explanation and updated.account_id is not None and updated.description:
            record = await self.history.record_usage(
                updated.description,
                updated.account_id,
                explanation,
            )
            logger.info(
                "[ASSIGN] Transaction %s -> account %s (history frequency %d).",
                transaction_id,
                updated.account_id,
                record.frequency,
            )
        return updated

    async def accept(self, transaction_id: int, prediction: Prediction) -> Transaction:
        return await self.assign(
            transaction_id,
            account_id=prediction.account_id,
            explanation=prediction.explanation or None,
            confidence=prediction.confidence,
            predicted_by=prediction.source,
        )
