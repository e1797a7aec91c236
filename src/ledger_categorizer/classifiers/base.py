from abc import ABC, abstractmethod

from ledger_categorizer.models import Prediction, PredictionSource, Transaction


class Classifier(ABC):
    source: PredictionSource

    @abstractmethod
    async def predict(self, transaction: Transaction) -> list[Prediction]:
        """Return this source's suggestions for the transaction, best first."""
        pass
