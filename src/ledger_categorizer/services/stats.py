from collections import Counter
from typing import Any

from ledger_categorizer.models import Transaction

ACCURATE_CONFIDENCE = 0.8


def compute_stats(transactions: list[Transaction]) -> dict[str, Any]:
    """
    Dashboard counters.

    ``predictionAccuracy`` is the rounded percentage of all transactions that
    were assigned from a prediction with confidence of at least 0.8.
    """
    total = len(transactions)
    analyzed = sum(1 for t in transactions if t.account_id is not None and t.explanation is not None)
    accurate = sum(
        1 for t in transactions
        if t.predicted_by is not None and t.confidence is not None and t.confidence >= ACCURATE_CONFIDENCE
    )
    accuracy = round(accurate / total * 100) if total else 0

    monthly = Counter(t.date.strftime("%Y-%m") for t in transactions)
    return {
        "totalTransactions": total,
        "analyzedTransactions": analyzed,
        "predictionAccuracy": accuracy,
        "monthlyVolume": [{"month": month, "count": monthly[month]} for month in sorted(monthly)],
    }
