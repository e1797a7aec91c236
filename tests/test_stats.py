from datetime import datetime

from ledger_categorizer.models import Transaction
from ledger_categorizer.services.stats import compute_stats


def _tx(tx_id, date, **fields):
    return Transaction(id=tx_id, date=date, description=f"tx {tx_id}", amount=1.0, **fields)


def test_compute_stats():
    transactions = [
        _tx(1, datetime(2024, 1, 3), account_id=1, explanation="pay", confidence=0.9, predicted_by="pattern"),
        _tx(2, datetime(2024, 1, 9), account_id=2, explanation="rent", confidence=0.6, predicted_by="ai"),
        _tx(3, datetime(2024, 2, 1), account_id=2),
    ]

    stats = compute_stats(transactions)

    assert stats["totalTransactions"] == 3
    assert stats["analyzedTransactions"] == 2
    assert stats["predictionAccuracy"] == 33
    assert stats["monthlyVolume"] == [{"month": "2024-01", "count": 2}, {"month": "2024-02", "count": 1}]


def test_compute_stats_empty():
    assert compute_stats([]) == {
        "totalTransactions": 0,
        "analyzedTransactions": 0,
        "predictionAccuracy": 0,
        "monthlyVolume": [],
    }
