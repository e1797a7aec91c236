from datetime import datetime

import pytest

from ledger_categorizer.errors import NotFoundError
from ledger_categorizer.manager import PredictionEngine
from ledger_categorizer.services.categorization import CategorizationPipeline


@pytest.fixture
def pipeline(store):
    engine = PredictionEngine.build(store, store, store)
    return CategorizationPipeline(engine, store, store, store)


@pytest.mark.anyio
async def test_predict_for_missing_transaction(pipeline):
    with pytest.raises(NotFoundError):
        await pipeline.predict_for_id(1)


@pytest.mark.anyio
async def test_accepting_a_prediction_updates_transaction_and_history(pipeline, store):
    [transaction] = await store.add_transactions([
        {"date": datetime(2024, 5, 1), "description": "FLAT RENT MAY", "amount": -950.0},
    ])

    [prediction] = await pipeline.predict_for_id(transaction.id)
    updated = await pipeline.accept(transaction.id, prediction)

    assert updated.account_id == 2
    assert updated.predicted_by == "ai"
    assert updated.confidence == pytest.approx(0.85)
    assert updated.explanation == "AI suggested expense based on description"
    [record] = await store.find_overlapping("FLAT RENT MAY")
    assert record.account_id == 2
    assert record.frequency == 1


@pytest.mark.anyio
async def test_assign_without_explanation_skips_history(pipeline, store):
    [transaction] = await store.add_transactions([
        {"date": datetime(2024, 5, 1), "description": "ATM", "amount": -20.0},
    ])

    updated = await pipeline.assign(transaction.id, account_id=4)

    assert updated.account_id == 4
    assert store.history == {}
