import asyncio

import pytest
from conftest import make_history, make_pattern, make_transaction

from ledger_categorizer.classifiers.base import Classifier
from ledger_categorizer.errors import PredictionUnavailableError
from ledger_categorizer.manager import PredictionEngine
from ledger_categorizer.models import Prediction
from ledger_categorizer.repositories.store import LedgerStore


class StaticClassifier(Classifier):
    def __init__(self, source, confidences=(), error=None):
        self.source = source
        self.confidences = confidences
        self.error = error

    async def predict(self, transaction):
        if self.error:
            raise self.error
        return [
            Prediction(
                explanation=f"{self.source}-{i}",
                account_id=i,
                account_name=f"Account {i}",
                confidence=confidence,
                source=self.source,
            )
            for i, confidence in enumerate(self.confidences, start=1)
        ]


class BrokenPatternStore(LedgerStore):
    async def list_enabled(self):
        raise RuntimeError("pattern table unavailable")


@pytest.mark.anyio
async def test_salary_deposit_combines_pattern_and_heuristic(store):
    store.patterns = {1: make_pattern(1, "salary", "keyword", account_id=1, weight=0.9)}
    engine = PredictionEngine.build(store, store, store)

    res = await engine.predict(make_transaction("MONTHLY SALARY DEPOSIT"))

    assert [p.source for p in res] == ["ai", "pattern"]
    assert res[0].confidence == pytest.approx(0.9)
    assert res[1].confidence == pytest.approx(0.81)
    # No de-duplication: both point at the same account.
    assert {p.account_id for p in res} == {1}


@pytest.mark.anyio
async def test_no_matches_returns_empty_list(store):
    store.patterns = {1: make_pattern(1, "salary", "keyword")}
    store.history = {1: make_history(1, "COFFEE")}
    engine = PredictionEngine.build(store, store, store)

    assert await engine.predict(make_transaction("XYZ RANDOM TEXT 123")) == []


@pytest.mark.anyio
async def test_failing_source_does_not_affect_others(store):
    broken = BrokenPatternStore()
    broken.accounts = store.accounts
    store.history = {1: make_history(1, "MONTHLY SALARY DEPOSIT", account_id=1, frequency=2)}
    engine = PredictionEngine.build(patterns=broken, history=store, accounts=store)

    res = await engine.predict(make_transaction("MONTHLY SALARY DEPOSIT"))

    assert [p.source for p in res] == ["ai", "database"]
    assert res[1].confidence == pytest.approx(0.7)


@pytest.mark.anyio
async def test_all_sources_failing_raises():
    engine = PredictionEngine([
        StaticClassifier("pattern", error=RuntimeError("down")),
        StaticClassifier("database", error=RuntimeError("down")),
        StaticClassifier("ai", error=ValueError("down")),
    ])

    with pytest.raises(PredictionUnavailableError) as excinfo:
        await engine.predict(make_transaction("anything"))
    assert isinstance(excinfo.value.__cause__, RuntimeError)


@pytest.mark.anyio
async def test_output_is_bounded_to_five():
    engine = PredictionEngine([
        StaticClassifier("pattern", [0.9, 0.8, 0.7]),
        StaticClassifier("database", [0.85, 0.75, 0.65]),
        StaticClassifier("ai", [0.95]),
    ])

    res = await engine.predict(make_transaction("anything"))

    assert len(res) == 5
    assert [p.confidence for p in res] == [0.95, 0.9, 0.85, 0.8, 0.75]


@pytest.mark.anyio
async def test_ties_follow_source_order_then_source_rank():
    engine = PredictionEngine([
        StaticClassifier("pattern", [0.7, 0.7]),
        StaticClassifier("database", [0.7]),
        StaticClassifier("ai", [0.7]),
    ])

    res = await engine.predict(make_transaction("anything"))

    assert [(p.source, p.explanation) for p in res] == [
        ("pattern", "pattern-1"),
        ("pattern", "pattern-2"),
        ("database", "database-1"),
        ("ai", "ai-1"),
    ]


@pytest.mark.anyio
async def test_sources_run_concurrently():
    started = asyncio.Event()

    class Waiter(StaticClassifier):
        async def predict(self, transaction):
            await started.wait()
            return await super().predict(transaction)

    class Starter(StaticClassifier):
        async def predict(self, transaction):
            started.set()
            return await super().predict(transaction)

    # Waiter runs first; awaiting the sources one by one would never finish.
    engine = PredictionEngine([Waiter("pattern", [0.6]), Starter("database", [0.5])])

    res = await asyncio.wait_for(engine.predict(make_transaction("anything")), timeout=1)

    assert [p.source for p in res] == ["pattern", "database"]
