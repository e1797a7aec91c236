import pytest
from conftest import make_pattern, make_transaction

from ledger_categorizer.classifiers.pattern import PatternMatcher, match_score


def _matcher(store, patterns):
    store.patterns = {p.id: p for p in patterns}
    return PatternMatcher(store, store)


@pytest.mark.anyio
async def test_exact_match_uses_full_weight(store):
    matcher = _matcher(store, [make_pattern(1, "RENT PAYMENT", "exact", account_id=2, weight=0.95)])

    res = await matcher.predict(make_transaction("RENT PAYMENT"))

    assert len(res) == 1
    assert res[0].confidence == pytest.approx(0.95)
    assert res[0].account_id == 2
    assert res[0].account_name == "Rent Expense"
    assert res[0].source == "pattern"


@pytest.mark.anyio
async def test_exact_match_is_case_sensitive(store):
    matcher = _matcher(store, [make_pattern(1, "rent payment", "exact", account_id=2)])

    assert await matcher.predict(make_transaction("RENT PAYMENT")) == []


@pytest.mark.anyio
async def test_keyword_match_scales_weight(store):
    matcher = _matcher(store, [
        make_pattern(1, "salary", "keyword", account_id=1, weight=0.9, explanation="Monthly pay"),
    ])

    res = await matcher.predict(make_transaction("MONTHLY SALARY DEPOSIT"))

    assert len(res) == 1
    assert res[0].confidence == pytest.approx(0.81)
    assert res[0].explanation == "Monthly pay"


@pytest.mark.anyio
async def test_fuzzy_match_uses_similarity(store):
    matcher = _matcher(store, [make_pattern(1, "NETFLIX.COM", "fuzzy", account_id=2)])

    res = await matcher.predict(make_transaction("NETFLIX COM"))

    assert len(res) == 1
    assert res[0].confidence == pytest.approx(1 - 1 / 11)


@pytest.mark.anyio
async def test_weak_raw_scores_are_dropped(store):
    matcher = _matcher(store, [make_pattern(1, "abc", "fuzzy"), make_pattern(2, "grocer", "keyword")])

    assert await matcher.predict(make_transaction("MONTHLY SALARY")) == []


@pytest.mark.anyio
async def test_threshold_applies_to_raw_score_not_weighted(store):
    matcher = _matcher(store, [make_pattern(1, "salary", "keyword", weight=0.3)])

    res = await matcher.predict(make_transaction("SALARY"))

    assert len(res) == 1
    assert res[0].confidence == pytest.approx(0.27)


@pytest.mark.anyio
async def test_disabled_and_unresolvable_patterns_are_skipped(store):
    matcher = _matcher(store, [
        make_pattern(1, "rent", "keyword", account_id=2, enabled=False),
        make_pattern(2, "rent", "keyword", account_id=5),  # inactive account
        make_pattern(3, "rent", "keyword", account_id=99),  # missing account
        make_pattern(4, "rent", "keyword", account_id=2, weight=0.5),
    ])

    res = await matcher.predict(make_transaction("RENT MARCH"))

    assert [p.account_id for p in res] == [2]
    assert res[0].confidence == pytest.approx(0.45)


@pytest.mark.anyio
async def test_returns_at_most_three_sorted(store):
    matcher = _matcher(store, [
        make_pattern(i, "rent", "keyword", account_id=2, weight=w)
        for i, w in enumerate([0.2, 0.9, 0.5, 1.0, 0.7], start=1)
    ])

    res = await matcher.predict(make_transaction("rent"))

    assert len(res) == 3
    assert [p.confidence for p in res] == pytest.approx([0.9, 0.81, 0.63])


@pytest.mark.anyio
async def test_equal_confidence_keeps_pattern_id_order(store):
    matcher = _matcher(store, [
        make_pattern(2, "interest", "keyword", account_id=3),
        make_pattern(1, "interest", "keyword", account_id=1),
    ])

    res = await matcher.predict(make_transaction("INTEREST PAID"))

    assert [p.account_id for p in res] == [1, 3]


def test_exact_match_dominates_other_modes():
    description = "RENT PAYMENT"
    exact = match_score(make_pattern(1, description, "exact"), description)
    fuzzy = match_score(make_pattern(2, description, "fuzzy"), description)
    keyword = match_score(make_pattern(3, description, "keyword"), description)

    assert exact == 1.0
    assert exact >= fuzzy
    assert exact >= keyword
