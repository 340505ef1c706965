import logging

import pytest

from wealth_core.domain.models import CRYPTO_WALLETS, LedgerSnapshot, MonthlyRecord
from wealth_core.services import aggregation


def _snapshot(*records: MonthlyRecord, selected: str = "") -> LedgerSnapshot:
    return LedgerSnapshot(records=tuple(records), selected_label=selected)


def test_total_wealth_sums_buckets_and_wallets():
    record = MonthlyRecord(
        label="Jan",
        cash_balance=1000,
        brokerage_balance_a=200,
        brokerage_balance_b=300,
        index_funds_balance=400,
        other_cash_balance=50,
        crypto_holdings={"binance": 25, "kraken": 25},
    )
    assert aggregation.total_wealth(record) == 2000


def test_total_wealth_treats_missing_wallets_as_zero():
    record = MonthlyRecord(label="Jan", cash_balance=1000, crypto_holdings={"binance": 500})
    assert aggregation.total_wealth(record) == 1500


def test_total_wealth_ignores_stale_memoized_total(caplog):
    record = MonthlyRecord(label="Jan", cash_balance=100, total=999.0)
    with caplog.at_level(logging.WARNING):
        assert aggregation.total_wealth(record) == 100
        assert aggregation.total_wealth(record) == 100
    assert caplog.text == ""


def test_total_wealth_for_unknown_label_is_zero():
    snap = _snapshot(MonthlyRecord(label="Jan", cash_balance=100))
    assert aggregation.total_wealth_for(snap, "Feb") == 0
    assert aggregation.total_wealth_for(LedgerSnapshot(), "Jan") == 0


def test_lookup_is_case_insensitive():
    snap = _snapshot(MonthlyRecord(label="Jan", cash_balance=100))
    assert aggregation.total_wealth_for(snap, "jan") == 100
    assert aggregation.find_index(snap, "JAN") == 0


def test_distribution_groups_buckets_into_categories():
    record = MonthlyRecord(
        label="Jan",
        cash_balance=100,
        other_cash_balance=50,
        brokerage_balance_a=300,
        brokerage_balance_b=200,
        index_funds_balance=250,
        crypto_holdings={"binance": 60, "ledger": 40},
    )
    dist = aggregation.distribution(record)
    assert dist.cash == 150
    assert dist.interest_bearing == 500
    assert dist.index_funds == 250
    assert dist.crypto == 100
    assert dist.crypto_wallets["binance"] == 60
    assert set(dist.crypto_wallets) == set(CRYPTO_WALLETS)
    assert dist.total == aggregation.total_wealth(record)


def test_percentage_breakdown_of_selected_month():
    snap = _snapshot(
        MonthlyRecord(label="Jan", cash_balance=250, index_funds_balance=500, crypto_holdings={"kraken": 250}),
        selected="Jan",
    )
    pct = aggregation.selected_percentages(snap)
    assert pct.cash == pytest.approx(25)
    assert pct.index_funds == pytest.approx(50)
    assert pct.crypto == pytest.approx(25)
    assert pct.interest_bearing == 0
    assert pct.crypto_wallets["kraken"] == pytest.approx(25)
    assert sum(pct.as_dict().values()) == pytest.approx(100)


def test_zero_total_gives_zero_percentages():
    snap = _snapshot(MonthlyRecord(label="Jan"), selected="Jan")
    pct = aggregation.selected_percentages(snap)
    assert all(v == 0 for v in pct.as_dict().values())
    assert all(v == 0 for v in pct.crypto_wallets.values())


def test_unknown_selected_month_gives_empty_distribution():
    snap = _snapshot(MonthlyRecord(label="Jan", cash_balance=10), selected="Dec")
    dist = aggregation.selected_distribution(snap)
    assert dist.total == 0
    assert aggregation.selected_percentages(snap).cash == 0
