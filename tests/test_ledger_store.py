import datetime as dt
import logging

import pytest

from wealth_core.domain.models import AllocationTargets, MonthlyRecord
from wealth_core.services.aggregation import find_record, total_wealth_for
from wealth_core.services.ledger_store import LedgerStore, current_month_label


def test_default_selection_is_current_month_name():
    assert current_month_label(dt.date(2024, 2, 10)) == "February"
    assert LedgerStore().selected_label == current_month_label()


def test_upsert_appends_new_and_replaces_in_place():
    store = LedgerStore(selected_label="Jan")
    store.upsert_month(MonthlyRecord(label="Jan", cash_balance=1))
    store.upsert_month(MonthlyRecord(label="Feb", cash_balance=2))
    store.upsert_month(MonthlyRecord(label="Jan", cash_balance=10))
    assert [(r.label, r.cash_balance) for r in store.records] == [("Jan", 10), ("Feb", 2)]


def test_upsert_does_not_resort_by_calendar():
    store = LedgerStore()
    store.upsert_month(MonthlyRecord(label="Mar"))
    store.upsert_month(MonthlyRecord(label="Jan"))
    assert [r.label for r in store.records] == ["Mar", "Jan"]


def test_case_collision_is_flagged_not_overwritten(caplog):
    store = LedgerStore()
    store.upsert_month(MonthlyRecord(label="Jan", cash_balance=1))
    with caplog.at_level(logging.WARNING):
        store.upsert_month(MonthlyRecord(label="JAN", cash_balance=2))
    assert "collides" in caplog.text
    assert len(store.records) == 2
    assert store.find("jan").cash_balance == 1


def test_set_targets_replaces_wholesale():
    store = LedgerStore(targets=AllocationTargets(cash=10, crypto=5))
    store.set_targets(AllocationTargets(index_funds=60))
    assert store.targets == AllocationTargets(index_funds=60)


def test_select_month_ignores_empty_label_and_accepts_unknown():
    store = LedgerStore(selected_label="Jan")
    store.select_month("")
    assert store.selected_label == "Jan"
    store.select_month("Nowhere")
    assert store.selected_label == "Nowhere"


def test_snapshot_is_detached_from_later_mutations():
    store = LedgerStore(selected_label="Jan")
    store.upsert_month(MonthlyRecord(label="Jan"))
    snap = store.snapshot()
    store.upsert_month(MonthlyRecord(label="Feb"))
    assert [r.label for r in snap.records] == ["Jan"]
    assert store.snapshot().version == snap.version + 1


def test_snapshot_records_cannot_rewrite_store():
    store = LedgerStore(selected_label="Jan")
    store.upsert_month(
        MonthlyRecord(label="Jan", cash_balance=100, distribution_snapshot={"cash": 100.0})
    )
    snap = store.snapshot()
    with pytest.raises(TypeError):
        snap.records[0].crypto_holdings["binance"] = 1e6
    with pytest.raises(TypeError):
        snap.records[0].distribution_snapshot["cash"] = 0.0
    assert total_wealth_for(store.snapshot(), "Jan") == 100
    assert store.find("Jan").distribution_snapshot == {"cash": 100.0}


def test_record_copies_caller_wallets():
    wallets = {"binance": 50.0}
    record = MonthlyRecord(label="Jan", crypto_holdings=wallets)
    wallets["binance"] = 1e6
    assert record.wallet("binance") == 50.0


def test_find_matches_snapshot_lookup():
    store = LedgerStore()
    store.upsert_month(MonthlyRecord(label="March", cash_balance=3))
    store.upsert_month(MonthlyRecord(label="MARCH", cash_balance=4))
    for label in ("march", " March ", "MARCH", "April", ""):
        assert store.find(label) is find_record(store.snapshot(), label)


def test_subscribers_receive_each_mutation():
    store = LedgerStore(selected_label="Jan")
    seen = []
    unsubscribe = store.subscribe(lambda snap: seen.append(snap.version))
    store.upsert_month(MonthlyRecord(label="Jan"))
    store.set_targets(AllocationTargets(cash=100))
    store.select_month("Jan")
    unsubscribe()
    store.select_month("Feb")
    assert seen == [1, 2, 3]
