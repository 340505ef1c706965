from __future__ import annotations

import math
from typing import Optional

from wealth_core.domain.models import (
    ASSET_BUCKETS,
    CRYPTO_WALLETS,
    Distribution,
    LedgerSnapshot,
    MonthlyRecord,
    PercentageBreakdown,
)


def normalize_label(label: str) -> str:
    return label.strip().casefold()


def find_index(snapshot: LedgerSnapshot, label: str) -> Optional[int]:
    if not label:
        return None
    key = normalize_label(label)
    for idx, record in enumerate(snapshot.records):
        if normalize_label(record.label) == key:
            return idx
    return None


def find_record(snapshot: LedgerSnapshot, label: str) -> Optional[MonthlyRecord]:
    idx = find_index(snapshot, label)
    return snapshot.records[idx] if idx is not None else None


def _bucket(record: MonthlyRecord, name: str) -> float:
    return float(getattr(record, name, 0.0) or 0.0)


def crypto_total(record: MonthlyRecord) -> float:
    wallets = set(CRYPTO_WALLETS) | set(record.crypto_holdings)
    return math.fsum(record.wallet(w) for w in wallets)


def total_wealth(record: Optional[MonthlyRecord]) -> float:
    """
    Named buckets plus every crypto wallet; a missing record is worth 0.
    Any memoized ``total`` on the record is ignored.
    """
    if record is None:
        return 0.0
    return math.fsum([_bucket(record, b) for b in ASSET_BUCKETS] + [crypto_total(record)])


def total_wealth_for(snapshot: LedgerSnapshot, label: str) -> float:
    return total_wealth(find_record(snapshot, label))


def distribution(record: Optional[MonthlyRecord]) -> Distribution:
    if record is None:
        return Distribution(crypto_wallets={w: 0.0 for w in CRYPTO_WALLETS})
    wallets = {w: record.wallet(w) for w in CRYPTO_WALLETS}
    for extra in record.crypto_holdings:
        wallets.setdefault(extra, record.wallet(extra))
    return Distribution(
        cash=_bucket(record, "cash_balance") + _bucket(record, "other_cash_balance"),
        interest_bearing=_bucket(record, "brokerage_balance_a") + _bucket(record, "brokerage_balance_b"),
        crypto=math.fsum(wallets.values()),
        index_funds=_bucket(record, "index_funds_balance"),
        crypto_wallets=wallets,
    )


def selected_distribution(snapshot: LedgerSnapshot) -> Distribution:
    return distribution(find_record(snapshot, snapshot.selected_label))


def _pct(part: float, total: float) -> float:
    return part / total * 100 if total != 0 else 0.0


def percentage_breakdown(dist: Distribution) -> PercentageBreakdown:
    """
    Each category as a share of the distribution total, x100.
    A zero total yields all-zero percentages.
    """
    total = dist.total
    return PercentageBreakdown(
        cash=_pct(dist.cash, total),
        interest_bearing=_pct(dist.interest_bearing, total),
        crypto=_pct(dist.crypto, total),
        index_funds=_pct(dist.index_funds, total),
        crypto_wallets={w: _pct(v, total) for w, v in dist.crypto_wallets.items()},
    )


def selected_percentages(snapshot: LedgerSnapshot) -> PercentageBreakdown:
    return percentage_breakdown(selected_distribution(snapshot))

