from __future__ import annotations

import dataclasses
import re
from typing import Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from wealth_core.domain.models import (
    MONTH_NAMES,
    EvolutionPoint,
    LedgerSnapshot,
    MonthComparison,
    MonthlyRecord,
    MonthSummary,
)
from wealth_core.services.aggregation import (
    distribution,
    find_index,
    find_record,
    total_wealth,
)

_ISO_PREFIX = re.compile(r"^\d{4}-\d{1,2}")


def month_over_month_return(snapshot: LedgerSnapshot, label: str) -> float:
    """
    Percentage change of total wealth against the preceding record in ledger order,
    rounded to 2 decimals. First record, unknown label and a zero previous total give 0.
    """
    idx = find_index(snapshot, label)
    if idx is None or idx == 0:
        return 0.0
    current = total_wealth(snapshot.records[idx])
    previous = total_wealth(snapshot.records[idx - 1])
    if previous == 0:
        return 0.0
    return round((current - previous) / previous * 100, 2)


def annualized_return(snapshot: LedgerSnapshot) -> float:
    """
    Compound growth between the first and last nonzero-total records, projected
    to 12 months. Records are treated as monthly-spaced by ledger position.
    The result is unrounded; callers round for display.
    """
    nonzero = [i for i, r in enumerate(snapshot.records) if total_wealth(r) != 0]
    if len(nonzero) < 2:
        return 0.0
    first, last = nonzero[0], nonzero[-1]
    months = last - first
    if months <= 0:
        return 0.0
    ratio = total_wealth(snapshot.records[last]) / total_wealth(snapshot.records[first])
    if ratio <= 0:
        # sign change between endpoints has no real-valued compound rate
        return 0.0
    return float(np.power(ratio, 12 / months) - 1) * 100


def month_summary(snapshot: LedgerSnapshot, label: Optional[str] = None) -> MonthSummary:
    label = snapshot.selected_label if label is None else label
    record = find_record(snapshot, label)
    if record is None:
        return MonthSummary(label=label)
    return MonthSummary(
        label=record.label,
        total=total_wealth(record),
        income=record.income,
        expenses=record.expenses,
        savings=record.net_savings,
        return_pct=month_over_month_return(snapshot, label),
    )


def selected_summary(snapshot: LedgerSnapshot) -> MonthSummary:
    return month_summary(snapshot, snapshot.selected_label)


def compare_months(snapshot: LedgerSnapshot, first: str, second: str) -> Optional[MonthComparison]:
    a = find_record(snapshot, first)
    b = find_record(snapshot, second)
    if a is None or b is None:
        return None
    total_a, total_b = total_wealth(a), total_wealth(b)
    pct = (total_b - total_a) / total_a * 100 if total_a != 0 else 0.0
    return MonthComparison(
        first=a.label,
        second=b.label,
        income_change=b.income - a.income,
        total_change=total_b - total_a,
        pct_change=round(pct, 2),
    )


def parse_label(label: str) -> Optional[Tuple[int, int]]:
    """
    (year, month) for ISO dates ("2024-03", "2024-03-01") and "Mar 2024" style labels,
    (0, month) for bare month names, None when the label is not recognisable.
    """
    text = (label or "").strip()
    if not text:
        return None
    if _ISO_PREFIX.match(text) or any(ch.isdigit() for ch in text):
        ts = pd.to_datetime(text, errors="coerce")
        if not pd.isna(ts):
            return ts.year, ts.month
        return None
    key = text.casefold()
    for idx, name in enumerate(MONTH_NAMES, start=1):
        if key == name.casefold() or (len(key) >= 3 and name.casefold().startswith(key)):
            return 0, idx
    return None


def _sort_key(position: int, record: MonthlyRecord) -> Tuple[int, int, int, int]:
    parsed = parse_label(record.label)
    if parsed is None:
        return (1, 0, 0, position)
    return (0, parsed[0], parsed[1], position)


def chronological_records(snapshot: LedgerSnapshot, window: Optional[int] = None) -> List[MonthlyRecord]:
    ordered = [r for _, r in sorted(enumerate(snapshot.records), key=lambda pair: _sort_key(*pair))]
    if window is not None and window > 0:
        ordered = ordered[-window:]
    return ordered


class EvolutionSeries:
    """
    Chronological (label, total) points over the ledger or its trailing ``window``
    months. Iterating again starts over from the snapshot it was built on.
    """

    def __init__(self, snapshot: LedgerSnapshot, window: Optional[int] = None):
        self.snapshot = snapshot
        self.window = window

    def __iter__(self) -> Iterator[EvolutionPoint]:
        for record in chronological_records(self.snapshot, self.window):
            yield EvolutionPoint(label=record.label, total=total_wealth(record))

    def labels(self) -> List[str]:
        return [p.label for p in self]

    def values(self) -> List[float]:
        return [p.total for p in self]


def evolution_series(snapshot: LedgerSnapshot, window: Optional[int] = None) -> EvolutionSeries:
    return EvolutionSeries(snapshot, window)


def annotate_history(snapshot: LedgerSnapshot) -> Tuple[MonthlyRecord, ...]:
    """Records with their memoized total, distribution and return filled in."""
    annotated = []
    for record in snapshot.records:
        bare = dataclasses.replace(record, total=None)
        annotated.append(
            dataclasses.replace(
                bare,
                total=total_wealth(bare),
                distribution_snapshot=distribution(bare).as_dict(),
                return_pct=month_over_month_return(snapshot, record.label),
            )
        )
    return tuple(annotated)
