from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from wealth_core.domain.models import CATEGORIES, LedgerSnapshot
from wealth_core.services.aggregation import distribution, total_wealth
from wealth_core.services.returns import chronological_records

EXPORT_COLUMNS = [
    "month",
    "total",
    "change",
    "growth_pct",
    *CATEGORIES,
    "income",
    "expenses",
    "net_savings",
]


def export_table(snapshot: LedgerSnapshot, window: Optional[int] = None) -> pd.DataFrame:
    """
    One row per month in chronological order. ``change`` and ``growth_pct`` compare
    each row with the row before it. The first row gets 0 for both; a zero previous
    total gives growth 0 but keeps the change.
    """
    rows = []
    previous: Optional[float] = None
    for record in chronological_records(snapshot, window):
        total = total_wealth(record)
        change = total - previous if previous is not None else 0.0
        growth = change / previous * 100 if previous else 0.0
        row = {
            "month": record.label,
            "total": total,
            "change": change,
            "growth_pct": growth,
            "income": record.income,
            "expenses": record.expenses,
            "net_savings": record.net_savings,
        }
        row.update(distribution(record).as_dict())
        rows.append(row)
        previous = total
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_csv(snapshot: LedgerSnapshot, csv_path: str | Path, window: Optional[int] = None) -> Path:
    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    export_table(snapshot, window).to_csv(path, index=False)
    return path
