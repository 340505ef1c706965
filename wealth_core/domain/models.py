from __future__ import annotations

import dataclasses
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

# Closed set of crypto wallets tracked on every record.
CRYPTO_WALLETS: Tuple[str, ...] = ("binance", "coinbase", "kraken", "ledger")

# Named asset buckets on a record, in document order.
ASSET_BUCKETS: Tuple[str, ...] = (
    "cash_balance",
    "brokerage_balance_a",
    "brokerage_balance_b",
    "index_funds_balance",
    "other_cash_balance",
)

CATEGORIES: Tuple[str, ...] = ("cash", "interest_bearing", "crypto", "index_funds")

CATEGORY_LABELS: Dict[str, str] = {
    "cash": "Cash",
    "interest_bearing": "Interest-bearing",
    "crypto": "Crypto",
    "index_funds": "Index funds",
}

MONTH_NAMES: Tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

ON_TARGET = "on_target"
OVER_TARGET = "over_target"
UNDER_TARGET = "under_target"

# Deviation bands, in percentage points.
ON_TARGET_BAND = 2.0
WARNING_BAND = 5.0


@dataclasses.dataclass(frozen=True)
class MonthlyRecord:
    label: str
    income: float = 0.0
    expenses: float = 0.0
    cash_balance: float = 0.0
    brokerage_balance_a: float = 0.0
    brokerage_balance_b: float = 0.0
    index_funds_balance: float = 0.0
    other_cash_balance: float = 0.0
    crypto_holdings: Mapping[str, float] = dataclasses.field(default_factory=dict)
    # memoized outputs, never authoritative
    total: Optional[float] = None
    distribution_snapshot: Optional[Mapping[str, float]] = None
    return_pct: Optional[float] = None

    def __post_init__(self):
        # read-only copies so snapshots cannot be edited through a record
        object.__setattr__(self, "crypto_holdings", MappingProxyType(dict(self.crypto_holdings)))
        if self.distribution_snapshot is not None:
            object.__setattr__(self, "distribution_snapshot", MappingProxyType(dict(self.distribution_snapshot)))

    def wallet(self, name: str) -> float:
        return float(self.crypto_holdings.get(name, 0.0) or 0.0)

    @property
    def net_savings(self) -> float:
        return self.income - self.expenses


@dataclasses.dataclass(frozen=True)
class AllocationTargets:
    cash: float = 0.0
    interest_bearing: float = 0.0
    crypto: float = 0.0
    index_funds: float = 0.0

    def get(self, category: str) -> float:
        return float(getattr(self, category, 0.0))

    def as_dict(self) -> Dict[str, float]:
        return {c: self.get(c) for c in CATEGORIES}

    @property
    def total(self) -> float:
        return sum(self.as_dict().values())


@dataclasses.dataclass(frozen=True)
class LedgerSnapshot:
    records: Tuple[MonthlyRecord, ...] = ()
    targets: AllocationTargets = AllocationTargets()
    selected_label: str = ""
    version: int = 0


@dataclasses.dataclass(frozen=True)
class Distribution:
    cash: float = 0.0
    interest_bearing: float = 0.0
    crypto: float = 0.0
    index_funds: float = 0.0
    crypto_wallets: Dict[str, float] = dataclasses.field(default_factory=dict)

    @property
    def total(self) -> float:
        return self.cash + self.interest_bearing + self.crypto + self.index_funds

    def as_dict(self) -> Dict[str, float]:
        return {c: getattr(self, c) for c in CATEGORIES}


@dataclasses.dataclass(frozen=True)
class PercentageBreakdown:
    cash: float = 0.0
    interest_bearing: float = 0.0
    crypto: float = 0.0
    index_funds: float = 0.0
    crypto_wallets: Dict[str, float] = dataclasses.field(default_factory=dict)

    def get(self, category: str) -> float:
        return float(getattr(self, category, 0.0))

    def as_dict(self) -> Dict[str, float]:
        return {c: self.get(c) for c in CATEGORIES}


@dataclasses.dataclass(frozen=True)
class Deviation:
    category: str
    actual: float
    target: float
    deviation: float
    status: str
    severity: str


@dataclasses.dataclass(frozen=True)
class MonthSummary:
    label: str
    total: float = 0.0
    income: float = 0.0
    expenses: float = 0.0
    savings: float = 0.0
    return_pct: float = 0.0


@dataclasses.dataclass(frozen=True)
class MonthComparison:
    first: str
    second: str
    income_change: float
    total_change: float
    pct_change: float


@dataclasses.dataclass(frozen=True)
class EvolutionPoint:
    label: str
    total: float


@dataclasses.dataclass(frozen=True)
class AppConfig:
    data_path: Path = Path.home() / ".wealth_ledger.json"
    evolution_window: Optional[int] = None
    log_level: str = "WARNING"
