from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from wealth_core.domain.models import (
    CATEGORIES,
    CRYPTO_WALLETS,
    AllocationTargets,
    LedgerSnapshot,
    MonthlyRecord,
)
from wealth_core.services.aggregation import total_wealth

logger = logging.getLogger(__name__)

# record field -> document key
RECORD_KEYS: Dict[str, str] = {
    "income": "income",
    "expenses": "expenses",
    "cash_balance": "cashBalance",
    "brokerage_balance_a": "brokerageBalanceA",
    "brokerage_balance_b": "brokerageBalanceB",
    "index_funds_balance": "indexFundsBalance",
    "other_cash_balance": "otherCashBalance",
}

TARGET_KEYS: Dict[str, str] = {
    "cash": "cash",
    "interest_bearing": "interestBearing",
    "crypto": "crypto",
    "index_funds": "indexFunds",
}

LABEL_KEYS = ("month", "label", "date")


class MalformedDocumentError(ValueError):
    """The ledger document lacks structure every record depends on."""


def _to_float(value: Any, where: str) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("non-numeric value %r for %s, using 0", value, where)
        return 0.0


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def normalize_wallets(raw: Any, where: str = "record") -> Dict[str, float]:
    """Every known wallet present, unknown wallets dropped."""
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        logger.warning("cryptoHoldings for %s is not a mapping, treating all wallets as 0", where)
        raw = {}
    unknown = set(raw) - set(CRYPTO_WALLETS)
    if unknown:
        logger.warning("dropping unknown crypto wallets %s for %s", sorted(unknown), where)
    return {w: _to_float(raw.get(w), f"{where} wallet {w}") for w in CRYPTO_WALLETS}


def build_record(label: str, **values: Any) -> MonthlyRecord:
    """Construct a record with every bucket and wallet filled in."""
    where = f"month {label!r}"
    fields = {name: _to_float(values.get(name), f"{where} {name}") for name in RECORD_KEYS}
    return MonthlyRecord(
        label=label,
        crypto_holdings=normalize_wallets(values.get("crypto_holdings"), where),
        total=values.get("total"),
        distribution_snapshot=values.get("distribution_snapshot"),
        return_pct=values.get("return_pct"),
        **fields,
    )


def _parse_distribution_memo(raw: Any, label: str) -> Optional[Dict[str, float]]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        logger.warning("distributionSnapshot for month %r is not a mapping, dropping it", label)
        return None
    return {str(k): _to_float(v, f"month {label!r} distributionSnapshot {k}") for k, v in raw.items()}


def parse_record(data: Any, position: int = 0) -> MonthlyRecord:
    if not isinstance(data, Mapping):
        raise MalformedDocumentError(f"history[{position}] is not an object")
    label = _pick(data, *LABEL_KEYS)
    if label is None or str(label).strip() == "":
        raise MalformedDocumentError(f"history[{position}] has no month label")
    label = str(label)
    values: Dict[str, Any] = {
        name: _pick(data, key, name) for name, key in RECORD_KEYS.items()
    }
    values["crypto_holdings"] = _pick(data, "cryptoHoldings", "crypto_holdings")
    memo_total = _pick(data, "total")
    values["total"] = None if memo_total is None else _to_float(memo_total, f"month {label!r} total")
    values["distribution_snapshot"] = _parse_distribution_memo(
        _pick(data, "distributionSnapshot", "distribution_snapshot"), label
    )
    memo_return = _pick(data, "returnPct", "return_pct")
    values["return_pct"] = None if memo_return is None else _to_float(memo_return, f"month {label!r} returnPct")
    record = build_record(label, **values)
    if record.total is not None:
        actual = total_wealth(record)
        if not math.isclose(record.total, actual, abs_tol=1e-9):
            logger.warning(
                "ignoring stale memoized total %s for month %r (buckets sum to %s)", record.total, label, actual
            )
    return record


def parse_targets(data: Any) -> AllocationTargets:
    if not isinstance(data, Mapping):
        raise MalformedDocumentError("targets must be an object of category percentages")
    values = {}
    for category in CATEGORIES:
        raw = _pick(data, TARGET_KEYS[category], category)
        if raw is None:
            logger.warning("target for %s missing, using 0", category)
        values[category] = _to_float(raw, f"target {category}")
    return AllocationTargets(**values)


def parse_document(data: Any) -> LedgerSnapshot:
    """
    Validate an ingestion document and build a snapshot from it.

    Raises MalformedDocumentError when ``targets`` or ``history`` is missing;
    record-level gaps are filled with zeros.
    """
    if not isinstance(data, Mapping):
        raise MalformedDocumentError("ledger document must be a JSON object")
    missing = [key for key in ("targets", "history") if key not in data]
    if missing:
        raise MalformedDocumentError(f"Missing keys in ledger document: {missing}")
    history = data["history"]
    if not isinstance(history, list):
        raise MalformedDocumentError("history must be a list of monthly records")

    records = [parse_record(item, i) for i, item in enumerate(history)]
    selected = data.get("selectedMonth") or data.get("selected_month") or ""
    return LedgerSnapshot(
        records=tuple(records),
        targets=parse_targets(data["targets"]),
        selected_label=str(selected),
    )


def record_to_document(record: MonthlyRecord) -> Dict[str, Any]:
    doc: Dict[str, Any] = {"month": record.label}
    for name, key in RECORD_KEYS.items():
        doc[key] = getattr(record, name)
    doc["cryptoHoldings"] = {w: record.wallet(w) for w in CRYPTO_WALLETS}
    if record.total is not None:
        doc["total"] = record.total
    if record.distribution_snapshot is not None:
        doc["distributionSnapshot"] = dict(record.distribution_snapshot)
    if record.return_pct is not None:
        doc["returnPct"] = record.return_pct
    return doc


def snapshot_to_document(snapshot: LedgerSnapshot) -> Dict[str, Any]:
    history: List[Dict[str, Any]] = [record_to_document(r) for r in snapshot.records]
    return {
        "targets": {TARGET_KEYS[c]: snapshot.targets.get(c) for c in CATEGORIES},
        "history": history,
        "selectedMonth": snapshot.selected_label,
    }

