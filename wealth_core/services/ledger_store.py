from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Iterable, List, Optional

from wealth_core.domain.models import (
    MONTH_NAMES,
    AllocationTargets,
    LedgerSnapshot,
    MonthlyRecord,
)
from wealth_core.services.aggregation import find_record, normalize_label

logger = logging.getLogger(__name__)

Subscriber = Callable[[LedgerSnapshot], None]


def current_month_label(today: Optional[dt.date] = None) -> str:
    today = today or dt.date.today()
    return MONTH_NAMES[today.month - 1]


class LedgerStore:
    """
    Authoritative holder of the monthly ledger, the allocation targets and the
    selected-month pointer.

    Records keep insertion order; replacing a month keeps its original position.
    Every mutation bumps ``version`` and notifies subscribers with the new snapshot.
    """

    def __init__(
        self,
        records: Iterable[MonthlyRecord] = (),
        targets: Optional[AllocationTargets] = None,
        selected_label: Optional[str] = None,
    ):
        self._records: List[MonthlyRecord] = []
        self._targets = targets or AllocationTargets()
        self._selected = selected_label or current_month_label()
        self._version = 0
        self._subscribers: List[Subscriber] = []
        for record in records:
            self._put(record)

    @classmethod
    def from_snapshot(cls, snapshot: LedgerSnapshot) -> "LedgerStore":
        return cls(snapshot.records, snapshot.targets, snapshot.selected_label)

    @property
    def version(self) -> int:
        return self._version

    @property
    def records(self) -> List[MonthlyRecord]:
        return list(self._records)

    @property
    def targets(self) -> AllocationTargets:
        return self._targets

    @property
    def selected_label(self) -> str:
        return self._selected

    def find(self, label: str) -> Optional[MonthlyRecord]:
        """Case-insensitive lookup; first match in ledger order wins."""
        return find_record(self.snapshot(), label)

    def upsert_month(self, record: MonthlyRecord) -> LedgerSnapshot:
        self._put(record)
        return self._changed()

    def set_targets(self, targets: AllocationTargets) -> LedgerSnapshot:
        self._targets = targets
        logger.debug("targets replaced: %s", targets.as_dict())
        return self._changed()

    def select_month(self, label: str) -> LedgerSnapshot:
        if not label:
            return self.snapshot()
        self._selected = label
        logger.debug("selected month %r", label)
        return self._changed()

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            records=tuple(self._records),
            targets=self._targets,
            selected_label=self._selected,
            version=self._version,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _put(self, record: MonthlyRecord) -> None:
        for idx, existing in enumerate(self._records):
            if existing.label == record.label:
                self._records[idx] = record
                logger.debug("replaced month %r at position %d", record.label, idx)
                return
        key = normalize_label(record.label)
        clash = next((r.label for r in self._records if normalize_label(r.label) == key), None)
        if clash is not None:
            logger.warning(
                "month label %r collides with existing %r after case folding; "
                "lookups will resolve to the earlier record",
                record.label,
                clash,
            )
        self._records.append(record)
        logger.debug("appended month %r", record.label)

    def _changed(self) -> LedgerSnapshot:
        self._version += 1
        snap = self.snapshot()
        for callback in list(self._subscribers):
            callback(snap)
        return snap
