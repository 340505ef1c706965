from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from wealth_core.domain.models import (
    CATEGORIES,
    ON_TARGET,
    ON_TARGET_BAND,
    OVER_TARGET,
    UNDER_TARGET,
    WARNING_BAND,
    AllocationTargets,
    Deviation,
    LedgerSnapshot,
    PercentageBreakdown,
)
from wealth_core.services.aggregation import selected_percentages

BALANCED_MESSAGE = "Your distribution is balanced against the targets you set."

# (category, trigger on deviation, message); every rule is checked independently
RECOMMENDATION_RULES: Tuple[Tuple[str, Callable[[float], bool], str], ...] = (
    (
        "cash",
        lambda d: d < -5,
        "Consider raising your cash position to build a stronger emergency buffer.",
    ),
    (
        "cash",
        lambda d: d > 10,
        "Too much of your wealth sits idle in cash; consider investing part of it.",
    ),
    (
        "crypto",
        lambda d: d > 5,
        "Your crypto share is high; consider trimming it to reduce volatility.",
    ),
    (
        "interest_bearing",
        lambda d: d < -10,
        "Consider increasing your brokerage exposure for more growth potential.",
    ),
    (
        "index_funds",
        lambda d: d < -5,
        "Index funds give low-cost diversification; consider increasing their weight.",
    ),
)


def classify_deviation(deviation: float) -> str:
    if abs(deviation) <= ON_TARGET_BAND:
        return ON_TARGET
    if deviation > ON_TARGET_BAND:
        return OVER_TARGET
    return UNDER_TARGET


def deviation_severity(deviation: float) -> str:
    size = abs(deviation)
    if size <= ON_TARGET_BAND:
        return "ok"
    if size <= WARNING_BAND:
        return "warning"
    return "alert"


def compute_deviations(percentages: PercentageBreakdown, targets: AllocationTargets) -> Dict[str, Deviation]:
    result: Dict[str, Deviation] = {}
    for category in CATEGORIES:
        actual = percentages.get(category)
        target = targets.get(category)
        diff = actual - target
        result[category] = Deviation(
            category=category,
            actual=actual,
            target=target,
            deviation=diff,
            status=classify_deviation(diff),
            severity=deviation_severity(diff),
        )
    return result


def deviations(snapshot: LedgerSnapshot) -> Dict[str, Deviation]:
    """Actual minus target percentage for every category of the selected month."""
    return compute_deviations(selected_percentages(snapshot), snapshot.targets)


def deviation_counts(devs: Dict[str, Deviation]) -> Dict[str, int]:
    counts = {ON_TARGET: 0, OVER_TARGET: 0, UNDER_TARGET: 0}
    for dev in devs.values():
        counts[dev.status] += 1
    return counts


def recommendations(devs: Dict[str, Deviation]) -> List[str]:
    tips = [
        message
        for category, trigger, message in RECOMMENDATION_RULES
        if category in devs and trigger(devs[category].deviation)
    ]
    return tips or [BALANCED_MESSAGE]

