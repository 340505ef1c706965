from wealth_core.services.aggregation import (  # noqa: F401
    distribution,
    percentage_breakdown,
    total_wealth,
    total_wealth_for,
)
from wealth_core.services.ledger_store import LedgerStore  # noqa: F401
from wealth_core.services.returns import (  # noqa: F401
    annualized_return,
    compare_months,
    evolution_series,
    month_over_month_return,
    month_summary,
)
from wealth_core.services.targets import deviations, recommendations  # noqa: F401

__all__ = [
    "LedgerStore",
    "total_wealth",
    "total_wealth_for",
    "distribution",
    "percentage_breakdown",
    "month_over_month_return",
    "annualized_return",
    "month_summary",
    "compare_months",
    "evolution_series",
    "deviations",
    "recommendations",
]
