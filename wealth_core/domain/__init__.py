from wealth_core.domain.models import (  # noqa: F401
    CATEGORIES,
    CRYPTO_WALLETS,
    AllocationTargets,
    AppConfig,
    Deviation,
    Distribution,
    EvolutionPoint,
    LedgerSnapshot,
    MonthComparison,
    MonthlyRecord,
    MonthSummary,
    PercentageBreakdown,
)

__all__ = [
    "CATEGORIES",
    "CRYPTO_WALLETS",
    "AllocationTargets",
    "AppConfig",
    "Deviation",
    "Distribution",
    "EvolutionPoint",
    "LedgerSnapshot",
    "MonthComparison",
    "MonthlyRecord",
    "MonthSummary",
    "PercentageBreakdown",
]
