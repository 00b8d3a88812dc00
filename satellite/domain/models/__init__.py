"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Catalog
    Formation,
    TickerInfo,

    # Persisted records
    Budget,
    FormationHistory,
    FormationUsage,
    Holding,
    UserSettings,

    # Derived values
    CheckResult,
    PortfolioSummary,
    TierAllocation,
)

__all__ = [
    # Catalog
    "Formation",
    "TickerInfo",

    # Persisted records
    "Budget",
    "FormationHistory",
    "FormationUsage",
    "Holding",
    "UserSettings",

    # Derived values
    "CheckResult",
    "PortfolioSummary",
    "TierAllocation",
]
