"""Portfolio Analytics: risk, performance, rebalancing and income analytics for investment portfolios."""

from .models import AssetType, Holding, PortfolioSnapshot
from .analysis import (
    IncomeProjector,
    InstrumentRiskAssessor,
    PerformanceAnalyzer,
    Rebalancer,
    RiskEngine,
)

__version__ = "0.1.0"
