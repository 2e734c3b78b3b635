"""Portfolio analysis domain package."""

from basket_server.portfolio.models import KPI, AlignedSeries, PortfolioIndex, PortfolioReport, TickerSeries
from basket_server.portfolio.portfolio_service import PortfolioService

__all__ = ["KPI", "AlignedSeries", "PortfolioIndex", "PortfolioReport", "PortfolioService", "TickerSeries"]
