"""Application services."""

from .cache import EntryStatus, QueryCache, QueryCacheEntry, QueryKey, QueryView
from .coordinator import ApprovalCoordinator
from .dashboard import (
    DashboardService,
    DocumentListView,
    configure_dashboard_service,
    get_dashboard_service,
    reset_dashboard_state,
)
from .indicators import IndicatorAggregator, Indicators
from .invalidation import InvalidationGraph
from .queries import DocumentQueries
from .tabs import Tab, TabSynchronizer, parse_tab

__all__ = [
    "ApprovalCoordinator",
    "DashboardService",
    "DocumentListView",
    "DocumentQueries",
    "EntryStatus",
    "IndicatorAggregator",
    "Indicators",
    "InvalidationGraph",
    "QueryCache",
    "QueryCacheEntry",
    "QueryKey",
    "QueryView",
    "Tab",
    "TabSynchronizer",
    "configure_dashboard_service",
    "get_dashboard_service",
    "parse_tab",
    "reset_dashboard_state",
]
