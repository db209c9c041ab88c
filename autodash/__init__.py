"""Schema inference, KPI aggregation and chart suggestion engine for tabular data."""

from .config import get_settings
from .services.dashboard_service import DashboardService
from .services.suggestion_service import SuggestionOrchestrator

__version__ = get_settings().app_version

__all__ = ['DashboardService', 'SuggestionOrchestrator', 'get_settings']
