"""
Analytics Module
"""
from .engine import SyntheticMetricsEngine
from .errors import AnalyticsError
from .service import AnalyticsService

__all__ = [
    "AnalyticsError",
    "AnalyticsService",
    "SyntheticMetricsEngine",
]
