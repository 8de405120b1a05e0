"""Vietnamese business micro-tools and an on-page SEO checker."""

from .engine import analyze, merge_performance_metrics
from .errors import AnalysisError, BusinessToolsError, CalculationError, RateLimitExceeded

__version__ = "2.0.0"

__all__ = [
    "AnalysisError",
    "BusinessToolsError",
    "CalculationError",
    "RateLimitExceeded",
    "analyze",
    "merge_performance_metrics",
]
