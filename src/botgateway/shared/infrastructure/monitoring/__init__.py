"""
Monitoring infrastructure for Bot Gateway.
"""

from .logger import get_logger, setup_logging
from .metrics import MetricsCollector, get_metrics, timed_operation

__all__ = [
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics",
    "timed_operation",
]
