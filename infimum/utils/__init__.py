"""Utilities for the poll engine."""

from .utils import (
    setup_logging,
    save_results,
    to_serializable,
    PerformanceMonitor,
    PerformanceMetrics,
    get_system_info
)

__all__ = [
    'setup_logging',
    'save_results',
    'to_serializable',
    'PerformanceMonitor',
    'PerformanceMetrics',
    'get_system_info'
]
