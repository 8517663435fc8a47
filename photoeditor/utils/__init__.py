"""
PhotoEditor utilities module.

Provides logging helpers and run statistics.
"""

from .logging import StructuredLogger, RunStats, setup_console_logging

__all__ = [
    'StructuredLogger',
    'RunStats',
    'setup_console_logging'
]
