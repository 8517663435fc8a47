"""
PhotoEditor Interactive Preview System

Schedules adjustment runs in the background, cancels superseded runs and
hands results to the display context.
"""

from .coordinator import FilterCoordinator
from .dispatch import Dispatcher, ImmediateDispatcher, QueueDispatcher
from .models import PipelineRun

__all__ = [
    'FilterCoordinator',
    'Dispatcher',
    'ImmediateDispatcher',
    'QueueDispatcher',
    'PipelineRun'
]
