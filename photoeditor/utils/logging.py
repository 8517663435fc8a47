"""
Logging utilities for PhotoEditor
Provides structured logging and run statistics
"""

import logging
import sys
import json
from typing import Optional, Dict, Any, List
from datetime import datetime

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s'


class StructuredLogger:
    """Provides structured logging with metadata"""

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize structured logger

        Args:
            name: Logger name
            metadata: Default metadata to include in all logs
        """
        self.logger = logging.getLogger(name)
        self.metadata = metadata or {}

    def _format_message(self, message: str, **kwargs) -> str:
        data = {**self.metadata, **kwargs}
        if data:
            return f"{message} | {json.dumps(data, default=str)}"
        return message

    def debug(self, message: str, **kwargs):
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message(message, **kwargs))


class RunStats:
    """Tracks pipeline run outcomes for one coordinator"""

    def __init__(self):
        self.start_time = datetime.now()
        self.submitted = 0
        self.completed = 0
        self.cancelled = 0
        self.failed = 0
        self.delivered = 0
        self.dropped = 0
        self.errors: List[Dict[str, Any]] = []
        self.run_times: List[float] = []

    def add_submitted(self):
        self.submitted += 1

    def add_completed(self, run_time: Optional[float] = None):
        self.completed += 1
        if run_time:
            self.run_times.append(run_time)

    def add_cancelled(self):
        self.cancelled += 1

    def add_failed(self, run_id: str, error: Optional[Exception]):
        self.failed += 1
        self.errors.append({
            'run_id': run_id,
            'error': str(error),
            'time': datetime.now()
        })

    def add_delivered(self):
        self.delivered += 1

    def add_dropped(self):
        """A completed result superseded before it reached the display"""
        self.dropped += 1

    def get_average_run_time(self) -> float:
        if not self.run_times:
            return 0.0
        return sum(self.run_times) / len(self.run_times)

    def get_summary(self) -> Dict[str, Any]:
        """Get run summary"""
        return {
            'runs_submitted': self.submitted,
            'runs_completed': self.completed,
            'runs_cancelled': self.cancelled,
            'runs_failed': self.failed,
            'results_delivered': self.delivered,
            'results_dropped': self.dropped,
            'total_processing_time': sum(self.run_times),
            'average_run_time': self.get_average_run_time(),
            'elapsed_time': (datetime.now() - self.start_time).total_seconds(),
        }


def setup_console_logging(level: str = "INFO", color: bool = True):
    """
    Setup console logging with optional color support

    Args:
        level: Logging level name
        color: Whether to use colored output
    """
    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        raise ValueError(f"Unknown log level: {level}")

    console_handler = logging.StreamHandler(sys.stdout)

    if color and sys.stdout.isatty():
        # colorlog ships with the optional "color" extra
        try:
            import colorlog
            formatter = colorlog.ColoredFormatter(
                '%(log_color)s' + LOG_FORMAT.replace('%(message)s', '%(reset)s%(message)s'),
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                }
            )
        except ImportError:
            formatter = logging.Formatter(LOG_FORMAT)
    else:
        formatter = logging.Formatter(LOG_FORMAT)

    console_handler.setFormatter(formatter)
    console_handler._photoeditor_console = True

    root_logger = logging.getLogger()
    # Replace a handler installed by an earlier call instead of stacking them
    for handler in list(root_logger.handlers):
        if getattr(handler, '_photoeditor_console', False):
            root_logger.removeHandler(handler)
    root_logger.setLevel(level_value)
    root_logger.addHandler(console_handler)
