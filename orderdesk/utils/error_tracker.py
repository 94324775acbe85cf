"""Error tracking and aggregation for batch operations."""

from collections import defaultdict
from threading import Lock
from typing import Dict, Optional
import logging


class ErrorTracker:
    """Count failures by type and keep a few samples of each.

    Safe to share between worker threads.
    """

    def __init__(self, max_samples: int = 3):
        """Initialize error tracker.

        Args:
            max_samples: Maximum number of samples to store per error type
        """
        self.error_counts = defaultdict(int)
        self.error_samples = defaultdict(list)
        self.max_samples = max_samples
        self._lock = Lock()

    def add_error(self, error_type: str, message: str, context: Optional[Dict] = None) -> None:
        """Record one failure.

        Args:
            error_type: Category of the failure, usually an error ``kind``
            message: Error message
            context: Optional context data for the failure
        """
        with self._lock:
            self.error_counts[error_type] += 1
            if len(self.error_samples[error_type]) < self.max_samples:
                self.error_samples[error_type].append({
                    'message': message,
                    'context': context or {}
                })

    def get_summary(self) -> Dict:
        """Get error summary.

        Returns:
            Dict containing error counts and samples
        """
        with self._lock:
            return {
                'counts': dict(self.error_counts),
                'samples': {k: list(v) for k, v in self.error_samples.items()}
            }

    def log_summary(self, logger: logging.Logger) -> None:
        """Log error summary.

        Args:
            logger: Logger to use for output
        """
        if not self.error_counts:
            return

        logger.warning("Error Summary:")
        for error_type, count in self.error_counts.items():
            logger.warning(f"{error_type} ({count} occurrences):")
            for i, sample in enumerate(self.error_samples[error_type], 1):
                logger.warning(f"  Sample {i}: {sample['message']}")
                for key, value in sample['context'].items():
                    logger.warning(f"    {key}: {value}")
