"""
Structured logging system for SmartForm.

Provides centralized logging with console and file outputs, log levels,
and metrics tracking for monitoring fill sessions.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics about questions seen, matches and learned pairs.
    """

    def __init__(
        self,
        name: str = "smartform",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        # Metrics tracking
        self.metrics = {
            "questions_seen": 0,
            "matches_by_source": {},
            "unresolved": 0,
            "answers_applied": 0,
            "suggestions": 0,
            "pairs_learned": 0,
            "errors_by_type": {},
        }

        # Console handler
        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        # File handler
        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"smartform_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_question(self):
        """Increment the questions-seen counter."""
        self.metrics["questions_seen"] += 1

    def record_match(self, source: str):
        """Record a resolved question by the stage that answered it."""
        by_source = self.metrics["matches_by_source"]
        by_source[source] = by_source.get(source, 0) + 1

    def record_unresolved(self):
        self.metrics["unresolved"] += 1

    def record_applied(self):
        self.metrics["answers_applied"] += 1

    def record_suggestion(self):
        self.metrics["suggestions"] += 1

    def record_learned(self):
        self.metrics["pairs_learned"] += 1

    def record_error(self, error_type: str):
        """Record a per-question failure."""
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = self.metrics.copy()
        seen = metrics_copy["questions_seen"]
        matched = sum(metrics_copy["matches_by_source"].values())
        metrics_copy["match_rate"] = round(matched / seen, 3) if seen > 0 else 0
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        seen = metrics["questions_seen"]
        matched = sum(metrics["matches_by_source"].values())

        self.info("=== Fill Session Metrics ===")
        self.info(f"Questions: {matched}/{seen} matched ({metrics['match_rate'] * 100:.1f}%)")

        if metrics["matches_by_source"]:
            self.info("Matches by source:")
            for source, count in metrics["matches_by_source"].items():
                self.info(f"  {source}: {count}")

        self.info(f"Applied: {metrics['answers_applied']}, suggested: {metrics['suggestions']}, "
                  f"learned: {metrics['pairs_learned']}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "smartform",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
