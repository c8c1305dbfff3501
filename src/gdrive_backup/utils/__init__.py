"""Utility functions and helpers."""

from .logging import ContextualLogger, TimedOperation, get_logger, setup_logging

__all__ = ["ContextualLogger", "TimedOperation", "get_logger", "setup_logging"]
