"""
Utility helpers for jumpdb.
"""

from .logging import configure_logging, get_logger, log_context
from .retry import retry

__all__ = ["configure_logging", "get_logger", "log_context", "retry"]
