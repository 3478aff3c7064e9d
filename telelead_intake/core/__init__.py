# telelead_intake/core/__init__.py
"""
Core package for configuration, logging, and the error taxonomy.
"""

from telelead_intake.core.config import Settings, load_settings
from telelead_intake.core.logging import configure_structlog, get_structlog_logger

__all__ = [
    "Settings",
    "load_settings",
    "configure_structlog",
    "get_structlog_logger",
]
