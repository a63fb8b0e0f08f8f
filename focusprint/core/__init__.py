"""
Core utilities and configuration for FocuSprint.

This package provides core functionality including logging configuration,
error types, database setup and the business services.
"""

from focusprint.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
