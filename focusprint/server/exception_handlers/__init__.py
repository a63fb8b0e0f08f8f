"""
Exception handlers for the FocuSprint server.

This package contains the handlers that turn raised errors into
``{"error": ..., "details": ...}`` JSON responses and a setup function to
register them with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
