"""
Middleware modules for the FocuSprint server.

This package contains custom middleware for request/response logging
and performance monitoring.
"""

from .logfire_middleware import LogfireMiddleware

__all__ = ["LogfireMiddleware"]
