"""
FocuSprint Server Package.

This package contains the web server implementation for the FocuSprint platform.

Subpackages:
    api: FastAPI route definitions for the admin back office and the client dashboard.
    core: Settings and API constants.
    exception_handlers: Mapping of raised errors to JSON error responses.
    middleware: Request monitoring middleware.
    services: Business services and the request-scoped dependencies that build them.
"""
