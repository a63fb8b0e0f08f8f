"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware
(CORS, request logging), registers the error handlers and includes the
admin and client API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from focusprint.core.database.session import init_db
from focusprint.core.logging_config import get_logger, setup_logging
from focusprint.core.monitoring import initialize_logfire

from .api.v1 import health
from .api.v1.admin import (
    admins,
    audit,
    bulk_operations,
    clients,
    feature_flags,
    impersonation,
    licenses,
    metrics,
    plan_migrations,
    plans,
    tickets,
    trials,
)
from .api.v1.client import columns, messages, projects, tasks, teams
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the schema on startup in development; other environments run
    the Alembic migrations before the server starts.
    """
    # Startup
    try:
        logger.info(f"Starting up {constant.PROJECT_NAME} Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info(f"Shutting down {constant.PROJECT_NAME} Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    FocuSprint Server API

    Platform administration (clients, plans, licenses, trials, feature flags,
    support tickets, bulk operations, client impersonation, metrics and audit)
    under /api/admin, and the client workspace (teams, projects, kanban boards and
    project chat) under /api/client.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])

# Admin API
app.include_router(admins.router, prefix=constant.ADMIN_API_STR)
app.include_router(audit.router, prefix=f"{constant.ADMIN_API_STR}/audit")
app.include_router(clients.router, prefix=f"{constant.ADMIN_API_STR}/clients")
app.include_router(plan_migrations.router, prefix=constant.ADMIN_API_STR)
app.include_router(plans.router, prefix=f"{constant.ADMIN_API_STR}/plans")
app.include_router(licenses.router, prefix=f"{constant.ADMIN_API_STR}/licenses")
app.include_router(trials.router, prefix=f"{constant.ADMIN_API_STR}/trials")
app.include_router(feature_flags.router, prefix=f"{constant.ADMIN_API_STR}/feature-flags")
app.include_router(tickets.router, prefix=f"{constant.ADMIN_API_STR}/tickets")
app.include_router(bulk_operations.router, prefix=f"{constant.ADMIN_API_STR}/bulk-operations")
app.include_router(impersonation.router, prefix=f"{constant.ADMIN_API_STR}/impersonation")
app.include_router(metrics.router, prefix=constant.ADMIN_API_STR)

# Client API
app.include_router(teams.router, prefix=f"{constant.CLIENT_API_STR}/teams")
app.include_router(projects.router, prefix=f"{constant.CLIENT_API_STR}/projects")
app.include_router(columns.router, prefix=f"{constant.CLIENT_API_STR}/columns")
app.include_router(tasks.router, prefix=f"{constant.CLIENT_API_STR}/tasks")
app.include_router(messages.router, prefix=f"{constant.CLIENT_API_STR}/messages")

initialize_logfire(app)
