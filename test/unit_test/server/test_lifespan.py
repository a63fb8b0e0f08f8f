"""
Unit tests for FastAPI application lifespan management.

Tests verify that startup initializes the database, that a failing
initialization does not abort startup, and that shutdown completes.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

pytestmark = pytest.mark.asyncio


class TestLifespanStartup:
    """Test application startup lifespan events."""

    async def test_lifespan_startup_initializes_database(self):
        from focusprint.server.main import lifespan

        app = FastAPI()

        with patch("focusprint.server.main.init_db", new_callable=AsyncMock) as mock_init_db:
            async with lifespan(app):
                mock_init_db.assert_awaited_once()

    async def test_lifespan_startup_survives_database_failure(self):
        from focusprint.server.main import lifespan

        app = FastAPI()

        with (
            patch("focusprint.server.main.init_db", new_callable=AsyncMock) as mock_init_db,
            patch("focusprint.server.main.logger") as mock_logger,
        ):
            mock_init_db.side_effect = RuntimeError("connection refused")
            async with lifespan(app):
                pass

            mock_logger.error.assert_called_once()
            assert "Database initialization failed" in mock_logger.error.call_args[0][0]

    async def test_lifespan_shutdown_is_logged(self):
        from focusprint.server.main import lifespan

        app = FastAPI()

        with (
            patch("focusprint.server.main.init_db", new_callable=AsyncMock),
            patch("focusprint.server.main.logger") as mock_logger,
        ):
            async with lifespan(app):
                pass

            messages = [call[0][0] for call in mock_logger.info.call_args_list]
            assert any("Shutting down" in message for message in messages)


class TestInitDb:
    """Test schema creation on startup."""

    async def test_init_db_creates_tables_in_development(self):
        from focusprint.core.database import session as session_module

        with (
            patch.object(session_module.settings, "environment", "development"),
            patch("focusprint.core.database.session.create_all", new_callable=AsyncMock) as mock_create_all,
        ):
            await session_module.init_db()
            mock_create_all.assert_awaited_once_with(session_module.engine)

    async def test_init_db_skips_outside_development(self):
        from focusprint.core.database import session as session_module

        with (
            patch.object(session_module.settings, "environment", "production"),
            patch("focusprint.core.database.session.create_all", new_callable=AsyncMock) as mock_create_all,
        ):
            await session_module.init_db()
            mock_create_all.assert_not_awaited()
