"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class DatabaseConfig(BaseModel):
    """Application database configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./focusprint.db",
        alias="DATABASE_URL",
        description="Async database connection URL (postgres URLs are rewritten to asyncpg)",
    )
    echo: bool = Field(default=False, alias="DATABASE_ECHO", description="Echo SQL statements to the log")

    model_config = {"populate_by_name": True}


class PostgreSQLConfig(BaseModel):
    """PostgreSQL database configuration."""

    db: str = Field(default="focusprint", alias="POSTGRES_DB", description="PostgreSQL database name")
    user: str = Field(default="focusprint", alias="POSTGRES_USER", description="PostgreSQL database user")
    password: str = Field(default="changeme", alias="POSTGRES_PASSWORD", description="PostgreSQL database password")
    host: str = Field(default="postgres", alias="POSTGRES_HOST", description="PostgreSQL database host address")
    port: int = Field(default=5432, alias="POSTGRES_PORT", description="PostgreSQL database port number")

    model_config = {"populate_by_name": True}

    @property
    def url(self) -> str:
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


class BulkOperationsConfig(BaseModel):
    """Limits applied by the bulk operations orchestrator."""

    max_concurrent_operations: int = Field(
        default=3, alias="BULK_MAX_CONCURRENT_OPERATIONS", description="Maximum operations in running state"
    )
    default_batch_size: int = Field(
        default=50, alias="BULK_DEFAULT_BATCH_SIZE", description="Targets processed per batch"
    )
    max_targets_per_operation: int = Field(
        default=1000, alias="BULK_MAX_TARGETS_PER_OPERATION", description="Maximum target IDs in one operation"
    )

    model_config = {"populate_by_name": True}


class AdminSessionConfig(BaseModel):
    """Admin session configuration."""

    session_hours: int = Field(
        default=8, alias="ADMIN_SESSION_HOURS", description="Lifetime of an admin session context in hours"
    )

    model_config = {"populate_by_name": True}


class TrialConfig(BaseModel):
    """Trial license configuration."""

    default_trial_days: int = Field(
        default=30, alias="TRIAL_DEFAULT_DAYS", description="Trial length when the plan does not define one"
    )
    expiring_soon_days: int = Field(
        default=3, alias="TRIAL_EXPIRING_SOON_DAYS", description="Window used to report trials about to expire"
    )

    model_config = {"populate_by_name": True}


class ImpersonationConfig(BaseModel):
    """Limits applied to client impersonation sessions."""

    default_duration_minutes: int = Field(
        default=60, alias="IMPERSONATION_DEFAULT_MINUTES", description="Session length when the request gives none"
    )
    max_duration_minutes: int = Field(
        default=480, alias="IMPERSONATION_MAX_MINUTES", description="Longest session an admin may request"
    )
    max_concurrent_sessions: int = Field(
        default=3, alias="IMPERSONATION_MAX_CONCURRENT_SESSIONS", description="Active sessions allowed per admin"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # FocuSprint Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="FocuSprint server host address to bind to",
        alias="FOCUSPRINT_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="FocuSprint server port number",
        alias="FOCUSPRINT_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="FocuSprint server logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="FOCUSPRINT_LOG_LEVEL",
    )
    environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
        alias="FOCUSPRINT_ENVIRONMENT",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./focusprint.db",
        description="Async connection URL for the application database",
        alias="DATABASE_URL",
    )
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # =====================================================================
    # PostgreSQL Configuration
    # =====================================================================
    postgres_db: str = Field(default="focusprint", alias="POSTGRES_DB")
    postgres_user: str = Field(default="focusprint", alias="POSTGRES_USER")
    postgres_password: str = Field(default="changeme", alias="POSTGRES_PASSWORD")
    postgres_host: str = Field(default="postgres", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Business Rule Configuration
    # =====================================================================
    bulk_max_concurrent_operations: int = Field(default=3, alias="BULK_MAX_CONCURRENT_OPERATIONS")
    bulk_default_batch_size: int = Field(default=50, alias="BULK_DEFAULT_BATCH_SIZE")
    bulk_max_targets_per_operation: int = Field(default=1000, alias="BULK_MAX_TARGETS_PER_OPERATION")
    admin_session_hours: int = Field(default=8, alias="ADMIN_SESSION_HOURS")
    trial_default_days: int = Field(default=30, alias="TRIAL_DEFAULT_DAYS")
    trial_expiring_soon_days: int = Field(default=3, alias="TRIAL_EXPIRING_SOON_DAYS")
    impersonation_default_minutes: int = Field(default=60, alias="IMPERSONATION_DEFAULT_MINUTES")
    impersonation_max_minutes: int = Field(default=480, alias="IMPERSONATION_MAX_MINUTES")
    impersonation_max_concurrent_sessions: int = Field(default=3, alias="IMPERSONATION_MAX_CONCURRENT_SESSIONS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration from environment variables."""
        return DatabaseConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def postgres(self) -> PostgreSQLConfig:
        """Get PostgreSQL configuration from environment variables."""
        return PostgreSQLConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def bulk_operations(self) -> BulkOperationsConfig:
        """Get bulk operation limits from environment variables."""
        return BulkOperationsConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def admin_session(self) -> AdminSessionConfig:
        """Get admin session configuration from environment variables."""
        return AdminSessionConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def trials(self) -> TrialConfig:
        """Get trial configuration from environment variables."""
        return TrialConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def impersonation(self) -> ImpersonationConfig:
        """Get impersonation limits from environment variables."""
        return ImpersonationConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()


def get_settings(reload: Optional[bool] = False) -> Settings:
    """Return the settings singleton, rebuilding it from the environment when asked."""
    global settings
    if reload:
        settings = Settings()
    return settings
