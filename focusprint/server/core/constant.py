"""API-wide constants."""

PROJECT_NAME = "FocuSprint"
API_VERSION = "1.0.0"
SCHEMA_VERSION = "v1"

API_PREFIX = "/api"
ADMIN_API_STR = f"{API_PREFIX}/admin"
CLIENT_API_STR = f"{API_PREFIX}/client"

ADMIN_ID_HEADER = "X-Admin-Id"
USER_ID_HEADER = "X-User-Id"
