"""Client impersonation sessions

Revision ID: 20261018_000000
Revises: 20260301_000000
Create Date: 2026-10-18 00:00:00.000000

Adds the impersonation_sessions table that records every time a platform
admin acts as a client user.

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261018_000000"
down_revision: Union[str, None] = "20260301_000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the impersonation_sessions table."""
    op.create_table(
        "impersonation_sessions",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("session_token", sa.String(128), nullable=False),
        sa.Column("admin_id", sa.String(64), nullable=False),
        sa.Column("admin_email", sa.String(255), nullable=False),
        sa.Column("admin_name", sa.String(255), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("client_name", sa.String(100), nullable=False),
        sa.Column("client_email", sa.String(255), nullable=False),
        sa.Column("impersonated_user_id", sa.String(64), nullable=False),
        sa.Column("impersonated_user_email", sa.String(255), nullable=False),
        sa.Column("impersonated_user_name", sa.String(255), nullable=False),
        sa.Column("reason", sa.String(500), nullable=False),
        sa.Column("permissions", JSONB(), nullable=False, server_default="[]"),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("termination_reason", sa.String(500), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_token"),
        sa.Index("ix_impersonation_sessions_session_token", "session_token"),
        sa.Index("ix_impersonation_sessions_admin_id", "admin_id"),
        sa.Index("ix_impersonation_sessions_client_id", "client_id"),
        sa.Index("ix_impersonation_sessions_impersonated_user_id", "impersonated_user_id"),
        sa.Index("ix_impersonation_sessions_status", "status"),
        sa.Index("ix_impersonation_sessions_started_at", "started_at"),
    )


def downgrade() -> None:
    """Drop the impersonation_sessions table."""
    op.drop_table("impersonation_sessions")
