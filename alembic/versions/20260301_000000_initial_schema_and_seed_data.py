"""Initial schema and seed data for FocuSprint

Revision ID: 20260301_000000
Revises: None
Create Date: 2026-03-01 00:00:00.000000

This is the initial migration that creates all necessary tables and seeds default data
for the FocuSprint platform. This includes:
- Platform administration tables (admin profiles, audit logs, bulk operations)
- Tenant tables (clients, client users, plans, licenses, plan migrations)
- Feature flag tables (flags, client overrides, history)
- Support tables (tickets, ticket comments)
- Client workspace tables (teams, projects, kanban columns, tasks, project messages)
- Default subscription plans (free, pro, business)

Revision format: YYYYMMDD_HHMMSS_description

"""

import uuid
from datetime import datetime
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Create admin_profiles table
    op.create_table(
        "admin_profiles",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("permissions", JSONB(), nullable=False, server_default="[]"),
        sa.Column("department", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.Index("ix_admin_profiles_email", "email"),
        sa.Index("ix_admin_profiles_role", "role"),
    )

    # Create audit_logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("admin_id", sa.String(64), nullable=True),
        sa.Column("admin_email", sa.String(255), nullable=True),
        sa.Column("admin_name", sa.String(255), nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("resource_type", sa.String(32), nullable=False),
        sa.Column("resource_id", sa.String(64), nullable=True),
        sa.Column("resource_name", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("changes", JSONB(), nullable=False, server_default="[]"),
        sa.Column("context", JSONB(), nullable=False, server_default="{}"),
        sa.Column("severity", sa.String(16), nullable=False, server_default="low"),
        sa.Column("status", sa.String(16), nullable=False, server_default="success"),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_audit_logs_admin_id", "admin_id"),
        sa.Index("ix_audit_logs_action", "action"),
        sa.Index("ix_audit_logs_resource_type", "resource_type"),
        sa.Index("ix_audit_logs_resource_id", "resource_id"),
        sa.Index("ix_audit_logs_severity", "severity"),
        sa.Index("ix_audit_logs_created_at", "created_at"),
    )

    # Create bulk_operations table
    op.create_table(
        "bulk_operations",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("operation_type", sa.String(64), nullable=False),
        sa.Column("target_type", sa.String(32), nullable=False),
        sa.Column("target_ids", JSONB(), nullable=False, server_default="[]"),
        sa.Column("parameters", JSONB(), nullable=False, server_default="{}"),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("dry_run", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("progress", JSONB(), nullable=False, server_default="{}"),
        sa.Column("results", JSONB(), nullable=False, server_default="[]"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("operation_metadata", JSONB(), nullable=False, server_default="{}"),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("created_by_name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_bulk_operations_operation_type", "operation_type"),
        sa.Index("ix_bulk_operations_target_type", "target_type"),
        sa.Index("ix_bulk_operations_status", "status"),
        sa.Index("ix_bulk_operations_created_by", "created_by"),
        sa.Index("ix_bulk_operations_created_at", "created_at"),
    )

    # Create plans table
    op.create_table(
        "plans",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False, server_default=""),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="BRL"),
        sa.Column("interval", sa.String(8), nullable=False, server_default="month"),
        sa.Column("trial_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("features", JSONB(), nullable=False, server_default="{}"),
        sa.Column("limits", JSONB(), nullable=False, server_default="{}"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_promotional", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("promo_start_date", sa.DateTime(), nullable=True),
        sa.Column("promo_end_date", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
        sa.Index("ix_plans_code", "code"),
    )

    # Create clients table
    op.create_table(
        "clients",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("plan_type", sa.String(32), nullable=False, server_default="free"),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("cnpj", sa.String(32), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("max_users", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("max_projects", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("stripe_customer_id", sa.String(128), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.Index("ix_clients_email", "email"),
        sa.Index("ix_clients_plan_type", "plan_type"),
        sa.Index("ix_clients_status", "status"),
    )

    # Create client_users table
    op.create_table(
        "client_users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="member"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.UniqueConstraint("email"),
        sa.Index("ix_client_users_client_id", "client_id"),
        sa.Index("ix_client_users_email", "email"),
    )

    # Create licenses table
    op.create_table(
        "licenses",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("plan_id", sa.String(64), nullable=True),
        sa.Column("plan_type", sa.String(32), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("trial_ends_at", sa.DateTime(), nullable=True),
        sa.Column("max_users", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("max_projects", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("license_metadata", JSONB(), nullable=False, server_default="{}"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"]),
        sa.Index("ix_licenses_client_id", "client_id"),
        sa.Index("ix_licenses_plan_type", "plan_type"),
        sa.Index("ix_licenses_status", "status"),
        sa.Index("ix_licenses_trial_ends_at", "trial_ends_at"),
    )

    # Create plan_migrations table
    op.create_table(
        "plan_migrations",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("from_plan_id", sa.String(64), nullable=True),
        sa.Column("to_plan_id", sa.String(64), nullable=False),
        sa.Column("from_plan_type", sa.String(32), nullable=True),
        sa.Column("to_plan_type", sa.String(32), nullable=False),
        sa.Column("migration_type", sa.String(16), nullable=False),
        sa.Column("migration_reason", sa.Text(), nullable=True),
        sa.Column("effective_date", sa.DateTime(), nullable=False),
        sa.Column("proration_amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("proration_currency", sa.String(3), nullable=False, server_default="BRL"),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.Index("ix_plan_migrations_client_id", "client_id"),
        sa.Index("ix_plan_migrations_status", "status"),
        sa.Index("ix_plan_migrations_created_at", "created_at"),
    )

    # Create feature_flags table
    op.create_table(
        "feature_flags",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("flag_type", sa.String(16), nullable=False, server_default="boolean"),
        sa.Column("environment", sa.String(16), nullable=False, server_default="all"),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("category", sa.String(32), nullable=False, server_default="experimental"),
        sa.Column("target_audience", sa.String(32), nullable=False, server_default="all_users"),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("default_value", JSONB(), nullable=True),
        sa.Column("current_value", JSONB(), nullable=True),
        sa.Column("rollout_percentage", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("conditions", JSONB(), nullable=False, server_default="[]"),
        sa.Column("tags", JSONB(), nullable=False, server_default="[]"),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("updated_by", sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key", "environment", name="uq_feature_flags_key_environment"),
        sa.Index("ix_feature_flags_key", "key"),
        sa.Index("ix_feature_flags_environment", "environment"),
        sa.Index("ix_feature_flags_status", "status"),
    )

    # Create feature_flag_overrides table
    op.create_table(
        "feature_flag_overrides",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("flag_id", sa.String(64), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("value", JSONB(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["flag_id"], ["feature_flags.id"]),
        sa.UniqueConstraint("flag_id", "client_id", name="uq_feature_flag_overrides_flag_client"),
        sa.Index("ix_feature_flag_overrides_flag_id", "flag_id"),
        sa.Index("ix_feature_flag_overrides_client_id", "client_id"),
    )

    # Create feature_flag_history table
    op.create_table(
        "feature_flag_history",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("flag_id", sa.String(64), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("changes", JSONB(), nullable=False, server_default="{}"),
        sa.Column("changed_by", sa.String(64), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_feature_flag_history_flag_id", "flag_id"),
    )

    # Create tickets table
    op.create_table(
        "tickets",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("ticket_number", sa.String(16), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("client_name", sa.String(100), nullable=True),
        sa.Column("client_plan", sa.String(32), nullable=False, server_default="free"),
        sa.Column("requester_email", sa.String(255), nullable=True),
        sa.Column("requester_name", sa.String(255), nullable=True),
        sa.Column("subject", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(32), nullable=False, server_default="general"),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(32), nullable=False, server_default="open"),
        sa.Column("tags", JSONB(), nullable=False, server_default="[]"),
        sa.Column("assigned_to", sa.String(64), nullable=True),
        sa.Column("assigned_to_name", sa.String(255), nullable=True),
        sa.Column("assigned_at", sa.DateTime(), nullable=True),
        sa.Column("sla_due_at", sa.DateTime(), nullable=True),
        sa.Column("first_response_at", sa.DateTime(), nullable=True),
        sa.Column("first_response_time_minutes", sa.Integer(), nullable=True),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("resolution_summary", sa.Text(), nullable=True),
        sa.Column("resolution_time_minutes", sa.Integer(), nullable=True),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.UniqueConstraint("sequence"),
        sa.UniqueConstraint("ticket_number"),
        sa.Index("ix_tickets_client_id", "client_id"),
        sa.Index("ix_tickets_client_plan", "client_plan"),
        sa.Index("ix_tickets_category", "category"),
        sa.Index("ix_tickets_priority", "priority"),
        sa.Index("ix_tickets_status", "status"),
        sa.Index("ix_tickets_assigned_to", "assigned_to"),
        sa.Index("ix_tickets_created_at", "created_at"),
    )

    # Create ticket_comments table
    op.create_table(
        "ticket_comments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("ticket_id", sa.String(64), nullable=False),
        sa.Column("author_id", sa.String(64), nullable=True),
        sa.Column("author_name", sa.String(255), nullable=True),
        sa.Column("author_type", sa.String(16), nullable=False, server_default="admin"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["ticket_id"], ["tickets.id"]),
        sa.Index("ix_ticket_comments_ticket_id", "ticket_id"),
    )

    # Create teams table
    op.create_table(
        "teams",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("color", sa.String(16), nullable=False, server_default="#3B82F6"),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.Index("ix_teams_client_id", "client_id"),
    )

    # Create projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("team_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="planning"),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("archived_at", sa.DateTime(), nullable=True),
        sa.Column("archived_by", sa.String(64), nullable=True),
        sa.Column("archive_reason", sa.String(500), nullable=True),
        sa.Column("archive_category", sa.String(16), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.Index("ix_projects_client_id", "client_id"),
        sa.Index("ix_projects_team_id", "team_id"),
        sa.Index("ix_projects_status", "status"),
    )

    # Create kanban_columns table
    op.create_table(
        "kanban_columns",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("project_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color", sa.String(16), nullable=False, server_default="#6B7280"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("wip_limit", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.Index("ix_kanban_columns_project_id", "project_id"),
    )

    # Create tasks table
    op.create_table(
        "tasks",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("project_id", sa.String(64), nullable=False),
        sa.Column("column_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("estimated_hours", sa.Float(), nullable=True),
        sa.Column("actual_hours", sa.Float(), nullable=True),
        sa.Column("assigned_to", sa.String(64), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_by", sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["column_id"], ["kanban_columns.id"]),
        sa.Index("ix_tasks_project_id", "project_id"),
        sa.Index("ix_tasks_column_id", "column_id"),
    )

    # Create project_messages table
    op.create_table(
        "project_messages",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("project_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("edited_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.Index("ix_project_messages_project_id", "project_id"),
        sa.Index("ix_project_messages_created_at", "created_at"),
    )

    # Seed default subscription plans
    now = datetime.utcnow()
    default_plans = [
        {
            "code": "free",
            "name": "Free",
            "description": "Get started with a small team",
            "price": 0.0,
            "trial_days": 0,
            "features": {"kanban": True, "chat": True, "reports": False, "integrations": False},
            "limits": {"max_users": 5, "max_projects": 3},
        },
        {
            "code": "pro",
            "name": "Pro",
            "description": "For growing teams",
            "price": 97.0,
            "trial_days": 14,
            "features": {"kanban": True, "chat": True, "reports": True, "integrations": False},
            "limits": {"max_users": 15, "max_projects": 10},
        },
        {
            "code": "business",
            "name": "Business",
            "description": "For organisations running many teams",
            "price": 399.0,
            "trial_days": 14,
            "features": {"kanban": True, "chat": True, "reports": True, "integrations": True},
            "limits": {"max_users": 50, "max_projects": 50},
        },
    ]

    plans_table = sa.table(
        "plans",
        sa.column("id", sa.String),
        sa.column("code", sa.String),
        sa.column("name", sa.String),
        sa.column("description", sa.String),
        sa.column("price", sa.Float),
        sa.column("currency", sa.String),
        sa.column("interval", sa.String),
        sa.column("trial_days", sa.Integer),
        sa.column("features", JSONB),
        sa.column("limits", JSONB),
        sa.column("is_active", sa.Boolean),
        sa.column("is_promotional", sa.Boolean),
        sa.column("version", sa.Integer),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    op.bulk_insert(
        plans_table,
        [
            {
                "id": str(uuid.uuid4()),
                "currency": "BRL",
                "interval": "month",
                "is_active": True,
                "is_promotional": False,
                "version": 1,
                "created_at": now,
                "updated_at": now,
                **plan,
            }
            for plan in default_plans
        ],
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("project_messages")
    op.drop_table("tasks")
    op.drop_table("kanban_columns")
    op.drop_table("projects")
    op.drop_table("teams")
    op.drop_table("ticket_comments")
    op.drop_table("tickets")
    op.drop_table("feature_flag_history")
    op.drop_table("feature_flag_overrides")
    op.drop_table("feature_flags")
    op.drop_table("plan_migrations")
    op.drop_table("licenses")
    op.drop_table("client_users")
    op.drop_table("clients")
    op.drop_table("plans")
    op.drop_table("bulk_operations")
    op.drop_table("audit_logs")
    op.drop_table("admin_profiles")
