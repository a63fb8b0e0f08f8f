"""Domain enums shared by entities, services and API models."""

from __future__ import annotations

from enum import Enum

# =====================================================================
# Back office: admins and audit
# =====================================================================


class AdminRole(str, Enum):
    """Platform administrator roles, from most to least privileged."""

    super_admin = "super_admin"
    operations_admin = "operations_admin"
    financial_admin = "financial_admin"
    technical_admin = "technical_admin"
    support_admin = "support_admin"


class AdminPermission(str, Enum):
    """Fine-grained permissions checked on every admin request."""

    # Client management
    manage_clients = "manage_clients"
    view_clients = "view_clients"
    suspend_clients = "suspend_clients"
    delete_clients = "delete_clients"

    # License management
    manage_licenses = "manage_licenses"
    view_licenses = "view_licenses"
    modify_plans = "modify_plans"

    # Financial
    view_financials = "view_financials"
    manage_billing = "manage_billing"
    export_financial_data = "export_financial_data"
    manage_stripe = "manage_stripe"

    # Admin management
    manage_admins = "manage_admins"
    view_admins = "view_admins"
    assign_permissions = "assign_permissions"
    reset_2fa = "reset_2fa"

    # System
    system_config = "system_config"
    feature_flags = "feature_flags"
    maintenance_mode = "maintenance_mode"

    # Support
    client_impersonation = "client_impersonation"
    view_support_tickets = "view_support_tickets"
    manage_support_tickets = "manage_support_tickets"

    # Audit and security
    audit_access = "audit_access"
    security_monitoring = "security_monitoring"
    export_audit_logs = "export_audit_logs"

    # Analytics
    view_metrics = "view_metrics"
    export_metrics = "export_metrics"
    custom_reports = "custom_reports"


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""

    # Authentication
    login = "login"
    logout = "logout"
    login_failed = "login_failed"
    password_reset = "password_reset"

    # Admin management
    admin_created = "admin_created"
    admin_updated = "admin_updated"
    admin_deleted = "admin_deleted"
    admin_role_changed = "admin_role_changed"
    admin_permissions_changed = "admin_permissions_changed"

    # Clients
    client_created = "client_created"
    client_updated = "client_updated"
    client_deleted = "client_deleted"
    client_status_changed = "client_status_changed"
    client_impersonated = "client_impersonated"
    client_impersonation_ended = "client_impersonation_ended"
    client_plan_migrated = "client_plan_migrated"

    # Licenses
    license_created = "license_created"
    license_updated = "license_updated"
    license_deleted = "license_deleted"
    license_status_changed = "license_status_changed"
    license_plan_changed = "license_plan_changed"

    # Plans
    plan_created = "plan_created"
    plan_updated = "plan_updated"
    plan_deleted = "plan_deleted"
    plan_activated = "plan_activated"
    plan_deactivated = "plan_deactivated"

    # System
    system_config_changed = "system_config_changed"
    system_maintenance_mode = "system_maintenance_mode"

    # Feature flags
    feature_flag_created = "feature_flag_created"
    feature_flag_updated = "feature_flag_updated"
    feature_flag_deleted = "feature_flag_deleted"
    feature_flag_enabled = "feature_flag_enabled"
    feature_flag_disabled = "feature_flag_disabled"
    feature_flag_archived = "feature_flag_archived"

    # Support tickets
    ticket_created = "ticket_created"
    ticket_updated = "ticket_updated"
    ticket_assigned = "ticket_assigned"
    ticket_status_changed = "ticket_status_changed"
    ticket_commented = "ticket_commented"
    ticket_resolved = "ticket_resolved"
    ticket_closed = "ticket_closed"

    # Data
    bulk_operation = "bulk_operation"
    data_exported = "data_exported"
    data_imported = "data_imported"

    # Security
    permission_denied = "permission_denied"
    suspicious_activity = "suspicious_activity"
    rate_limit_exceeded = "rate_limit_exceeded"
    api_key_created = "api_key_created"
    api_key_revoked = "api_key_revoked"


class ResourceType(str, Enum):
    """Kinds of resources an audit entry can point at."""

    admin = "admin"
    client = "client"
    license = "license"
    plan = "plan"
    user = "user"
    system = "system"
    session = "session"
    api_key = "api_key"
    webhook = "webhook"
    integration = "integration"
    feature_flag = "feature_flag"
    ticket = "ticket"
    team = "team"
    project = "project"
    task = "task"


class AuditSeverity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


# =====================================================================
# Clients, plans and licenses
# =====================================================================


class PlanType(str, Enum):
    free = "free"
    pro = "pro"
    business = "business"


class ClientStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"


class ClientUserRole(str, Enum):
    owner = "owner"
    admin = "admin"
    member = "member"


class BillingInterval(str, Enum):
    month = "month"
    year = "year"


class LicenseStatus(str, Enum):
    """Lifecycle status of a license."""

    trial = "trial"
    active = "active"
    suspended = "suspended"
    cancelled = "cancelled"
    expired = "expired"


class MigrationType(str, Enum):
    upgrade = "upgrade"
    downgrade = "downgrade"
    lateral = "lateral"
    promotional = "promotional"


class MigrationStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


# =====================================================================
# Feature flags
# =====================================================================


class FeatureFlagType(str, Enum):
    boolean = "boolean"
    string = "string"
    number = "number"
    json = "json"
    percentage = "percentage"


class FeatureFlagEnvironment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"
    all = "all"


class FeatureFlagTargetAudience(str, Enum):
    all_users = "all_users"
    specific_clients = "specific_clients"
    plan_based = "plan_based"
    percentage_rollout = "percentage_rollout"
    beta_users = "beta_users"
    internal_only = "internal_only"


class FeatureFlagCategory(str, Enum):
    ui_ux = "ui_ux"
    performance = "performance"
    integration = "integration"
    security = "security"
    billing = "billing"
    analytics = "analytics"
    experimental = "experimental"
    maintenance = "maintenance"


class FeatureFlagStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    archived = "archived"
    deprecated = "deprecated"


class ConditionOperator(str, Enum):
    equals = "equals"
    not_equals = "not_equals"
    contains = "contains"
    not_contains = "not_contains"
    greater_than = "greater_than"
    less_than = "less_than"
    in_ = "in"
    not_in = "not_in"


class EvaluationReason(str, Enum):
    """Why a feature flag evaluation produced its value."""

    flag_not_found = "flag_not_found"
    flag_disabled = "flag_disabled"
    client_override = "client_override"
    condition_match = "condition_match"
    rollout_percentage = "rollout_percentage"
    default_value = "default_value"


class FeatureFlagBulkAction(str, Enum):
    enable = "enable"
    disable = "disable"
    archive = "archive"
    delete = "delete"


# =====================================================================
# Support tickets
# =====================================================================


class TicketCategory(str, Enum):
    technical = "technical"
    billing = "billing"
    account = "account"
    feature_request = "feature_request"
    bug_report = "bug_report"
    security = "security"
    integration = "integration"
    general = "general"


class TicketPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"
    critical = "critical"


class TicketStatus(str, Enum):
    open = "open"
    in_progress = "in_progress"
    waiting_client = "waiting_client"
    waiting_internal = "waiting_internal"
    resolved = "resolved"
    closed = "closed"
    cancelled = "cancelled"


class TicketAuthorType(str, Enum):
    client = "client"
    admin = "admin"
    system = "system"


# =====================================================================
# Bulk operations
# =====================================================================


class BulkOperationType(str, Enum):
    """Batch actions an admin can run over a list of targets."""

    # User operations
    enable_users = "enable_users"
    disable_users = "disable_users"
    update_user_roles = "update_user_roles"
    reset_passwords = "reset_passwords"
    delete_users = "delete_users"

    # License operations
    activate_licenses = "activate_licenses"
    deactivate_licenses = "deactivate_licenses"
    update_license_plans = "update_license_plans"
    extend_license_expiration = "extend_license_expiration"
    transfer_licenses = "transfer_licenses"

    # Client operations
    update_client_plans = "update_client_plans"
    suspend_clients = "suspend_clients"
    reactivate_clients = "reactivate_clients"
    billing_adjustments = "billing_adjustments"
    delete_clients = "delete_clients"

    # Cross-system operations
    client_migration = "client_migration"
    audit_export = "audit_export"
    compliance_report = "compliance_report"
    feature_flag_sync = "feature_flag_sync"
    bulk_notifications = "bulk_notifications"
    system_maintenance = "system_maintenance"


class BulkTargetType(str, Enum):
    users = "users"
    licenses = "licenses"
    clients = "clients"
    feature_flags = "feature_flags"
    tickets = "tickets"
    audit_logs = "audit_logs"
    mixed = "mixed"


class BulkOperationStatus(str, Enum):
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"
    partial_success = "partial_success"


class BulkOperationStage(str, Enum):
    initializing = "initializing"
    validating = "validating"
    processing = "processing"
    finalizing = "finalizing"
    completed = "completed"


# =====================================================================
# Client workspace
# =====================================================================


class ProjectStatus(str, Enum):
    planning = "planning"
    active = "active"
    on_hold = "on_hold"
    completed = "completed"
    cancelled = "cancelled"


class ArchiveCategory(str, Enum):
    completed = "completed"
    cancelled = "cancelled"
    on_hold = "on_hold"
    outdated = "outdated"
    duplicate = "duplicate"
    bulk = "bulk"
    general = "general"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


# =====================================================================
# Client impersonation
# =====================================================================


class ImpersonationStatus(str, Enum):
    active = "active"
    expired = "expired"
    terminated = "terminated"


class ImpersonationPermission(str, Enum):
    """What an admin may do inside a client workspace while impersonating."""

    view_projects = "view_projects"
    view_teams = "view_teams"
    view_tasks = "view_tasks"
    view_chat = "view_chat"
    view_files = "view_files"
    view_settings = "view_settings"
    modify_projects = "modify_projects"
    modify_teams = "modify_teams"
    modify_tasks = "modify_tasks"
    modify_settings = "modify_settings"
    full_access = "full_access"


# =====================================================================
# Metrics
# =====================================================================


class HealthIndicator(str, Enum):
    excellent = "excellent"
    good = "good"
    warning = "warning"
    critical = "critical"
