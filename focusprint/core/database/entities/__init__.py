"""
Database entities organized by business domain.

Importing this package registers every table on ``Base.metadata``.
"""

from .admin_profiles import AdminProfile
from .audit_logs import AuditLog
from .bulk_operations import BulkOperation
from .clients import Client, ClientUser
from .feature_flags import FeatureFlag, FeatureFlagHistory, FeatureFlagOverride
from .impersonation import ImpersonationSession
from .licenses import License
from .plan_migrations import PlanMigration
from .plans import Plan
from .tickets import Ticket, TicketComment
from .workspace import KanbanColumn, Project, ProjectMessage, Task, Team

__all__ = [
    "AdminProfile",
    "AuditLog",
    "BulkOperation",
    "Client",
    "ClientUser",
    "FeatureFlag",
    "FeatureFlagHistory",
    "FeatureFlagOverride",
    "ImpersonationSession",
    "KanbanColumn",
    "License",
    "Plan",
    "PlanMigration",
    "Project",
    "ProjectMessage",
    "Task",
    "Team",
    "Ticket",
    "TicketComment",
]
