"""
Repositories organized by business domain.

Every repository derives from ``AsyncCrudRepository`` and adds the queries
its services need.
"""

from .admin_profiles import AdminProfileRepository
from .audit_logs import AuditLogRepository
from .base import AsyncBaseRepository, AsyncCrudRepository, AsyncQueryBuilder
from .bulk_operations import BulkOperationRepository
from .clients import ClientRepository, ClientUserRepository
from .feature_flags import FeatureFlagHistoryRepository, FeatureFlagOverrideRepository, FeatureFlagRepository
from .impersonation import ImpersonationSessionRepository
from .licenses import LicenseRepository
from .plan_migrations import PlanMigrationRepository
from .plans import PlanRepository
from .tickets import TicketCommentRepository, TicketRepository
from .workspace import (
    KanbanColumnRepository,
    ProjectMessageRepository,
    ProjectRepository,
    TaskRepository,
    TeamRepository,
)

__all__ = [
    "AdminProfileRepository",
    "AsyncBaseRepository",
    "AsyncCrudRepository",
    "AsyncQueryBuilder",
    "AuditLogRepository",
    "BulkOperationRepository",
    "ClientRepository",
    "ClientUserRepository",
    "FeatureFlagHistoryRepository",
    "FeatureFlagOverrideRepository",
    "FeatureFlagRepository",
    "ImpersonationSessionRepository",
    "KanbanColumnRepository",
    "LicenseRepository",
    "PlanMigrationRepository",
    "PlanRepository",
    "ProjectMessageRepository",
    "ProjectRepository",
    "TaskRepository",
    "TeamRepository",
    "TicketCommentRepository",
    "TicketRepository",
]
