"""
FastAPI dependencies shared by the API routers.

Provides the database session, the authenticated admin or client user, the
permission guard and one factory per service.
"""

from typing import Annotated, Callable, Optional

from fastapi import Depends, Header, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database import get_session
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.clients import ClientUser
from focusprint.core.database.repositories.admin_profiles import AdminProfileRepository
from focusprint.core.database.repositories.clients import ClientRepository, ClientUserRepository
from focusprint.core.errors import AuthenticationError, AuthorizationError, ErrorCode
from focusprint.core.models.domain.enums import AdminPermission, AuditAction, ClientStatus, ResourceType
from focusprint.server.core.constant import ADMIN_ID_HEADER, USER_ID_HEADER

from .audit import AuditService
from .bulk_operations import BulkOperationService
from .clients import ClientService
from .feature_flags import FeatureFlagService
from .impersonation import ImpersonationService
from .licenses import LicenseService
from .metrics import MetricsService
from .plan_migrations import PlanMigrationService
from .plans import PlanService
from .rbac import AdminService, has_all_permissions
from .tickets import TicketService
from .trials import TrialService
from .workspace import WorkspaceService

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_audit_service(request: Request, session: SessionDep) -> AuditService:
    return AuditService(session, ip_address=_client_ip(request), user_agent=request.headers.get("user-agent"))


AuditDep = Annotated[AuditService, Depends(get_audit_service)]


# =====================================================================
# Authentication
# =====================================================================


async def get_current_admin(
    session: SessionDep,
    x_admin_id: Annotated[Optional[str], Header(alias=ADMIN_ID_HEADER)] = None,
) -> AdminProfile:
    """Resolve the admin named by the ``X-Admin-Id`` header.

    Raises:
        AuthenticationError: the header is missing or names no admin
        AuthorizationError: the admin account is inactive
    """
    if not x_admin_id:
        raise AuthenticationError()
    admin = await AdminProfileRepository(session).get_by_id(x_admin_id)
    if not admin:
        raise AuthenticationError("Invalid admin credentials", code=ErrorCode.INVALID_CREDENTIALS)
    if not admin.is_active:
        raise AuthorizationError("Admin account is inactive", code=ErrorCode.FORBIDDEN)
    return admin


CurrentAdmin = Annotated[AdminProfile, Depends(get_current_admin)]


def require_permission(*permissions: AdminPermission) -> Callable:
    """Build a dependency that requires every one of ``permissions``.

    A denied request is written to the audit log before the 403 is raised.
    """

    async def checker(admin: CurrentAdmin, audit: AuditDep, request: Request) -> AdminProfile:
        check = has_all_permissions(admin, permissions)
        if not check.allowed:
            await audit.record(
                admin,
                AuditAction.permission_denied,
                ResourceType.system,
                description=check.reason,
                context={
                    "method": request.method,
                    "path": request.url.path,
                    "required_permissions": [p.value for p in permissions],
                },
                status="failure",
            )
            raise AuthorizationError(
                check.reason or "Insufficient permissions",
                context={"required_permissions": [p.value for p in permissions]},
            )
        return admin

    return checker


async def get_current_client_user(
    session: SessionDep,
    x_user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None,
) -> ClientUser:
    """Resolve the client user named by the ``X-User-Id`` header."""
    if not x_user_id:
        raise AuthenticationError()
    user = await ClientUserRepository(session).get_by_id(x_user_id)
    if not user:
        raise AuthenticationError("Invalid user credentials", code=ErrorCode.INVALID_CREDENTIALS)
    if not user.is_active:
        raise AuthorizationError("User account is inactive", code=ErrorCode.FORBIDDEN)
    client = await ClientRepository(session).get_by_id(user.client_id)
    if not client or client.status == ClientStatus.suspended.value:
        raise AuthorizationError("Client account is suspended", code=ErrorCode.FORBIDDEN)
    return user


CurrentClientUser = Annotated[ClientUser, Depends(get_current_client_user)]


# =====================================================================
# Services
# =====================================================================


def get_admin_service(session: SessionDep, audit: AuditDep) -> AdminService:
    return AdminService(session, audit)


def get_client_service(session: SessionDep, audit: AuditDep) -> ClientService:
    return ClientService(session, audit)


def get_plan_service(session: SessionDep, audit: AuditDep) -> PlanService:
    return PlanService(session, audit)


def get_license_service(session: SessionDep, audit: AuditDep) -> LicenseService:
    return LicenseService(session, audit)


def get_trial_service(session: SessionDep, audit: AuditDep) -> TrialService:
    return TrialService(session, audit)


def get_plan_migration_service(session: SessionDep, audit: AuditDep) -> PlanMigrationService:
    return PlanMigrationService(session, audit)


def get_feature_flag_service(session: SessionDep, audit: AuditDep) -> FeatureFlagService:
    return FeatureFlagService(session, audit)


def get_ticket_service(session: SessionDep, audit: AuditDep) -> TicketService:
    return TicketService(session, audit)


def get_bulk_operation_service(session: SessionDep, audit: AuditDep) -> BulkOperationService:
    return BulkOperationService(session, audit)


def get_impersonation_service(session: SessionDep, audit: AuditDep) -> ImpersonationService:
    return ImpersonationService(session, audit)


def get_metrics_service(session: SessionDep, audit: AuditDep) -> MetricsService:
    return MetricsService(session, audit)


def get_workspace_service(session: SessionDep, user: CurrentClientUser) -> WorkspaceService:
    return WorkspaceService(session, user)


AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
ClientServiceDep = Annotated[ClientService, Depends(get_client_service)]
PlanServiceDep = Annotated[PlanService, Depends(get_plan_service)]
LicenseServiceDep = Annotated[LicenseService, Depends(get_license_service)]
TrialServiceDep = Annotated[TrialService, Depends(get_trial_service)]
PlanMigrationServiceDep = Annotated[PlanMigrationService, Depends(get_plan_migration_service)]
FeatureFlagServiceDep = Annotated[FeatureFlagService, Depends(get_feature_flag_service)]
TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
BulkOperationServiceDep = Annotated[BulkOperationService, Depends(get_bulk_operation_service)]
ImpersonationServiceDep = Annotated[ImpersonationService, Depends(get_impersonation_service)]
MetricsServiceDep = Annotated[MetricsService, Depends(get_metrics_service)]
WorkspaceServiceDep = Annotated[WorkspaceService, Depends(get_workspace_service)]
