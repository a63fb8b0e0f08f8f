"""
Client impersonation service.

An admin with the client_impersonation permission may act as one active user
of an active client for a bounded time. Each admin holds at most a configured
number of live sessions; sessions past their expiry are marked expired before
any new session is counted. Starting, ending and expiring a session are all
audited with high severity.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Any, List, Optional

from sqlalchemy import or_
from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.impersonation import ImpersonationSession
from focusprint.core.database.repositories.clients import ClientRepository, ClientUserRepository
from focusprint.core.database.repositories.impersonation import ImpersonationSessionRepository
from focusprint.core.errors import AuthorizationError, LimitExceededError, NotFoundError, OperationNotAllowedError
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import (
    AuditAction,
    AuditSeverity,
    ClientStatus,
    ImpersonationPermission,
    ImpersonationStatus,
    ResourceType,
)
from focusprint.core.models.io.common import Pagination
from focusprint.core.models.io.impersonation import (
    ImpersonationHistory,
    ImpersonationHistorySummary,
    ImpersonationSessionRead,
    ImpersonationStart,
    ImpersonationStartResponse,
    ImpersonationStatusRead,
)
from focusprint.server.core.config import settings

from .audit import AuditService

logger = get_logger(__name__)


def _minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def summarize(sessions: List[ImpersonationSession]) -> ImpersonationHistorySummary:
    ended = [s for s in sessions if s.ended_at is not None]
    average = round(sum(_minutes_between(s.started_at, s.ended_at) for s in ended) / len(ended)) if ended else 0
    return ImpersonationHistorySummary(
        total_sessions=len(sessions),
        active_sessions=sum(1 for s in sessions if s.status == ImpersonationStatus.active.value),
        expired_sessions=sum(1 for s in sessions if s.status == ImpersonationStatus.expired.value),
        terminated_sessions=sum(1 for s in sessions if s.status == ImpersonationStatus.terminated.value),
        unique_admins=len({s.admin_id for s in sessions}),
        unique_clients=len({s.client_id for s in sessions}),
        average_duration_minutes=average,
    )


class ImpersonationService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.session = session
        self.repo = ImpersonationSessionRepository(session)
        self.clients = ClientRepository(session)
        self.users = ClientUserRepository(session)
        self.audit = audit

    async def _record(
        self, actor: Optional[AdminProfile], action: AuditAction, impersonation: ImpersonationSession, description: str
    ) -> None:
        await self.audit.record(
            actor,
            action,
            ResourceType.client,
            resource_id=impersonation.client_id,
            resource_name=impersonation.client_name,
            description=description,
            context={
                "impersonation_session_id": impersonation.id,
                "impersonating_admin_id": impersonation.admin_id,
                "impersonated_user": impersonation.impersonated_user_email,
                "reason": impersonation.reason,
                "permissions": impersonation.permissions,
                "duration_minutes": impersonation.duration_minutes,
            },
            severity=AuditSeverity.high,
        )

    async def get_session(self, session_id: str) -> ImpersonationSession:
        impersonation = await self.repo.get_by_id(session_id)
        if not impersonation:
            raise NotFoundError("Impersonation session")
        return impersonation

    async def start(self, actor: AdminProfile, request: ImpersonationStart) -> ImpersonationStartResponse:
        """Open a session acting as ``request.user_id``.

        Raises:
            NotFoundError: the client or user does not exist, or the user
                belongs to another client
            OperationNotAllowedError: the client or the user is not active
            LimitExceededError: the admin already holds the maximum number
                of live sessions
        """
        limits = settings.impersonation
        client = await self.clients.get_by_id(request.client_id)
        if not client:
            raise NotFoundError("Client")
        if client.status != ClientStatus.active.value:
            raise OperationNotAllowedError("Client account is not active")
        user = await self.users.get_by_id(request.user_id)
        if not user or user.client_id != client.id:
            raise NotFoundError("User")
        if not user.is_active:
            raise OperationNotAllowedError("User account is not active")

        await self.cleanup_expired_sessions()
        now = utc_now()
        active = await self.repo.list_active_by_admin(actor.id, now)
        if len(active) >= limits.max_concurrent_sessions:
            raise LimitExceededError(
                f"Maximum concurrent impersonation sessions reached ({limits.max_concurrent_sessions})",
                context={"active_session_ids": [s.id for s in active]},
            )

        duration = min(request.duration_minutes or limits.default_duration_minutes, limits.max_duration_minutes)
        permissions = [ImpersonationPermission(p).value for p in request.permissions]
        impersonation = await self.repo.create(
            ImpersonationSession(
                session_token=secrets.token_urlsafe(32),
                admin_id=actor.id,
                admin_email=actor.email,
                admin_name=actor.full_name,
                client_id=client.id,
                client_name=client.name,
                client_email=client.email,
                impersonated_user_id=user.id,
                impersonated_user_email=user.email,
                impersonated_user_name=user.full_name,
                reason=request.reason,
                permissions=permissions,
                duration_minutes=duration,
                ip_address=self.audit.ip_address,
                user_agent=self.audit.user_agent,
                started_at=now,
                expires_at=now + timedelta(minutes=duration),
            )
        )
        token = impersonation.session_token
        response = ImpersonationStartResponse(
            session=ImpersonationSessionRead.model_validate(impersonation),
            access_token=token,
            expires_at=impersonation.expires_at,
            permissions=permissions,
            warnings=(
                ["Full access permission granted - use with caution"]
                if ImpersonationPermission.full_access.value in permissions
                else []
            ),
        )
        logger.info(f"Admin {actor.email} started impersonating {user.email} for {duration} minutes")
        await self._record(
            actor,
            AuditAction.client_impersonated,
            impersonation,
            f"Started impersonating {user.email} of client {client.name}",
        )
        return response

    async def end(self, actor: AdminProfile, session_id: str, reason: Optional[str] = None) -> ImpersonationSession:
        """Terminate one of the caller's own live sessions."""
        impersonation = await self.get_session(session_id)
        if impersonation.admin_id != actor.id:
            raise AuthorizationError("Unauthorized to end this session")
        if impersonation.status != ImpersonationStatus.active.value:
            raise OperationNotAllowedError("Session is not active")

        impersonation.status = ImpersonationStatus.terminated.value
        impersonation.ended_at = utc_now()
        impersonation.termination_reason = reason or "Manual termination"
        impersonation = await self.repo.update(impersonation)
        logger.info(f"Admin {actor.email} ended impersonation session {session_id}")

        await self._record(
            actor,
            AuditAction.client_impersonation_ended,
            impersonation,
            f"Ended impersonation of {impersonation.impersonated_user_email}",
        )
        return impersonation

    async def _expire(self, impersonation: ImpersonationSession) -> None:
        impersonation.status = ImpersonationStatus.expired.value
        impersonation.ended_at = impersonation.expires_at
        impersonation.termination_reason = "Session expired"
        await self.repo.update(impersonation)
        await self._record(
            None,
            AuditAction.client_impersonation_ended,
            impersonation,
            f"Impersonation of {impersonation.impersonated_user_email} expired",
        )

    async def cleanup_expired_sessions(self) -> int:
        """Mark every live session past its expiry time as expired."""
        overdue = await self.repo.list_overdue(utc_now())
        for impersonation in overdue:
            await self._expire(impersonation)
        if overdue:
            logger.info(f"Expired {len(overdue)} impersonation sessions")
        return len(overdue)

    async def get_status(self, token: str) -> ImpersonationStatusRead:
        """Resolve a session token; expired sessions are closed on the way."""
        impersonation = await self.repo.get_by_token(token)
        if not impersonation or impersonation.status != ImpersonationStatus.active.value:
            return ImpersonationStatusRead(is_impersonating=False)

        now = utc_now()
        if impersonation.expires_at <= now:
            await self._expire(impersonation)
            return ImpersonationStatusRead(is_impersonating=False)

        return ImpersonationStatusRead(
            is_impersonating=True,
            session=ImpersonationSessionRead.model_validate(impersonation),
            time_remaining_minutes=_minutes_between(now, impersonation.expires_at),
        )

    async def list_active(self, actor: AdminProfile) -> List[ImpersonationSession]:
        await self.cleanup_expired_sessions()
        return await self.repo.list_active_by_admin(actor.id, utc_now())

    async def history(
        self,
        page: int = 1,
        limit: int = 50,
        admin_id: Optional[str] = None,
        client_id: Optional[str] = None,
        user_id: Optional[str] = None,
        status: Optional[List[str]] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
    ) -> ImpersonationHistory:
        """Paginated session history, newest first, with a summary of every match."""
        conditions: List[Any] = []
        if admin_id:
            conditions.append(ImpersonationSession.admin_id == admin_id)
        if client_id:
            conditions.append(ImpersonationSession.client_id == client_id)
        if user_id:
            conditions.append(ImpersonationSession.impersonated_user_id == user_id)
        if status:
            conditions.append(ImpersonationSession.status.in_(status))
        if date_from:
            conditions.append(ImpersonationSession.started_at >= date_from)
        if date_to:
            conditions.append(ImpersonationSession.started_at <= date_to)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    ImpersonationSession.admin_email.ilike(pattern),
                    ImpersonationSession.client_name.ilike(pattern),
                    ImpersonationSession.impersonated_user_email.ilike(pattern),
                    ImpersonationSession.reason.ilike(pattern),
                )
            )

        matches = await self.repo.list_where(conditions)
        start = (page - 1) * limit
        return ImpersonationHistory(
            sessions=[ImpersonationSessionRead.model_validate(s) for s in matches[start : start + limit]],
            pagination=Pagination.build(page, limit, len(matches)),
            summary=summarize(matches),
        )
