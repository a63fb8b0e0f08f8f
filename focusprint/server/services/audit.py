"""
Audit logging service.

Every admin mutation ends with an audit entry. Recording is best effort: a
failure to write the entry is logged and swallowed so it never undoes or
fails the operation being audited.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.audit_logs import AuditLog
from focusprint.core.database.repositories.audit_logs import AuditLogRepository
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import AuditAction, AuditSeverity, ResourceType
from focusprint.core.models.io.audit import AuditLogPage, AuditLogRead, AuditStatistics
from focusprint.core.models.io.common import Pagination
from focusprint.core.monitoring import log_audit_event

logger = get_logger(__name__)

HIGH_SEVERITY_ACTIONS = {
    AuditAction.admin_deleted,
    AuditAction.client_deleted,
    AuditAction.license_deleted,
    AuditAction.plan_deleted,
    AuditAction.feature_flag_deleted,
    AuditAction.admin_role_changed,
    AuditAction.admin_permissions_changed,
    AuditAction.permission_denied,
    AuditAction.suspicious_activity,
}

MEDIUM_SEVERITY_ACTIONS = {
    AuditAction.login_failed,
    AuditAction.client_impersonated,
    AuditAction.client_status_changed,
    AuditAction.license_status_changed,
    AuditAction.ticket_status_changed,
    AuditAction.bulk_operation,
}


def determine_severity(action: AuditAction | str) -> AuditSeverity:
    """Default severity of an audit action."""
    action = AuditAction(action)
    if action in HIGH_SEVERITY_ACTIONS:
        return AuditSeverity.high
    if action in MEDIUM_SEVERITY_ACTIONS:
        return AuditSeverity.medium
    return AuditSeverity.low


def _comparable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value


def diff_changes(before: Mapping[str, Any], after: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """List the fields of ``after`` whose value differs from ``before``.

    Args:
        before: Field values prior to the change
        after: Field values requested by the change

    Returns:
        A list of ``{field, old_value, new_value}`` dictionaries
    """
    changes: List[Dict[str, Any]] = []
    for field, new_value in after.items():
        old_value = _comparable(before.get(field))
        new_value = _comparable(new_value)
        if old_value != new_value:
            changes.append({"field": field, "old_value": old_value, "new_value": new_value})
    return changes


class AuditService:
    """Writes and queries the audit log on behalf of one request."""

    def __init__(
        self, session: AsyncSession, ip_address: Optional[str] = None, user_agent: Optional[str] = None
    ) -> None:
        self.session = session
        self.repo = AuditLogRepository(session)
        self.ip_address = ip_address
        self.user_agent = user_agent

    async def record(
        self,
        actor: Optional[AdminProfile],
        action: AuditAction,
        resource_type: ResourceType,
        resource_id: Optional[str] = None,
        resource_name: Optional[str] = None,
        description: Optional[str] = None,
        changes: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
        severity: Optional[AuditSeverity] = None,
        status: str = "success",
    ) -> Optional[AuditLog]:
        """Append an audit entry.

        Returns:
            The stored entry, or None when it could not be written
        """
        severity = severity or determine_severity(action)
        entry = AuditLog(
            admin_id=actor.id if actor else None,
            admin_email=actor.email if actor else None,
            admin_name=actor.full_name if actor else None,
            action=AuditAction(action).value,
            resource_type=ResourceType(resource_type).value,
            resource_id=resource_id,
            resource_name=resource_name,
            description=description,
            changes=changes or [],
            context=context or {},
            severity=AuditSeverity(severity).value,
            status=status,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
        )
        try:
            entry = await self.repo.create(entry)
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to write audit entry {entry.action} for {entry.resource_type}:{resource_id}: {e}")
            return None
        log_audit_event(entry.action, entry.resource_type, resource_id, entry.severity)
        return entry

    async def list_logs(
        self,
        page: int = 1,
        limit: int = 50,
        admin_id: Optional[str] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        severity: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
    ) -> AuditLogPage:
        filters = {
            "admin_id": admin_id,
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "severity": severity,
        }
        conditions = AuditLogRepository.search_conditions(date_from, date_to, search)
        rows, total = await self.repo.page(page, limit, filters=filters, conditions=conditions)
        return AuditLogPage(
            logs=[AuditLogRead.model_validate(row) for row in rows],
            pagination=Pagination.build(page, limit, total),
        )

    async def statistics(self, days: int = 30) -> AuditStatistics:
        since = utc_now() - timedelta(days=days)
        by_action = await self.repo.count_since("action", since)
        return AuditStatistics(
            period_days=days,
            total_events=sum(by_action.values()),
            by_action=by_action,
            by_severity=await self.repo.count_since("severity", since),
            by_resource_type=await self.repo.count_since("resource_type", since),
            by_admin=await self.repo.count_since("admin_email", since),
        )
