"""
Client management service.

Clients are tenant organisations. Creating a client or changing its plan type
applies the usage limits of that plan; every mutation is audited.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.entities.admin_profiles import AdminProfile
from focusprint.core.database.entities.clients import Client, ClientUser
from focusprint.core.database.repositories.clients import ClientRepository, ClientUserRepository
from focusprint.core.database.repositories.licenses import LicenseRepository
from focusprint.core.errors import (
    ConflictError,
    LimitExceededError,
    NotFoundError,
    OperationNotAllowedError,
    ValidationFailedError,
    validate_email,
)
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import AuditAction, AuditSeverity, ClientStatus, PlanType, ResourceType
from focusprint.core.models.io.clients import (
    ClientCreate,
    ClientListResponse,
    ClientRead,
    ClientUpdate,
    ClientUserCreate,
)
from focusprint.core.models.io.common import Pagination

from .audit import AuditService, diff_changes

logger = get_logger(__name__)

# (max_users, max_projects) per plan type
PLAN_LIMITS: dict[PlanType, tuple[int, int]] = {
    PlanType.free: (5, 3),
    PlanType.pro: (15, 10),
    PlanType.business: (50, 50),
}


def plan_limits(plan_type: PlanType | str) -> tuple[int, int]:
    try:
        return PLAN_LIMITS[PlanType(plan_type)]
    except ValueError:
        return PLAN_LIMITS[PlanType.free]


class ClientService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.repo = ClientRepository(session)
        self.users = ClientUserRepository(session)
        self.licenses = LicenseRepository(session)
        self.audit = audit

    async def get_client(self, client_id: str) -> Client:
        client = await self.repo.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client")
        return client

    async def list_clients(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        plan_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> ClientListResponse:
        rows, total = await self.repo.page(
            page,
            limit,
            filters={"status": status, "plan_type": plan_type},
            conditions=ClientRepository.search_conditions(search),
        )
        return ClientListResponse(
            clients=[ClientRead.model_validate(row) for row in rows],
            pagination=Pagination.build(page, limit, total),
        )

    async def create_client(self, actor: AdminProfile, data: ClientCreate) -> Client:
        email = validate_email(data.email)
        if await self.repo.get_by_email(email):
            raise ConflictError("Email already exists")

        max_users, max_projects = plan_limits(data.plan_type)
        client = Client(
            name=data.name.strip(),
            email=email,
            plan_type=data.plan_type.value,
            status=data.status.value,
            cnpj=data.cnpj,
            phone=data.phone,
            address=data.address,
            max_users=max_users,
            max_projects=max_projects,
        )
        client = await self.repo.create(client)
        logger.info(f"Client {client.id} created on plan {client.plan_type}")

        await self.audit.record(
            actor,
            AuditAction.client_created,
            ResourceType.client,
            resource_id=client.id,
            resource_name=client.name,
            description=f"Created client {client.name}",
            context={"plan_type": client.plan_type, "email": client.email},
        )
        return client

    async def update_client(self, actor: AdminProfile, client_id: str, data: ClientUpdate) -> Client:
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise ValidationFailedError("At least one field must be provided for update")

        client = await self.get_client(client_id)
        if "email" in updates and updates["email"] is not None:
            updates["email"] = validate_email(updates["email"])
            existing = await self.repo.get_by_email(updates["email"])
            if existing and existing.id != client.id:
                raise ConflictError("Email already exists")
        if updates.get("plan_type") is not None:
            updates["max_users"], updates["max_projects"] = plan_limits(updates["plan_type"])

        changes = diff_changes(client.model_dump(), updates)
        for key, value in updates.items():
            setattr(client, key, value.value if hasattr(value, "value") else value)
        client = await self.repo.update(client)

        status_changed = any(change["field"] == "status" for change in changes)
        await self.audit.record(
            actor,
            AuditAction.client_status_changed if status_changed else AuditAction.client_updated,
            ResourceType.client,
            resource_id=client.id,
            resource_name=client.name,
            description=f"Updated client {client.name}",
            changes=changes,
        )
        return client

    async def delete_client(self, actor: AdminProfile, client_id: str) -> None:
        """Delete a client together with its users and inactive licenses.

        Clients holding an active or trial license cannot be deleted.
        """
        client = await self.get_client(client_id)
        licenses = await self.licenses.list(filters={"client_id": client_id})
        if any(lic.status in ("active", "trial") for lic in licenses):
            raise OperationNotAllowedError("Cannot delete client with active licenses")

        for user in await self.users.list_by_client(client_id):
            await self.users.delete(user.id)
        for lic in licenses:
            await self.licenses.delete(lic.id)
        await self.repo.delete(client.id)
        logger.info(f"Client {client_id} deleted by {actor.email}")

        await self.audit.record(
            actor,
            AuditAction.client_deleted,
            ResourceType.client,
            resource_id=client_id,
            resource_name=client.name,
            description=f"Deleted client {client.name}",
            context={"email": client.email, "plan_type": client.plan_type},
        )

    async def set_status(
        self, actor: AdminProfile, client_id: str, status: ClientStatus, reason: Optional[str] = None
    ) -> Client:
        client = await self.get_client(client_id)
        if client.status == status.value:
            raise OperationNotAllowedError(f"Client is already {status.value}")

        previous = client.status
        client.status = status.value
        client = await self.repo.update(client)
        await self.audit.record(
            actor,
            AuditAction.client_status_changed,
            ResourceType.client,
            resource_id=client.id,
            resource_name=client.name,
            description=reason or f"Client status changed to {status.value}",
            changes=[{"field": "status", "old_value": previous, "new_value": status.value}],
            severity=AuditSeverity.high if status is ClientStatus.suspended else None,
        )
        return client

    async def suspend_client(self, actor: AdminProfile, client_id: str, reason: Optional[str] = None) -> Client:
        return await self.set_status(actor, client_id, ClientStatus.suspended, reason)

    async def reactivate_client(self, actor: AdminProfile, client_id: str, reason: Optional[str] = None) -> Client:
        return await self.set_status(actor, client_id, ClientStatus.active, reason)

    # Client users

    async def list_users(self, client_id: str) -> List[ClientUser]:
        await self.get_client(client_id)
        return await self.users.list_by_client(client_id)

    async def create_user(self, actor: AdminProfile, client_id: str, data: ClientUserCreate) -> ClientUser:
        client = await self.get_client(client_id)
        email = validate_email(data.email)
        if await self.users.get_by_email(email):
            raise ConflictError("Email already exists")

        active_users = await self.users.count(filters={"client_id": client_id, "is_active": True})
        if client.max_users != -1 and active_users >= client.max_users:
            raise LimitExceededError(
                f"User limit reached for plan {client.plan_type} ({client.max_users} users)",
                context={"max_users": client.max_users, "current_users": active_users},
            )

        user = await self.users.create(
            ClientUser(
                client_id=client_id,
                email=email,
                first_name=data.first_name,
                last_name=data.last_name,
                role=data.role.value,
            )
        )
        await self.audit.record(
            actor,
            AuditAction.client_updated,
            ResourceType.user,
            resource_id=user.id,
            resource_name=user.full_name,
            description=f"Added user {user.email} to client {client.name}",
            context={"client_id": client_id, "role": user.role},
        )
        return user
