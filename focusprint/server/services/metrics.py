"""
Platform metrics service.

Aggregates clients, licenses, plans, tickets and impersonation sessions into
the numbers shown on the admin dashboard. Recurring revenue counts every
active client at the monthly price of the plan matching its plan type;
yearly plans contribute a twelfth of their price.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from focusprint.core.database.base import utc_now
from focusprint.core.database.entities.clients import Client, ClientUser
from focusprint.core.database.entities.impersonation import ImpersonationSession
from focusprint.core.database.entities.plans import Plan
from focusprint.core.database.entities.tickets import Ticket
from focusprint.core.database.entities.workspace import Project, Task
from focusprint.core.database.repositories.clients import ClientRepository, ClientUserRepository
from focusprint.core.database.repositories.impersonation import ImpersonationSessionRepository
from focusprint.core.database.repositories.licenses import LicenseRepository
from focusprint.core.database.repositories.plans import PlanRepository
from focusprint.core.database.repositories.tickets import TicketRepository
from focusprint.core.database.repositories.workspace import ProjectRepository, TaskRepository, TeamRepository
from focusprint.core.errors import NotFoundError
from focusprint.core.logging_config import get_logger
from focusprint.core.models.domain.enums import (
    BillingInterval,
    ClientStatus,
    HealthIndicator,
    LicenseStatus,
    ProjectStatus,
)
from focusprint.core.models.io.metrics import (
    AdminDashboard,
    ClientMetrics,
    CountShare,
    DashboardKpis,
    GrowthMetrics,
    HealthIndicators,
    MetricsOverview,
    PlatformMetrics,
    RecentActivity,
    RevenueByPlan,
    SupportOverview,
)

from .audit import AuditService
from .tickets import CLOSED_STATUSES
from .trials import TrialService

logger = get_logger(__name__)

HEALTH_SCORES: Dict[HealthIndicator, int] = {
    HealthIndicator.excellent: 4,
    HealthIndicator.good: 3,
    HealthIndicator.warning: 2,
    HealthIndicator.critical: 1,
}


def distribution(counts: Dict[str, int]) -> List[CountShare]:
    """Buckets sorted by count, largest first, with whole-percent shares."""
    total = sum(counts.values())
    return [
        CountShare(key=key, count=count, percentage=round(count / total * 100) if total else 0)
        for key, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def monthly_price(plan: Plan) -> float:
    if plan.interval == BillingInterval.year.value:
        return plan.price / 12
    return plan.price


def growth_rate(current: int, previous: int) -> int:
    if previous:
        return round((current - previous) / previous * 100)
    return 100 if current else 0


def grade(score: int, max_score: int) -> HealthIndicator:
    """Map a score out of ``max_score`` onto a health indicator."""
    ratio = score / max_score if max_score else 0
    if ratio >= 5 / 6:
        return HealthIndicator.excellent
    if ratio >= 1 / 2:
        return HealthIndicator.good
    if ratio >= 1 / 6:
        return HealthIndicator.warning
    return HealthIndicator.critical


def overall_health(indicators: List[HealthIndicator]) -> HealthIndicator:
    average = sum(HEALTH_SCORES[i] for i in indicators) / len(indicators)
    if average >= 3.5:
        return HealthIndicator.excellent
    if average >= 2.5:
        return HealthIndicator.good
    if average >= 1.5:
        return HealthIndicator.warning
    return HealthIndicator.critical


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class MetricsService:
    def __init__(self, session: AsyncSession, audit: AuditService) -> None:
        self.clients = ClientRepository(session)
        self.users = ClientUserRepository(session)
        self.licenses = LicenseRepository(session)
        self.plans = PlanRepository(session)
        self.tickets = TicketRepository(session)
        self.teams = TeamRepository(session)
        self.projects = ProjectRepository(session)
        self.tasks = TaskRepository(session)
        self.impersonations = ImpersonationSessionRepository(session)
        self.trials = TrialService(session, audit)

    async def revenue_breakdown(self) -> List[RevenueByPlan]:
        prices = {plan.code: monthly_price(plan) for plan in await self.plans.list()}
        active_by_plan = await self.clients.count_by(
            "plan_type", conditions=[Client.status == ClientStatus.active.value]
        )
        breakdown = []
        for plan_type, clients in sorted(active_by_plan.items()):
            monthly = round(clients * prices.get(plan_type, 0.0), 2)
            breakdown.append(
                RevenueByPlan(
                    plan_type=plan_type,
                    clients=clients,
                    monthly_revenue=monthly,
                    annual_revenue=round(monthly * 12, 2),
                )
            )
        return breakdown

    async def platform_metrics(self) -> PlatformMetrics:
        """Client, license and revenue totals plus month over month client growth."""
        clients_by_status = await self.clients.count_by("status")
        licenses_by_status = await self.licenses.count_by("status")
        revenue = await self.revenue_breakdown()
        mrr = round(sum(item.monthly_revenue for item in revenue), 2)

        this_month = month_start(utc_now())
        last_month = month_start(this_month - timedelta(days=1))
        new_this_month = await self.clients.count(conditions=[Client.created_at >= this_month])
        new_last_month = await self.clients.count(
            conditions=[Client.created_at >= last_month, Client.created_at < this_month]
        )

        return PlatformMetrics(
            overview=MetricsOverview(
                total_clients=sum(clients_by_status.values()),
                active_clients=clients_by_status.get(ClientStatus.active.value, 0),
                total_licenses=sum(licenses_by_status.values()),
                active_licenses=licenses_by_status.get(LicenseStatus.active.value, 0),
                mrr=mrr,
                arr=round(mrr * 12, 2),
            ),
            clients_by_plan=distribution(await self.clients.count_by("plan_type")),
            clients_by_status=distribution(clients_by_status),
            licenses_by_status=distribution(licenses_by_status),
            revenue_breakdown=revenue,
            growth_metrics=GrowthMetrics(
                new_clients_this_month=new_this_month,
                new_clients_last_month=new_last_month,
                growth_rate=growth_rate(new_this_month, new_last_month),
            ),
        )

    async def client_metrics(self, client_id: str) -> ClientMetrics:
        client = await self.clients.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client")

        live = [Project.client_id == client_id, Project.deleted_at.is_(None)]
        client_projects = select(Project.id).where(Project.client_id == client_id)
        latest = await self.licenses.list(limit=1, filters={"client_id": client_id})
        license_ = latest[0] if latest else None
        expires_at = None
        if license_ is not None:
            expires_at = license_.trial_ends_at if license_.status == LicenseStatus.trial.value else license_.end_date

        return ClientMetrics(
            client_id=client.id,
            client_name=client.name,
            plan_type=client.plan_type,
            status=client.status,
            total_users=await self.users.count(filters={"client_id": client_id}),
            active_users=await self.users.count(filters={"client_id": client_id, "is_active": True}),
            max_users=client.max_users,
            total_teams=await self.teams.count(filters={"client_id": client_id}),
            total_projects=await self.projects.count(conditions=live),
            active_projects=await self.projects.count(
                conditions=[*live, Project.archived_at.is_(None), Project.status == ProjectStatus.active.value]
            ),
            archived_projects=await self.projects.count(conditions=[*live, Project.archived_at.is_not(None)]),
            max_projects=client.max_projects,
            total_tasks=await self.tasks.count(conditions=[Task.project_id.in_(client_projects)]),
            open_tickets=await self.tickets.count(
                conditions=[Ticket.client_id == client_id, Ticket.status.not_in(CLOSED_STATUSES)]
            ),
            license_status=license_.status if license_ else None,
            license_expires_at=expires_at,
            created_at=client.created_at,
        )

    async def dashboard(self) -> AdminDashboard:
        """KPIs, recent activity, support load and health indicators in one payload."""
        now = utc_now()
        week_ago = now - timedelta(days=7)
        platform = await self.platform_metrics()
        overview = platform.overview
        trial_stats = await self.trials.get_trial_stats()

        open_tickets = [Ticket.status.not_in(CLOSED_STATUSES)]
        support = SupportOverview(
            open_tickets=await self.tickets.count(conditions=open_tickets),
            unassigned_tickets=await self.tickets.count(conditions=[*open_tickets, Ticket.assigned_to.is_(None)]),
            sla_breached=await self.tickets.count(conditions=[*open_tickets, Ticket.sla_due_at < now]),
        )
        activity = RecentActivity(
            new_clients_7d=await self.clients.count(conditions=[Client.created_at >= week_ago]),
            new_users_7d=await self.users.count(conditions=[ClientUser.created_at >= week_ago]),
            support_tickets_7d=await self.tickets.count(conditions=[Ticket.created_at >= week_ago]),
            impersonations_7d=await self.impersonations.count(
                conditions=[ImpersonationSession.started_at >= week_ago]
            ),
        )

        growth = platform.growth_metrics.growth_rate
        active_ratio = overview.active_clients / overview.total_clients if overview.total_clients else 0
        platform_health = grade(
            (2 if growth > 20 else 1 if growth > 0 else 0)
            + (2 if active_ratio > 0.8 else 1 if active_ratio > 0.6 else 0)
            + (2 if activity.new_users_7d > 10 else 1 if activity.new_users_7d > 0 else 0),
            6,
        )
        breached_ratio = support.sla_breached / support.open_tickets if support.open_tickets else 0
        unassigned_ratio = support.unassigned_tickets / support.open_tickets if support.open_tickets else 0
        support_health = grade(
            (2 if breached_ratio == 0 else 1 if breached_ratio < 0.1 else 0)
            + (2 if unassigned_ratio == 0 else 1 if unassigned_ratio < 0.25 else 0),
            4,
        )

        logger.debug(f"Dashboard built: {overview.total_clients} clients, {support.open_tickets} open tickets")
        return AdminDashboard(
            kpis=DashboardKpis(
                mrr=overview.mrr,
                arr=overview.arr,
                total_clients=overview.total_clients,
                active_clients=overview.active_clients,
                total_users=await self.users.count(),
                active_users=await self.users.count(filters={"is_active": True}),
                active_trials=trial_stats.active,
                trial_conversion_rate=trial_stats.conversion_rate,
            ),
            client_distribution=platform.clients_by_plan,
            revenue_breakdown=platform.revenue_breakdown,
            recent_activity=activity,
            support=support,
            health_indicators=HealthIndicators(
                platform_health=platform_health.value,
                support_health=support_health.value,
                overall_health=overall_health([platform_health, support_health]).value,
            ),
            generated_at=now,
        )
