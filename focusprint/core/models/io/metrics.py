"""
Platform metrics I/O models.

Revenue figures are monthly recurring revenue in the plan currency, derived
from the price of each active client's plan.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class MetricsOverview(BaseModel):
    total_clients: int
    active_clients: int
    total_licenses: int
    active_licenses: int
    mrr: float = Field(description="Monthly recurring revenue")
    arr: float = Field(description="Annual recurring revenue")


class CountShare(BaseModel):
    """One bucket of a distribution, with its share of the total in percent."""

    key: str
    count: int
    percentage: int


class RevenueByPlan(BaseModel):
    plan_type: str
    clients: int
    monthly_revenue: float
    annual_revenue: float


class GrowthMetrics(BaseModel):
    new_clients_this_month: int
    new_clients_last_month: int
    growth_rate: int = Field(description="Month over month change in new clients, in percent")


class PlatformMetrics(BaseModel):
    overview: MetricsOverview
    clients_by_plan: List[CountShare]
    clients_by_status: List[CountShare]
    licenses_by_status: List[CountShare]
    revenue_breakdown: List[RevenueByPlan]
    growth_metrics: GrowthMetrics


class ClientMetrics(BaseModel):
    """Usage of one client workspace against its plan limits."""

    client_id: str
    client_name: str
    plan_type: str
    status: str
    total_users: int
    active_users: int
    max_users: int
    total_teams: int
    total_projects: int
    active_projects: int
    archived_projects: int
    max_projects: int
    total_tasks: int
    open_tickets: int
    license_status: Optional[str] = None
    license_expires_at: Optional[datetime] = None
    created_at: datetime


class DashboardKpis(BaseModel):
    mrr: float
    arr: float
    total_clients: int
    active_clients: int
    total_users: int
    active_users: int
    active_trials: int
    trial_conversion_rate: float


class RecentActivity(BaseModel):
    new_clients_7d: int
    new_users_7d: int
    support_tickets_7d: int
    impersonations_7d: int


class SupportOverview(BaseModel):
    open_tickets: int
    unassigned_tickets: int
    sla_breached: int


class HealthIndicators(BaseModel):
    platform_health: str
    support_health: str
    overall_health: str


class AdminDashboard(BaseModel):
    kpis: DashboardKpis
    client_distribution: List[CountShare]
    revenue_breakdown: List[RevenueByPlan]
    recent_activity: RecentActivity
    support: SupportOverview
    health_indicators: HealthIndicators
    generated_at: datetime
