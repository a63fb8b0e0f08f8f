"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- admins: Admin profiles and permission context
- audit: Audit log entries and statistics
- clients: Clients and client users
- plans: Subscription plans
- licenses: Licenses and trial reporting
- plan_migrations: Plan migration validation and records
- feature_flags: Feature flags, overrides, history and evaluation
- tickets: Support tickets and comments
- bulk_operations: Bulk operation requests, progress and capabilities
- workspace: Client dashboard teams, projects, columns, tasks and messages
- impersonation: Client impersonation sessions and their history
- metrics: Platform, client and dashboard metrics
"""
