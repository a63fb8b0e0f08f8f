"""FocuSprint.

This package contains the backend of FocuSprint, a multi-tenant SaaS
project-management platform.

High-level architecture
-----------------------

The platform has two faces:

- **Back office**: platform administrators manage clients (tenants), their
  licenses and plans, support tickets, feature flags and batch actions. Every
  admin request is checked against a role-based permission set and every
  mutation is written to the audit log.
- **Client dashboard**: members of a client organisation manage teams,
  projects, kanban columns, tasks and project chat.

Core subpackages
----------------

- ``focusprint.core``:

  - Logging, monitoring and error types shared by every layer.
  - SQLModel entities and async repositories.
  - Pydantic I/O models and domain enums.
  - Business services (RBAC, audit, licenses, trials, plan migrations,
    feature flags, tickets, bulk operations, workspace).

- ``focusprint.server``:

  - The FastAPI application, settings, middleware, exception handlers and
    the ``/api/admin`` and ``/api/client`` routers.

Typical workflow
----------------

Business operations follow the same sequence:

1. Validate the request (pydantic models plus service-level rules).
2. Mutate the database through a repository.
3. Write an audit log entry describing the change.
"""
