"""FastAPI dependency injection: session, repositories, audit recorder, services, current user."""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.audit_query_service import AuditQueryService
from app.application.auth_service import AuthService
from app.application.task_service import TaskService
from app.application.user_service import UserService
from app.audit.hooks import AuditedTaskRepository
from app.audit.recorder import AuditRecorder
from app.audit.repository import AuditRepository
from app.config.settings import get_settings
from app.core.context import user_id_ctx
from app.infrastructure.database.audit_repository_db import DbAuditRepository
from app.infrastructure.database.models import UserRow
from app.infrastructure.database.session import get_db, get_sessionmaker
from app.infrastructure.database.task_store import SqlTaskStore
from app.infrastructure.database.user_repository_db import DbUserRepository
from app.observability.error_reporter import ErrorReporter, LoggingErrorReporter
from app.observability.metrics import MetricsCollector
from app.security.exceptions import AuthenticationError
from app.security.rbac import RBACService
from app.security.tokens import TokenService

_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Return singleton metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_rbac() -> RBACService:
    return RBACService()


def get_error_reporter(
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> ErrorReporter:
    return LoggingErrorReporter(logger=logging.getLogger("app.audit"), metrics=metrics)


def get_audit_repository() -> AuditRepository:
    """Audit store with its own sessions, separate from the request session."""
    return DbAuditRepository(get_sessionmaker())


def get_audit_recorder(
    repository: Annotated[AuditRepository, Depends(get_audit_repository)],
    reporter: Annotated[ErrorReporter, Depends(get_error_reporter)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> AuditRecorder:
    return AuditRecorder(repository=repository, reporter=reporter, metrics=metrics)


def get_task_repository(
    db: Annotated[AsyncSession, Depends(get_db)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> AuditedTaskRepository:
    return AuditedTaskRepository(
        SqlTaskStore(db),
        recorder,
        enabled=get_settings().audit_enabled,
    )


def get_user_repository(db: Annotated[AsyncSession, Depends(get_db)]) -> DbUserRepository:
    return DbUserRepository(db)


def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expiration_minutes=settings.jwt_expiration_minutes,
    )


def get_user_service(
    users: Annotated[DbUserRepository, Depends(get_user_repository)],
    tasks: Annotated[AuditedTaskRepository, Depends(get_task_repository)],
) -> UserService:
    return UserService(users=users, tasks=tasks, logger=logging.getLogger("app.users"))


def get_auth_service(
    users: Annotated[DbUserRepository, Depends(get_user_repository)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(
        users=users,
        user_service=user_service,
        tokens=tokens,
        logger=logging.getLogger("app.auth"),
    )


def get_task_service(
    repository: Annotated[AuditedTaskRepository, Depends(get_task_repository)],
    users: Annotated[DbUserRepository, Depends(get_user_repository)],
    rbac: Annotated[RBACService, Depends(get_rbac)],
) -> TaskService:
    return TaskService(
        repository=repository,
        users=users,
        rbac=rbac,
        logger=logging.getLogger("app.tasks"),
    )


def get_audit_query_service(
    repository: Annotated[AuditRepository, Depends(get_audit_repository)],
) -> AuditQueryService:
    return AuditQueryService(repository)


async def get_current_user(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> UserRow:
    """Resolve the Bearer token to a user; attach the user id to request state and logging context."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Not authorized to access this route")
    user = await auth_service.resolve(token.strip())
    request.state.user_id = str(user.id)
    user_id_ctx.set(str(user.id))
    return user


def require_admin(
    user: Annotated[UserRow, Depends(get_current_user)],
    rbac: Annotated[RBACService, Depends(get_rbac)],
) -> UserRow:
    rbac.check_permission(user.roles, "manage_users", "Admin access required")
    return user
