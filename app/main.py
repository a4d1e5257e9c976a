# app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from app.api.routers import audit_logs, auth, health, tasks, users
from app.application.exceptions import (
    ApplicationError,
    ConflictError,
    InvalidOperationError,
    NotFoundError,
)
from app.config.logging import configure_logging
from app.config.settings import get_settings
from app.domain.exceptions import DomainError, DomainValidationError
from app.infrastructure.database.session import create_tables, get_engine
from app.security.exceptions import AuthenticationError, AuthorizationError

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.environment != "prod":
        await create_tables(get_engine())
    logger.info("startup", extra={"environment": settings.environment})
    yield
    await get_engine().dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestLogging.
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message})


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request: Request, exc: DomainValidationError):
    return _error(422, exc.message)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return _error(400, exc.message)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return _error(401, exc.message)


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    return _error(403, exc.message)


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return _error(404, exc.message)


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return _error(409, exc.message)


@app.exception_handler(InvalidOperationError)
async def invalid_operation_error_handler(request: Request, exc: InvalidOperationError):
    return _error(400, exc.message)


@app.exception_handler(ApplicationError)
async def application_error_handler(request: Request, exc: ApplicationError):
    return _error(500, exc.message)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return _error(500, "Internal server error")


# Routers: /health, /auth, /tasks, /users, /audit-logs
app.include_router(health.router)
app.include_router(auth.router, prefix="/auth")
app.include_router(tasks.router, prefix="/tasks")
app.include_router(users.router, prefix="/users")
app.include_router(audit_logs.router, prefix="/audit-logs")
