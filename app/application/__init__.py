# Application layer: services that orchestrate domain, audit and infrastructure.

from app.application.exceptions import (
    ApplicationError,
    ConflictError,
    InvalidOperationError,
    NotFoundError,
)

__all__ = [
    "ApplicationError",
    "ConflictError",
    "InvalidOperationError",
    "NotFoundError",
]
