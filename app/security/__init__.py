"""Security: RBAC, password hashing, access tokens. No FastAPI."""

from app.security.passwords import hash_password, verify_password
from app.security.rbac import RBACService
from app.security.tokens import TokenService

__all__ = [
    "RBACService",
    "TokenService",
    "hash_password",
    "verify_password",
]
