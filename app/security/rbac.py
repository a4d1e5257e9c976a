"""Role-based access control. No FastAPI."""

from typing import Iterable

from app.domain.models.user import Role
from app.security.exceptions import AuthorizationError

# Permission matrix:
# Role    Manage own tasks  View all tasks  Assign owner  Manage users  View audit logs
# ADMIN   ✓                 ✓               ✓             ✓             ✓
# USER    ✓                 ✗               ✗             ✗             ✗

_ACTION_PERMISSIONS: dict[tuple[Role, str], bool] = {
    (Role.ADMIN, "manage_own_tasks"): True,
    (Role.ADMIN, "view_all_tasks"): True,
    (Role.ADMIN, "assign_owner"): True,
    (Role.ADMIN, "manage_users"): True,
    (Role.ADMIN, "view_audit_logs"): True,
    (Role.USER, "manage_own_tasks"): True,
    (Role.USER, "view_all_tasks"): False,
    (Role.USER, "assign_owner"): False,
    (Role.USER, "manage_users"): False,
    (Role.USER, "view_audit_logs"): False,
}


class RBACService:
    """Check permission for a user's roles and an action. Raise AuthorizationError if invalid."""

    def is_allowed(self, roles: Iterable[str], action: str) -> bool:
        for name in roles:
            try:
                role = Role(name)
            except ValueError:
                continue
            if _ACTION_PERMISSIONS.get((role, action), False):
                return True
        return False

    def check_permission(self, roles: Iterable[str], action: str, message: str | None = None) -> None:
        """Raises AuthorizationError unless at least one role grants action."""
        roles = list(roles)
        if not self.is_allowed(roles, action):
            raise AuthorizationError(
                message or f"Roles {roles} do not have permission for action '{action}'"
            )
