"""Actor attribution for the request boundary."""

from app.audit.actor import ActorContext
from app.domain.models.user import primary_role
from app.infrastructure.database.models import UserRow


def actor_for(user: UserRow) -> ActorContext:
    """Snapshot of the acting user: id, email as display name, first role."""
    return ActorContext(id=user.id, display_name=user.email, role=primary_role(user.roles or []))
