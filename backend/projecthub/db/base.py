"""Import every model so ``Base.metadata`` is complete (Alembic, create_all)."""

from projecthub.db.base_class import Base  # noqa: F401
from projecthub.models import (  # noqa: F401
    ChatMessage,
    ChatParticipant,
    ChatRoom,
    Profile,
    Project,
    ProjectFile,
    ProjectMember,
    ProjectUpdate,
    Task,
)
