from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, JSON, String, Text

from projecthub.db.base_class import Base, new_uuid, utcnow
from projecthub.models.enums import UpdateType, values


class ProjectUpdate(Base):
    """Append-only activity entry for a project."""

    __tablename__ = "project_updates"
    __table_args__ = (
        CheckConstraint(f"update_type IN ({values(UpdateType)})", name="ck_project_updates_type"),
    )

    id = Column(String(64), primary_key=True, default=new_uuid)
    project_id = Column(
        String(64),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    update_type = Column(String(32), nullable=False, default=UpdateType.GENERAL.value)
    update_text = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
