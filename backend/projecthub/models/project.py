"""
Project and membership models.

The owner is ``Project.user_id``; ``project_members`` only lists the
additional collaborators.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)

from projecthub.db.base_class import Base, TimestampMixin, new_uuid, utcnow
from projecthub.models.enums import MemberRole, ProjectStatus, ProjectType, Visibility, values


class Project(TimestampMixin, Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint(f"project_type IN ({values(ProjectType)})", name="ck_projects_type"),
        CheckConstraint(f"status IN ({values(ProjectStatus)})", name="ck_projects_status"),
        CheckConstraint(f"visibility IN ({values(Visibility)})", name="ck_projects_visibility"),
        CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="ck_projects_progress",
        ),
    )

    id = Column(String(64), primary_key=True, default=new_uuid)
    user_id = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    project_type = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default=ProjectStatus.PLANNING.value)
    visibility = Column(String(16), nullable=False, default=Visibility.PRIVATE.value)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    budget = Column(Numeric(12, 2), nullable=True)
    funding_source = Column(String(255), nullable=True)
    cover_image_url = Column(Text, nullable=True)
    progress_percentage = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, title={self.title!r}, status={self.status})>"


class ProjectMember(Base):
    __tablename__ = "project_members"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_members_project_user"),
        CheckConstraint(f"role IN ({values(MemberRole)})", name="ck_project_members_role"),
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
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(String(16), nullable=False, default=MemberRole.MEMBER.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
