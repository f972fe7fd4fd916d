from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, String, Text

from projecthub.db.base_class import Base, TimestampMixin, new_uuid
from projecthub.models.enums import TaskPriority, TaskStatus, values


class Task(TimestampMixin, Base):
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(f"status IN ({values(TaskStatus)})", name="ck_tasks_status"),
        CheckConstraint(f"priority IN ({values(TaskPriority)})", name="ck_tasks_priority"),
    )

    id = Column(String(64), primary_key=True, default=new_uuid)
    project_id = Column(
        String(64),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True, default="")
    status = Column(String(16), nullable=False, default=TaskStatus.TODO.value)
    priority = Column(String(16), nullable=False, default=TaskPriority.MEDIUM.value)
    due_date = Column(Date, nullable=True)
    assigned_to = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, project_id={self.project_id}, status={self.status})>"
