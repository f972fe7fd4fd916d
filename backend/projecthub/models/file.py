"""
Project file metadata.

Only metadata lives here; the blob itself sits in object storage and is
referenced by ``file_url``.
"""

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, ForeignKey, String, Text

from projecthub.db.base_class import Base, new_uuid, utcnow
from projecthub.models.enums import FileCategory, values


class ProjectFile(Base):
    __tablename__ = "project_files"
    __table_args__ = (
        CheckConstraint(f"category IN ({values(FileCategory)})", name="ck_project_files_category"),
    )

    id = Column(String(64), primary_key=True, default=new_uuid)
    project_id = Column(
        String(64),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    task_id = Column(
        String(64),
        ForeignKey("tasks.id", ondelete="SET NULL"),
        nullable=True,
    )
    file_name = Column(String(255), nullable=False)
    file_url = Column(Text, nullable=False)
    file_type = Column(String(127), nullable=False)
    file_size = Column(BigInteger, nullable=True)
    category = Column(String(16), nullable=False, default=FileCategory.OTHER.value)
    caption = Column(Text, nullable=True)
    uploaded_by = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
