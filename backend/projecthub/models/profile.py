"""
Profile Model

Application-level user record. Only the bcrypt hash of the password is
stored; it never leaves the gateway.
"""

from sqlalchemy import CheckConstraint, Column, String, Text

from projecthub.db.base_class import Base, TimestampMixin, new_uuid
from projecthub.models.enums import UserRole, values


class Profile(TimestampMixin, Base):
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(f"role IN ({values(UserRole)})", name="ck_profiles_role"),
    )

    id = Column(String(64), primary_key=True, default=new_uuid)
    email = Column(String(320), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=True)
    avatar_url = Column(Text, nullable=True)
    bio = Column(String(500), nullable=True)
    role = Column(String(16), nullable=False, default=UserRole.USER.value)
    password_hash = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email}, role={self.role})>"
