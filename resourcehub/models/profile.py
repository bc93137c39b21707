import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Index, String
from sqlalchemy.orm import relationship

from resourcehub.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


def enum_column(enum_cls, **kwargs):
    """String-backed enum column persisting member values, not names."""
    return Column(
        Enum(enum_cls, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        **kwargs,
    )


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(128), nullable=False)
    username = Column(String(50), nullable=False)
    role = enum_column(UserRole, nullable=False, default=UserRole.BUYER)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    resources = relationship(
        "Resource",
        back_populates="author",
        foreign_keys="Resource.author_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_profiles_email", "email"),
        Index("idx_profiles_role", "role"),
    )
