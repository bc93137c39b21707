import enum
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from resourcehub.database import Base
from resourcehub.models.profile import enum_column, utcnow


class ResourceStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class ResourceType(str, enum.Enum):
    ESCROW = "escrow"
    DIRECT = "direct"


class Framework(str, enum.Enum):
    ESX = "ESX"
    QBCORE = "QBCore"
    STANDALONE = "Standalone"


class Category(str, enum.Enum):
    POLICE = "Police"
    CIVILIAN = "Civilian"
    UI = "UI"
    JOBS = "Jobs"
    VEHICLES = "Vehicles"


class Resource(Base):
    __tablename__ = "resources"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    author_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False, default=0)
    resource_type = enum_column(ResourceType, nullable=False)
    framework = enum_column(Framework, nullable=True)
    category = enum_column(Category, nullable=True)
    status = enum_column(ResourceStatus, nullable=False, default=ResourceStatus.DRAFT)
    download_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    author = relationship("Profile", back_populates="resources", foreign_keys=[author_id], lazy="selectin")
    images = relationship(
        "ResourceImage",
        back_populates="resource",
        order_by="ResourceImage.upload_order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    file = relationship(
        "ResourceFile",
        back_populates="resource",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    escrow_info = relationship(
        "EscrowInfo",
        back_populates="resource",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    orders = relationship("Order", back_populates="resource", cascade="all, delete-orphan", passive_deletes=True)
    cart_items = relationship(
        "CartItem", back_populates="resource", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_resources_author", "author_id"),
        Index("idx_resources_status", "status"),
        Index("idx_resources_created", "created_at"),
        Index("idx_resources_status_framework", "status", "framework"),
    )

    @property
    def thumbnail(self):
        for image in self.images:
            if image.is_thumbnail:
                return image
        return None


class ResourceImage(Base):
    __tablename__ = "resource_images"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id = Column(String(36), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False)
    url = Column(String(1024), nullable=False)
    file_name = Column(String(255), nullable=False)
    content_type = Column(String(50), nullable=False)
    size = Column(Integer, nullable=False)
    is_thumbnail = Column(Boolean, nullable=False, default=False)
    upload_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    resource = relationship("Resource", back_populates="images")

    __table_args__ = (
        Index("idx_resource_images_resource", "resource_id"),
    )


class ResourceFile(Base):
    __tablename__ = "resource_files"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id = Column(
        String(36), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    file_url = Column(String(1024), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    content_type = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    resource = relationship("Resource", back_populates="file")


class EscrowInfo(Base):
    __tablename__ = "resource_escrow_info"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id = Column(
        String(36), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    requires_cfx_id = Column(Boolean, nullable=False, default=False)
    requires_email = Column(Boolean, nullable=False, default=False)
    requires_username = Column(Boolean, nullable=False, default=False)
    delivery_instructions = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    resource = relationship("Resource", back_populates="escrow_info")

    def required_fields(self) -> list[str]:
        """Buyer-supplied order fields this escrow resource needs for delivery."""
        fields = []
        if self.requires_cfx_id:
            fields.append("cfx_id")
        if self.requires_email:
            fields.append("email")
        if self.requires_username:
            fields.append("username")
        return fields
