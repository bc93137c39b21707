import enum
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from resourcehub.database import Base
from resourcehub.models.profile import enum_column, utcnow


class SellerRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SellerRequest(Base):
    __tablename__ = "seller_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    status = enum_column(SellerRequestStatus, nullable=False, default=SellerRequestStatus.PENDING)
    business_name = Column(String(100), nullable=False)
    business_type = Column(String(50), nullable=False)
    motivation = Column(Text, nullable=False)
    resolved_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("Profile", foreign_keys=[user_id], lazy="selectin")

    __table_args__ = (
        Index("idx_seller_requests_user", "user_id"),
        Index("idx_seller_requests_status", "status"),
    )
