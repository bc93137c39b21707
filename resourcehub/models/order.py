import enum
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import relationship

from resourcehub.database import Base
from resourcehub.models.profile import enum_column, utcnow


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    buyer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    resource_id = Column(String(36), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)  # price snapshot at creation, never re-read
    status = enum_column(OrderStatus, nullable=False, default=OrderStatus.PENDING)
    buyer_cfx_id = Column(String(50), nullable=True)
    buyer_email = Column(String(255), nullable=True)
    buyer_username = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    resource = relationship("Resource", back_populates="orders", lazy="selectin")
    buyer = relationship("Profile", foreign_keys=[buyer_id], lazy="selectin")
    downloads = relationship("Download", back_populates="order", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("idx_orders_buyer", "buyer_id"),
        Index("idx_orders_resource", "resource_id"),
        Index("idx_orders_status", "status"),
        Index("idx_orders_created", "created_at"),
    )

    def escrow_values(self) -> dict[str, str | None]:
        return {
            "cfx_id": self.buyer_cfx_id,
            "email": self.buyer_email,
            "username": self.buyer_username,
        }


class Download(Base):
    __tablename__ = "downloads"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    buyer_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    resource_id = Column(String(36), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False)
    downloaded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    order = relationship("Order", back_populates="downloads")

    __table_args__ = (
        Index("idx_downloads_order", "order_id"),
    )
