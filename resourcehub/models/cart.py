import uuid
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from resourcehub.database import Base
from resourcehub.models.profile import utcnow


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    resource_id = Column(String(36), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price_at_time = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    resource = relationship("Resource", back_populates="cart_items", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "resource_id", name="uq_cart_items_user_resource"),
        Index("idx_cart_items_user", "user_id"),
    )

    @property
    def subtotal(self) -> Decimal:
        return Decimal(self.quantity) * Decimal(self.price_at_time)
