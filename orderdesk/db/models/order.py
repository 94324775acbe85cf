"""Order model definition."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric, Enum
from sqlalchemy.orm import relationship

from .base import Base
from ...utils import generate_uuid


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class OrderStatus(enum.Enum):
    """Order status enum."""
    PENDING = 'PENDING'
    PAID = 'PAID'
    FULFILLED = 'FULFILLED'


class Order(Base):
    """Order model."""

    __tablename__ = 'Order'

    id = Column(String, primary_key=True, default=generate_uuid)
    userId = Column(String, nullable=False, index=True)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    totalAmount = Column(Numeric(12, 2), nullable=False)
    paidAt = Column(DateTime)
    createdAt = Column(DateTime, nullable=False, default=utcnow)
    modifiedAt = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.lineNumber",
    )

    @classmethod
    def create(cls, user_id: str, total_amount) -> 'Order':
        """Create a new pending order."""
        now = utcnow()
        return cls(
            id=generate_uuid(),
            userId=str(user_id),
            status=OrderStatus.PENDING,
            totalAmount=total_amount,
            createdAt=now,
            modifiedAt=now,
        )

    def to_dict(self) -> dict:
        """Column values keyed by attribute name."""
        return {
            'id': self.id,
            'userId': self.userId,
            'status': self.status.value if self.status else None,
            'totalAmount': self.totalAmount,
            'paidAt': self.paidAt,
            'createdAt': self.createdAt,
            'modifiedAt': self.modifiedAt,
        }

    def __repr__(self):
        """Return string representation."""
        return f'<Order(id="{self.id}", user="{self.userId}", status="{_value(self.status)}")>'


def _value(status):
    return status.value if isinstance(status, OrderStatus) else status
