"""OrderItem model definition."""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from .base import Base
from ...utils import generate_uuid


@dataclass(frozen=True)
class LineItem:
    """One line of an order request, before it is persisted."""

    product_id: str
    quantity: int
    unit_price: Decimal

    @property
    def amount(self) -> Decimal:
        return Decimal(str(self.unit_price)) * self.quantity


class OrderItem(Base):
    """OrderItem model."""

    __tablename__ = 'OrderItem'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_order_item_quantity_positive'),
        CheckConstraint('"unitPrice" >= 0', name='ck_order_item_price_non_negative'),
    )

    id = Column(String, primary_key=True, default=generate_uuid)
    orderId = Column(String, ForeignKey('Order.id', ondelete='CASCADE'), nullable=False, index=True)
    lineNumber = Column(Integer, nullable=False)
    productId = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unitPrice = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")

    @classmethod
    def from_line_item(cls, order_id: str, line: LineItem, line_number: int) -> 'OrderItem':
        """Build the persisted row for one requested line."""
        return cls(
            id=generate_uuid(),
            orderId=order_id,
            lineNumber=line_number,
            productId=str(line.product_id),
            quantity=line.quantity,
            unitPrice=Decimal(str(line.unit_price)),
        )

    def to_dict(self) -> dict:
        """Column values keyed by attribute name."""
        return {
            'id': self.id,
            'orderId': self.orderId,
            'lineNumber': self.lineNumber,
            'productId': self.productId,
            'quantity': self.quantity,
            'unitPrice': self.unitPrice,
        }

    def __repr__(self):
        """Return string representation."""
        return f'<OrderItem(id="{self.id}", order="{self.orderId}", product="{self.productId}")>'
