"""
Order models, read-only from the reviews service's point of view.
Includes: Order, OrderItem
"""
from sqlalchemy import Column, String, ForeignKey, Integer
from sqlalchemy.orm import relationship
from core.database import BaseModel, CHAR_LENGTH, GUID


ORDER_STATUS_COMPLETED = "completed"


class Order(BaseModel):
    """Placed order; guests are identified by the email used at checkout"""
    __tablename__ = "orders"
    __table_args__ = {'extend_existing': True}

    user_id = Column(GUID(), ForeignKey("users.id"), nullable=True, index=True)
    customer_email = Column(String(CHAR_LENGTH), nullable=True, index=True)
    # pending, confirmed, shipped, completed, cancelled, refunded
    status = Column(String(50), default="pending")

    items = relationship("OrderItem", back_populates="order",
                         cascade="all, delete-orphan", lazy="selectin")


class OrderItem(BaseModel):
    """Individual items within an order"""
    __tablename__ = "order_items"
    __table_args__ = {'extend_existing': True}

    order_id = Column(GUID(), ForeignKey("orders.id"), nullable=False)
    product_id = Column(GUID(), ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)

    order = relationship("Order", back_populates="items")
