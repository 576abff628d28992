import enum

from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from shared.config.database import Base


class OrderStatus(str, enum.Enum):
    CREATED = "CREATED"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class Order(Base):
    """
    A closed, point-in-time record of a purchase.

    User and product fields are copies taken when the order was created,
    not references: later changes in the user or product services never
    reach an existing order. Only `status` changes after insert.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String(64), nullable=False, index=True)
    user_name = Column(String(255), nullable=False)
    user_email = Column(String(255), nullable=False)

    product_id = Column(String(64), nullable=False)
    product_name = Column(String(255), nullable=False)
    product_price = Column(Numeric(12, 2), nullable=False)

    quantity = Column(Integer, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False) # frozen at creation
    status = Column(String(32), nullable=False, default=OrderStatus.CREATED.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
