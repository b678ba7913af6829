"""
Print Order Models

An order is a basket of uploaded PDFs, each with its own print options.
Status moves PENDING -> PAYMENT_CONFIRMED -> PRINTING -> READY_FOR_DELIVERY
-> OUT_FOR_DELIVERY -> DELIVERED, with CANCELLED as a side exit. Every status
change appends a row to order_status_history.
"""

from sqlalchemy import Column, String, DateTime, Integer, Float, ForeignKey, Enum as SQLEnum, Text, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, JSONType, generate_uuid


class OrderStatus(str, enum.Enum):
    """Fulfillment status"""
    PENDING = "PENDING"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
    PRINTING = "PRINTING"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# Forward pipeline; CANCELLED sits outside it
STATUS_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.PAYMENT_CONFIRMED,
    OrderStatus.PRINTING,
    OrderStatus.READY_FOR_DELIVERY,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]

PENDING_STATUSES = (OrderStatus.PENDING, OrderStatus.PAYMENT_CONFIRMED, OrderStatus.PRINTING)
DELIVERY_STATUSES = (OrderStatus.READY_FOR_DELIVERY, OrderStatus.OUT_FOR_DELIVERY)


def is_forward_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """True when target is later in the pipeline, or a cancellation of an undelivered order"""
    if current == target:
        return True
    if target == OrderStatus.CANCELLED:
        return current != OrderStatus.DELIVERED
    if current == OrderStatus.CANCELLED:
        return False
    return STATUS_SEQUENCE.index(target) > STATUS_SEQUENCE.index(current)


class PaymentStatus(str, enum.Enum):
    """Payment status, independent of fulfillment"""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class PrintType(str, enum.Enum):
    BW = "BW"
    COLOR = "COLOR"


class PaperSize(str, enum.Enum):
    A4 = "A4"
    A3 = "A3"
    A5 = "A5"
    LETTER = "LETTER"
    LEGAL = "LEGAL"


class PrintSide(str, enum.Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"


class Order(Base):
    """Print order placed by a customer"""
    __tablename__ = "orders"

    __table_args__ = (
        Index('ix_orders_user_created', 'user_id', 'created_at'),
        Index('ix_orders_status', 'status'),
        Index('ix_orders_created_at', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    order_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    status = Column(SQLEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False)
    payment_status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)

    total_amount = Column(Float, default=0.0, nullable=False)  # INR
    payment_id = Column(String(255), nullable=True)  # UPI transaction reference

    # Address as it was when the order was placed
    delivery_address = Column(JSONType, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    paid_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )
    status_history = relationship(
        "OrderStatusHistory", back_populates="order", cascade="all, delete-orphan",
        order_by="OrderStatusHistory.changed_at.desc()",
    )

    @property
    def item_count(self) -> int:
        """Number of files; needs items loaded"""
        return len(self.items)

    def __repr__(self):
        return f"<Order {self.order_number} {self.status}>"


class OrderItem(Base):
    """One uploaded document and its print options"""
    __tablename__ = "order_items"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    order_id = Column(GUID, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, default=0, nullable=False)

    file_name = Column(String(500), nullable=False)
    file_url = Column(Text, nullable=False)

    page_count = Column(Integer, nullable=False)  # pages in the document
    page_range = Column(String(255), nullable=True)
    pages_to_print = Column(Integer, nullable=False)
    copies = Column(Integer, default=1, nullable=False)

    print_type = Column(SQLEnum(PrintType), default=PrintType.BW, nullable=False)
    paper_size = Column(SQLEnum(PaperSize), default=PaperSize.A4, nullable=False)
    print_side = Column(SQLEnum(PrintSide), default=PrintSide.SINGLE, nullable=False)

    price = Column(Float, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    order = relationship("Order", back_populates="items")

    @property
    def printed_pages(self) -> int:
        """Pages that go through the printer across all copies"""
        return self.pages_to_print * self.copies


class OrderStatusHistory(Base):
    """Append-only log of status changes"""
    __tablename__ = "order_status_history"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    order_id = Column(GUID, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SQLEnum(OrderStatus), nullable=False)
    changed_by = Column(GUID, nullable=True)  # user id of the actor
    notes = Column(Text, nullable=True)
    changed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    order = relationship("Order", back_populates="status_history")
