"""
Order models.

An order is a client's purchase of one package of a gig. Its status moves
through the workflow in app.services.order_workflow and every change is
recorded in order_status_history.
"""

import enum
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Text, Enum, ForeignKey, JSON, func
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.core.database import Base


class OrderStatus(str, enum.Enum):
    """
    Order status lifecycle:

    PENDING -> ACCEPTED -> IN_PROGRESS -> DELIVERED -> COMPLETED
                                              |
                                          DISPUTED -> COMPLETED

    CANCELLED is reachable from PENDING, ACCEPTED, IN_PROGRESS and DISPUTED.
    """
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    DELIVERED = "DELIVERED"
    DISPUTED = "DISPUTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), unique=True, nullable=False, index=True)

    gig_id = Column(Integer, ForeignKey("gigs.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    freelancer_id = Column(Integer, ForeignKey("freelancer_profiles.id"), nullable=False, index=True)

    # Snapshot of what was bought
    package = Column(String, nullable=False)
    total_price = Column(Float, nullable=False)
    requirements = Column(Text, nullable=True)
    custom_details = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    is_urgent = Column(Boolean, default=False, nullable=False)
    priority_fee = Column(Float, nullable=True)

    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    delivery_deadline = Column(DateTime(timezone=True), nullable=False)
    delivery_extensions = Column(Integer, default=0, nullable=False)
    extension_reason = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancellation_date = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    gig = relationship("Gig", back_populates="orders")
    client = relationship("User", foreign_keys=[client_id])
    freelancer = relationship("FreelancerProfile", back_populates="orders")
    status_history = relationship(
        "OrderStatusHistory",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderStatusHistory.id",
    )

    def is_party(self, user_id: int) -> bool:
        """True if the user is this order's client or its freelancer."""
        if self.client_id == user_id:
            return True
        return self.freelancer is not None and self.freelancer.user_id == user_id

    def __repr__(self):
        return f"<Order(id={self.id}, number='{self.order_number}', status={self.status.value})>"


class OrderStatusHistory(Base):
    """Append-only audit entry. Rows are never updated."""
    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(OrderStatus), nullable=False)
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="status_history")

    def __repr__(self):
        return f"<OrderStatusHistory(order_id={self.order_id}, status={self.status.value})>"
