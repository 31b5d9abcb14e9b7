from pydantic import Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.models.gig import GigStatus
from app.models.order import OrderStatus
from app.schemas.common import CamelModel, UserPublic, UserContact


class OrderCreateRequest(CamelModel):
    """Schema for placing an order on a gig package"""
    gig_id: Optional[int] = None
    selected_package: Optional[str] = None
    requirements: Optional[str] = None
    is_urgent: bool = False
    custom_details: Optional[Dict[str, Any]] = None


class OrderStatusUpdateRequest(CamelModel):
    status: Optional[OrderStatus] = None
    extension_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None


class OrderCancelRequest(CamelModel):
    cancellation_reason: Optional[str] = None


class StatusHistoryResponse(CamelModel):
    id: int
    status: OrderStatus
    changed_by: Optional[int] = None
    timestamp: Optional[datetime] = None


class GigSummary(CamelModel):
    id: int
    title: str
    pricing: Dict[str, Any] = Field(default_factory=dict)
    delivery_time: int
    status: GigStatus


class FreelancerSummary(CamelModel):
    id: int
    user_id: int
    user: Optional[UserPublic] = None


class FreelancerDetail(FreelancerSummary):
    user: Optional[UserContact] = None


class OrderBase(CamelModel):
    """Order columns"""
    id: int
    order_number: str
    gig_id: int
    client_id: int
    freelancer_id: int
    package: str
    total_price: float
    requirements: Optional[str] = None
    custom_details: Optional[Dict[str, Any]] = None
    is_urgent: bool
    priority_fee: Optional[float] = None
    status: OrderStatus
    delivery_deadline: datetime
    delivery_extensions: int = 0
    extension_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancellation_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderResponse(OrderBase):
    """Order with its status history"""
    status_history: List[StatusHistoryResponse] = []


class OrderListItem(OrderBase):
    """List view: gig and both parties' names, no history"""
    gig: Optional[GigSummary] = None
    client: Optional[UserPublic] = None
    freelancer: Optional[FreelancerSummary] = None


class OrderDetailResponse(OrderResponse):
    gig: Optional[GigSummary] = None
    client: Optional[UserContact] = None
    freelancer: Optional[FreelancerDetail] = None
