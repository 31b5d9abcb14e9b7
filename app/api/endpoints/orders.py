"""
API endpoints for gig orders.

Clients place orders on a gig package; the client and the freelancer then
move the order through its status workflow (see app.services.order_workflow).
Only the two parties of an order can see or change it.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.exceptions import (
    ApiError, ForbiddenError, InternalError, InvalidTransitionError, NotFoundError, ValidationError
)
from app.crud import order as order_crud
from app.crud import user as user_crud
from app.models.gig import GigStatus
from app.models.order import Order, OrderStatus
from app.models.user import User
from app.schemas.common import ApiResponse, Page
from app.schemas.order import (
    OrderCancelRequest,
    OrderCreateRequest,
    OrderDetailResponse,
    OrderListItem,
    OrderResponse,
    OrderStatusUpdateRequest,
)
from app.services import order_workflow

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


def _get_party_order(db: Session, order_id: int, user: User, action: str) -> Order:
    order = order_crud.get_by_id(db, order_id)
    if not order:
        raise NotFoundError("Order not found")
    if not order.is_party(user.id):
        raise ForbiddenError(f"Forbidden: You can only {action} your own orders")
    return order


def _transition(
    db: Session,
    order: Order,
    user: User,
    target: OrderStatus,
    cancellation_reason: Optional[str] = None,
    extension_reason: Optional[str] = None,
) -> Order:
    """Write a validated transition; a lost race is reported from the new status."""
    updated = order_crud.apply_transition(
        db,
        order,
        user.id,
        target,
        cancellation_reason=cancellation_reason,
        extension_reason=extension_reason,
    )
    if updated is None:
        db.refresh(order)
        raise InvalidTransitionError(order.status, target)
    return updated


@router.post("/", status_code=201, response_model=ApiResponse[OrderDetailResponse])
def create_order(
    request: OrderCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Place an order on one package of an active gig.

    Urgent orders cost 1.5x the package price, of which 0.5x is recorded as
    the priority fee. The delivery deadline is the gig's delivery time from now.
    """
    if request.gig_id is None or not request.selected_package:
        raise ValidationError("Gig ID and package are required")

    try:
        gig = user_crud.get_gig(db, request.gig_id)
        if not gig or gig.status != GigStatus.ACTIVE:
            raise NotFoundError("Gig not found or not active")

        price = gig.price_for(request.selected_package)
        if price is None:
            raise ValidationError("Invalid package selected")

        order = order_crud.create(
            db,
            client_id=user.id,
            gig=gig,
            package=request.selected_package,
            package_price=price,
            is_urgent=request.is_urgent,
            requirements=request.requirements,
            custom_details=request.custom_details,
        )
        logger.info(f"Created order {order.order_number} (id={order.id}) for gig {order.gig_id} by client {user.id}")

        return ApiResponse[OrderDetailResponse](
            status_code=201,
            data=OrderDetailResponse.model_validate(order),
            message="Order created successfully"
        )

    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating order: {e}")
        raise InternalError("Failed to create order", error=str(e))


@router.get("/client", response_model=ApiResponse[Page[OrderListItem]])
def list_client_orders(
    status: Optional[OrderStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Orders placed by the current user, newest first."""
    try:
        orders, total = order_crud.get_for_client(db, user.id, page, limit, status=status)
        return ApiResponse[Page[OrderListItem]](
            status_code=200,
            data=Page[OrderListItem].build([OrderListItem.model_validate(o) for o in orders], total, page, limit),
            message="Client orders retrieved successfully"
        )
    except Exception as e:
        logger.error(f"Error retrieving client orders: {e}")
        raise InternalError("Failed to retrieve client orders", error=str(e))


@router.get("/freelancer", response_model=ApiResponse[Page[OrderListItem]])
def list_freelancer_orders(
    status: Optional[OrderStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Orders received through the current user's freelancer profile, newest first."""
    try:
        profile = user_crud.get_freelancer_profile(db, user.id)
        if not profile:
            raise NotFoundError("Freelancer profile not found")

        orders, total = order_crud.get_for_freelancer(db, profile.id, page, limit, status=status)
        return ApiResponse[Page[OrderListItem]](
            status_code=200,
            data=Page[OrderListItem].build([OrderListItem.model_validate(o) for o in orders], total, page, limit),
            message="Freelancer orders retrieved successfully"
        )

    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving freelancer orders: {e}")
        raise InternalError("Failed to retrieve freelancer orders", error=str(e))


@router.get("/{order_id}", response_model=ApiResponse[OrderDetailResponse])
def get_order(
    order_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Retrieve an order with its gig, both parties and status history."""
    try:
        order = _get_party_order(db, order_id, user, "view")
        return ApiResponse[OrderDetailResponse](
            status_code=200,
            data=OrderDetailResponse.model_validate(order),
            message="Order retrieved successfully"
        )

    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving order {order_id}: {e}")
        raise InternalError("Failed to retrieve order", error=str(e))


@router.patch("/{order_id}/status", response_model=ApiResponse[OrderResponse])
def update_order_status(
    order_id: int,
    request: OrderStatusUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Move an order to a new status.

    CANCELLED records `cancellationReason` (default "Not specified") and the
    date; COMPLETED records the completion time. For any other target, an
    `extensionReason` pushes the delivery deadline back by the extension period.
    """
    try:
        order = _get_party_order(db, order_id, user, "update")
        target = order_workflow.ensure_transition(order.status, request.status)

        updated = _transition(
            db,
            order,
            user,
            target,
            cancellation_reason=request.cancellation_reason,
            extension_reason=request.extension_reason,
        )
        logger.info(f"Order {order_id} moved to {target.value} by user {user.id}")

        return ApiResponse[OrderResponse](
            status_code=200,
            data=OrderResponse.model_validate(updated),
            message="Order status updated successfully"
        )

    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating order status for {order_id}: {e}")
        raise InternalError("Failed to update order status", error=str(e))


@router.post("/{order_id}/cancel", response_model=ApiResponse[OrderResponse])
def cancel_order(
    order_id: int,
    request: Optional[OrderCancelRequest] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Cancel an order that has not been delivered yet
    (PENDING, ACCEPTED or IN_PROGRESS).
    """
    reason = request.cancellation_reason if request else None

    try:
        order = _get_party_order(db, order_id, user, "cancel")
        order_workflow.ensure_cancellable(order.status)

        updated = _transition(db, order, user, OrderStatus.CANCELLED, cancellation_reason=reason)
        logger.info(f"Order {order_id} cancelled by user {user.id}")

        return ApiResponse[OrderResponse](
            status_code=200,
            data=OrderResponse.model_validate(updated),
            message="Order cancelled successfully"
        )

    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error cancelling order {order_id}: {e}")
        raise InternalError("Failed to cancel order", error=str(e))
