"""
CRUD operations for Order and its status history.

Every write here is one transaction: the order row and its history entry are
committed together, and status changes use a conditional UPDATE so two
concurrent transitions cannot both succeed.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import update as sql_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.config import settings
from app.crud.pagination import paginate
from app.models.gig import Gig
from app.models.order import Order, OrderStatus, OrderStatusHistory
from app.models.user import FreelancerProfile
from app.services import order_workflow

logger = logging.getLogger(__name__)

NEWEST_FIRST = (Order.created_at.desc(), Order.id.desc())
LIST_OPTIONS = (
    joinedload(Order.gig),
    joinedload(Order.client),
    joinedload(Order.freelancer).joinedload(FreelancerProfile.user),
)
DETAIL_OPTIONS = LIST_OPTIONS + (selectinload(Order.status_history),)


class OrderNumberExhaustedError(RuntimeError):
    """No free order number found within ORDER_NUMBER_MAX_ATTEMPTS tries."""


def _order_number_taken(db: Session, order_number: str) -> bool:
    return db.query(Order.id).filter(Order.order_number == order_number).first() is not None


def create(
    db: Session,
    client_id: int,
    gig: Gig,
    package: str,
    package_price: float,
    is_urgent: bool = False,
    requirements: Optional[str] = None,
    custom_details: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Order:
    """
    Create a PENDING order with its initial history entry.

    Order numbers are random; on a unique-constraint collision a new one is
    drawn, up to ORDER_NUMBER_MAX_ATTEMPTS times.

    Raises:
        OrderNumberExhaustedError: every attempt collided
        IntegrityError: any other constraint failure
    """
    total_price, priority_fee = order_workflow.calculate_pricing(package_price, is_urgent)
    deadline = order_workflow.delivery_deadline(gig.delivery_time, now)
    gig_id, freelancer_id = gig.id, gig.freelancer_id

    for attempt in range(1, settings.ORDER_NUMBER_MAX_ATTEMPTS + 1):
        order_number = order_workflow.generate_order_number(now)
        order = Order(
            order_number=order_number,
            gig_id=gig_id,
            client_id=client_id,
            freelancer_id=freelancer_id,
            package=package,
            total_price=total_price,
            requirements=requirements,
            custom_details=custom_details,
            is_urgent=is_urgent,
            priority_fee=priority_fee,
            delivery_deadline=deadline,
            status=OrderStatus.PENDING,
        )
        order.status_history.append(
            OrderStatusHistory(status=OrderStatus.PENDING, changed_by=client_id)
        )

        db.add(order)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if not _order_number_taken(db, order_number):
                raise
            logger.warning(f"Order number {order_number} already in use (attempt {attempt})")
            continue

        db.refresh(order)
        return order

    raise OrderNumberExhaustedError(
        f"Could not allocate a unique order number after {settings.ORDER_NUMBER_MAX_ATTEMPTS} attempts"
    )


def get_by_id(db: Session, order_id: int) -> Optional[Order]:
    """
    Retrieve an order with gig, parties and status history loaded.

    Returns:
        Order instance if found, None otherwise
    """
    return (
        db.query(Order)
        .options(*DETAIL_OPTIONS)
        .filter(Order.id == order_id)
        .first()
    )


def apply_transition(
    db: Session,
    order: Order,
    actor_id: int,
    target: OrderStatus,
    cancellation_reason: Optional[str] = None,
    extension_reason: Optional[str] = None,
) -> Optional[Order]:
    """
    Move an order to `target` and append a history entry, atomically.

    The UPDATE only matches while the order still has the status it was read
    with. The caller must have validated the transition from that status.

    Returns:
        The refreshed order, or None if another request changed its status first
    """
    expected_status = order.status
    values = order_workflow.status_side_effects(
        order,
        target,
        cancellation_reason=cancellation_reason,
        extension_reason=extension_reason,
    )

    result = db.execute(
        sql_update(Order)
        .where(Order.id == order.id, Order.status == expected_status)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        logger.warning(
            f"Concurrent status change on order {order.id}: expected {expected_status.value}"
        )
        return None

    db.add(OrderStatusHistory(order_id=order.id, status=target, changed_by=actor_id))
    db.commit()
    db.refresh(order)

    return order


def get_for_client(
    db: Session,
    client_id: int,
    page: int,
    limit: int,
    status: Optional[OrderStatus] = None,
) -> Tuple[List[Order], int]:
    """Orders placed by a client, newest first, optionally filtered by status."""
    query = db.query(Order).filter(Order.client_id == client_id)
    if status:
        query = query.filter(Order.status == status)
    return paginate(query, page, limit, order_by=NEWEST_FIRST, options=LIST_OPTIONS)


def get_for_freelancer(
    db: Session,
    freelancer_id: int,
    page: int,
    limit: int,
    status: Optional[OrderStatus] = None,
) -> Tuple[List[Order], int]:
    """Orders received by a freelancer profile, newest first."""
    query = db.query(Order).filter(Order.freelancer_id == freelancer_id)
    if status:
        query = query.filter(Order.status == status)
    return paginate(query, page, limit, order_by=NEWEST_FIRST, options=LIST_OPTIONS)
