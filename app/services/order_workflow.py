"""
Order workflow rules.

Pure functions for the order state machine, urgent pricing and order numbers.
The CRUD layer applies these to the database; nothing here touches a session.
"""

import random
import string
from datetime import datetime, timedelta, timezone
from typing import Dict, FrozenSet, Optional, Tuple

from app.core.config import settings
from app.core.exceptions import InvalidTransitionError
from app.models.order import Order, OrderStatus

# Valid state transitions (current -> allowed next)
VALID_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.ACCEPTED, OrderStatus.CANCELLED}),
    OrderStatus.ACCEPTED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED, OrderStatus.DISPUTED}),
    OrderStatus.DISPUTED: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
}

# Statuses from which the dedicated cancel operation is allowed
CANCELLABLE_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.PENDING, OrderStatus.ACCEPTED, OrderStatus.IN_PROGRESS}
)

URGENT_MULTIPLIER = 1.5
PRIORITY_FEE_RATE = 0.5
DEFAULT_CANCELLATION_REASON = "Not specified"

ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_SUFFIX_LENGTH = 4


def can_transition(
    current: OrderStatus,
    target: OrderStatus,
    allow_from_completed: Optional[bool] = None,
) -> bool:
    """Check if a status transition is valid."""
    if allow_from_completed is None:
        allow_from_completed = settings.ALLOW_TRANSITIONS_FROM_COMPLETED
    if current == OrderStatus.COMPLETED and allow_from_completed:
        return True
    return target in VALID_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: OrderStatus, target: Optional[OrderStatus]) -> OrderStatus:
    """
    Return `target` if the order may move to it from `current`.

    Raises:
        InvalidTransitionError: target missing or not allowed
    """
    if target is None or not can_transition(current, target):
        raise InvalidTransitionError(current, target)
    return target


def ensure_cancellable(current: OrderStatus) -> None:
    if current not in CANCELLABLE_STATUSES:
        raise InvalidTransitionError(
            current,
            OrderStatus.CANCELLED,
            message="Order cannot be cancelled in its current status",
        )


def calculate_pricing(package_price: float, is_urgent: bool) -> Tuple[float, Optional[float]]:
    """
    Price an order.

    Returns:
        (total_price, priority_fee); priority_fee is None for non-urgent orders
    """
    if is_urgent:
        return package_price * URGENT_MULTIPLIER, package_price * PRIORITY_FEE_RATE
    return package_price, None


def delivery_deadline(delivery_days: int, now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(days=delivery_days)


def extended_deadline(current_deadline: datetime) -> datetime:
    """Deadlines only move forward."""
    return current_deadline + timedelta(days=settings.DELIVERY_EXTENSION_DAYS)


def generate_order_number(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """
    Build a human-readable order number, e.g. ORD-20261019-7QX2.

    Not guaranteed unique; the orders table enforces uniqueness and the
    caller retries on collision.
    """
    now = now or datetime.now(timezone.utc)
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(ORDER_NUMBER_ALPHABET) for _ in range(ORDER_NUMBER_SUFFIX_LENGTH))
    return f"ORD-{now:%Y%m%d}-{suffix}"


def status_side_effects(
    order,
    target: OrderStatus,
    cancellation_reason: Optional[str] = None,
    extension_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Column values written alongside a status change.

    Cancelling records the reason and date, completing records the completion
    time. Any other change that carries an extension reason extends delivery.
    """
    now = now or datetime.now(timezone.utc)
    values = {"status": target}

    if target == OrderStatus.CANCELLED:
        values["cancellation_reason"] = cancellation_reason or DEFAULT_CANCELLATION_REASON
        values["cancellation_date"] = now
    elif target == OrderStatus.COMPLETED:
        values["completed_at"] = now
    elif extension_reason:
        values["delivery_extensions"] = Order.delivery_extensions + 1
        values["extension_reason"] = extension_reason
        values["delivery_deadline"] = extended_deadline(order.delivery_deadline)

    return values
