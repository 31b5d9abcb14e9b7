"""
Test suite for the order workflow rules.

Tests cover:
- The status transition table
- Transitions out of COMPLETED
- Urgent pricing and delivery deadlines
- Order number format
- Column values written with each status change
"""

import itertools
import random
import re
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.core.config import settings
from app.core.exceptions import InvalidTransitionError
from app.models.order import Order, OrderStatus
from app.services import order_workflow
from app.services.order_workflow import VALID_TRANSITIONS, can_transition

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class TestTransitions:
    """Tests for the status transition table"""

    @pytest.mark.parametrize("current,target", list(itertools.product(OrderStatus, OrderStatus)))
    def test_transition_allowed_iff_listed_or_from_completed(self, current, target):
        """A transition is allowed exactly when the table lists it, or it leaves COMPLETED"""
        expected = target in VALID_TRANSITIONS.get(current, ()) or current == OrderStatus.COMPLETED
        assert can_transition(current, target, allow_from_completed=True) is expected

    def test_happy_path(self):
        path = [
            OrderStatus.PENDING,
            OrderStatus.ACCEPTED,
            OrderStatus.IN_PROGRESS,
            OrderStatus.DELIVERED,
            OrderStatus.COMPLETED,
        ]
        for current, target in zip(path, path[1:]):
            assert can_transition(current, target)

    def test_cannot_skip_steps(self):
        assert not can_transition(OrderStatus.PENDING, OrderStatus.IN_PROGRESS)
        assert not can_transition(OrderStatus.ACCEPTED, OrderStatus.DELIVERED)
        assert not can_transition(OrderStatus.PENDING, OrderStatus.COMPLETED)

    def test_cancelled_is_terminal(self):
        for target in OrderStatus:
            assert not can_transition(OrderStatus.CANCELLED, target)

    def test_completed_locked_when_setting_disabled(self):
        for target in OrderStatus:
            assert not can_transition(OrderStatus.COMPLETED, target, allow_from_completed=False)

    def test_completed_default_follows_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_TRANSITIONS_FROM_COMPLETED", False)
        assert not can_transition(OrderStatus.COMPLETED, OrderStatus.PENDING)

        monkeypatch.setattr(settings, "ALLOW_TRANSITIONS_FROM_COMPLETED", True)
        assert can_transition(OrderStatus.COMPLETED, OrderStatus.PENDING)

    def test_ensure_transition_rejects_missing_target(self):
        with pytest.raises(InvalidTransitionError):
            order_workflow.ensure_transition(OrderStatus.PENDING, None)

    def test_ensure_transition_message(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            order_workflow.ensure_transition(OrderStatus.PENDING, OrderStatus.IN_PROGRESS)

        assert exc_info.value.message == "Invalid status transition from PENDING to IN_PROGRESS"
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.ACCEPTED, OrderStatus.IN_PROGRESS])
    def test_cancellable_statuses(self, status):
        order_workflow.ensure_cancellable(status)

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.DELIVERED, OrderStatus.DISPUTED, OrderStatus.COMPLETED, OrderStatus.CANCELLED],
    )
    def test_not_cancellable_statuses(self, status):
        with pytest.raises(InvalidTransitionError) as exc_info:
            order_workflow.ensure_cancellable(status)

        assert "cannot be cancelled" in exc_info.value.message


class TestPricing:
    """Tests for order pricing and deadlines"""

    def test_urgent_order(self):
        assert order_workflow.calculate_pricing(100, True) == (150, 50)

    def test_regular_order_has_no_fee(self):
        assert order_workflow.calculate_pricing(80, False) == (80, None)

    def test_delivery_deadline(self):
        assert order_workflow.delivery_deadline(3, NOW) == NOW + timedelta(days=3)

    def test_extension_moves_deadline_forward(self):
        assert order_workflow.extended_deadline(NOW) == NOW + timedelta(days=settings.DELIVERY_EXTENSION_DAYS)


class TestOrderNumber:
    """Tests for order number generation"""

    def test_format(self):
        number = order_workflow.generate_order_number(NOW)
        assert re.match(r"^ORD-20261019-[A-Z0-9]{4}$", number)

    def test_seeded_generator_is_deterministic(self):
        first = order_workflow.generate_order_number(NOW, random.Random(42))
        second = order_workflow.generate_order_number(NOW, random.Random(42))
        assert first == second

    def test_defaults_to_today(self):
        number = order_workflow.generate_order_number()
        assert number.startswith(f"ORD-{datetime.now(timezone.utc):%Y%m%d}-")


class TestStatusSideEffects:
    """Tests for the values written alongside a status change"""

    def _order(self, **overrides):
        fields = {"delivery_extensions": 0, "delivery_deadline": NOW}
        fields.update(overrides)
        return SimpleNamespace(**fields)

    def test_cancel_with_reason(self):
        values = order_workflow.status_side_effects(
            self._order(), OrderStatus.CANCELLED, cancellation_reason="Changed my mind", now=NOW
        )
        assert values == {
            "status": OrderStatus.CANCELLED,
            "cancellation_reason": "Changed my mind",
            "cancellation_date": NOW,
        }

    def test_cancel_default_reason(self):
        values = order_workflow.status_side_effects(self._order(), OrderStatus.CANCELLED, now=NOW)
        assert values["cancellation_reason"] == "Not specified"

    def test_complete_sets_completed_at(self):
        values = order_workflow.status_side_effects(self._order(), OrderStatus.COMPLETED, now=NOW)
        assert values == {"status": OrderStatus.COMPLETED, "completed_at": NOW}

    def test_extension(self):
        order = self._order(delivery_extensions=1)
        values = order_workflow.status_side_effects(
            order, OrderStatus.DELIVERED, extension_reason="Client changed scope", now=NOW
        )
        assert values["delivery_extensions"].compare(Order.delivery_extensions + 1)
        assert values["extension_reason"] == "Client changed scope"
        assert values["delivery_deadline"] == NOW + timedelta(days=7)

    def test_cancel_ignores_extension_reason(self):
        values = order_workflow.status_side_effects(
            self._order(), OrderStatus.CANCELLED, extension_reason="ignored", now=NOW
        )
        assert "delivery_deadline" not in values
        assert "extension_reason" not in values

    def test_plain_transition(self):
        values = order_workflow.status_side_effects(self._order(), OrderStatus.ACCEPTED, now=NOW)
        assert values == {"status": OrderStatus.ACCEPTED}
