"""
Unit Tests for order status helpers
"""
import pytest

from app.models.order import OrderStatus, is_forward_transition


class TestForwardTransitions:

    @pytest.mark.parametrize("current,target,expected", [
        (OrderStatus.PENDING, OrderStatus.PENDING, True),
        (OrderStatus.PENDING, OrderStatus.PRINTING, True),
        (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, True),
        (OrderStatus.PRINTING, OrderStatus.PENDING, False),
        (OrderStatus.DELIVERED, OrderStatus.PRINTING, False),
        (OrderStatus.PENDING, OrderStatus.CANCELLED, True),
        (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED, True),
        (OrderStatus.DELIVERED, OrderStatus.CANCELLED, False),
        (OrderStatus.CANCELLED, OrderStatus.CANCELLED, True),
        (OrderStatus.CANCELLED, OrderStatus.PENDING, False),
        (OrderStatus.CANCELLED, OrderStatus.DELIVERED, False),
    ])
    def test_is_forward_transition(self, current, target, expected):
        assert is_forward_transition(current, target) is expected
