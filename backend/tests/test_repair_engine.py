"""
Field repair tests: value fixers, registry dispatch, and immutability.
"""

from datetime import timedelta

import pytest

from constraint_validator import Violation, validate_order
from repair_engine import REPAIRS, FieldRepairEngine, Repair, fix_email, fix_order_id
from schema import OrderRequest, RecoveryTrail


class TestFixOrderId:
    @pytest.mark.parametrize("raw, expected", [
        ("ORDER123", "ORD-000123"),
        ("AB", "ORD-000001"),
        ("", "ORD-000001"),
        ("ORD-1234567", "ORD-123456"),
        ("ord 98-76-54", "ORD-987654"),
        ("007", "ORD-000007"),
    ])
    def test_fix(self, raw, expected):
        assert fix_order_id(raw) == expected

    def test_deterministic(self):
        assert fix_order_id("ORDER123") == fix_order_id("ORDER123")


class TestFixEmail:
    @pytest.mark.parametrize("raw, expected", [
        (" John.Doe@Example.COM ", "john.doe@example.com"),
        ("user example.com", "user@example.com"),
        ("bob@mail", "bob@mail.com"),
        ("user at example com", "user@atexamplecom.com"),
    ])
    def test_fix(self, raw, expected):
        assert fix_email(raw) == expected


class TestRegistry:
    def test_registered_rules(self):
        assert set(REPAIRS) == {"order_id_pattern", "order_date_not_future", "customer_email_format"}

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            REPAIRS["zip_code_pattern"] = lambda order, violation, today: None


class TestFieldRepairEngine:
    def test_repairs_order_id_without_mutating_input(self, order_payload, today):
        order_payload["orderId"] = "ORDER123"
        order = OrderRequest.model_validate(order_payload)
        trail = RecoveryTrail()

        repaired = FieldRepairEngine().apply(order, validate_order(order, today), today, trail)

        assert repaired.order_id == "ORD-000123"
        assert order.order_id == "ORDER123"
        assert repaired.customer_email == order.customer_email
        assert repaired.items == order.items
        attempt = trail.attempts()[0]
        assert (attempt.strategy, attempt.success, attempt.result) == ("fix_order_id", True, "ORD-000123")

    def test_clamps_future_date(self, order_payload, today):
        order_payload["orderDate"] = (today + timedelta(days=30)).isoformat()
        order = OrderRequest.model_validate(order_payload)
        trail = RecoveryTrail()

        repaired = FieldRepairEngine().apply(order, validate_order(order, today), today, trail)

        assert repaired.order_date == today
        assert [a.strategy for a in trail.attempts()] == ["fix_future_date"]

    def test_repairs_multiple_fields(self, order_payload, today):
        order_payload.update({"orderId": "12-34-56-78", "customerEmail": "Jane.Doe@Example.com "})
        order = OrderRequest.model_validate(order_payload)
        trail = RecoveryTrail()

        repaired = FieldRepairEngine().apply(order, validate_order(order, today), today, trail)

        assert repaired.order_id == "ORD-123456"
        assert repaired.customer_email == "jane.doe@example.com"
        assert [a.strategy for a in trail.attempts()] == ["fix_order_id", "fix_email"]
        assert validate_order(repaired, today) == []

    def test_unmatched_violation_passes_through(self, order_payload, today):
        order_payload["shippingAddress"]["zipCode"] = "ABCDE"
        order = OrderRequest.model_validate(order_payload)
        trail = RecoveryTrail()

        repaired = FieldRepairEngine().apply(order, validate_order(order, today), today, trail)

        assert repaired is order
        assert len(trail) == 0

    def test_same_strategy_recorded_once(self, order_payload, today):
        order_payload["orderId"] = "X1"
        order = OrderRequest.model_validate(order_payload)
        violations = validate_order(order, today)
        trail = RecoveryTrail()
        engine = FieldRepairEngine()

        engine.apply(order, violations, today, trail)
        engine.apply(order, violations, today, trail)

        assert [a.strategy for a in trail.attempts()] == ["fix_order_id"]

    def test_custom_registry(self, order_payload, today):
        def fix_zip(order, violation, today):
            address = order.shipping_address.model_copy(update={"zip_code": "00000"})
            return Repair("fix_zip", "Reset ZIP code", "00000", order.model_copy(update={"shipping_address": address}))

        order_payload["shippingAddress"]["zipCode"] = "ABCDE"
        order = OrderRequest.model_validate(order_payload)
        trail = RecoveryTrail()

        engine = FieldRepairEngine({**REPAIRS, "zip_code_pattern": fix_zip})
        repaired = engine.apply(order, validate_order(order, today), today, trail)

        assert repaired.shipping_address.zip_code == "00000"
        assert trail.attempts()[0].strategy == "fix_zip"

    def test_value_already_fixed_is_not_recorded(self, order_payload, today):
        order = OrderRequest.model_validate(order_payload)
        violation = Violation("orderId", "order_id_pattern", "ORD-123456", "Order ID must match pattern ORD-XXXXXX")
        trail = RecoveryTrail()

        assert FieldRepairEngine().apply(order, [violation], today, trail) is order
        assert len(trail) == 0
