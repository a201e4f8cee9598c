"""Declarative constraint rules for candidate orders.

Each rule names one field-level check. `validate_order` is a pure function:
the same order and reference date always produce the same violations, in
the same order, so it can run before and after repair.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, List, Optional, Tuple

from schema import OrderItem, OrderRequest, ShippingAddress

ORDER_ID_PATTERN = re.compile(r"ORD-[0-9]{6}")
EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[A-Za-z]{2,}")
ZIP_CODE_PATTERN = re.compile(r"[0-9]{5}(-[0-9]{4})?")

MAX_ITEMS = 50
MAX_PRODUCT_NAME_LENGTH = 100
MIN_AMOUNT = 0.01
MAX_TOTAL_AMOUNT = 999999.99
MIN_QUANTITY = 1
MAX_QUANTITY = 1000


@dataclass(frozen=True)
class Violation:
    """A failed rule on one field path."""
    field: str
    rule_id: str
    value: Any
    message: str


# A check receives the field value and the reference date ("today") and
# returns True when the value satisfies the rule.
Check = Callable[[Any, date], bool]


@dataclass(frozen=True)
class Rule:
    rule_id: str
    field: str
    getter: Callable[[Any], Any]
    check: Check
    message: str


# --- Checks ---
# Everything except the required-ness checks accepts None, so a missing
# value is reported once, by its required rule.

def _not_null(value: Any, today: date) -> bool:
    return value is not None


def _not_blank(value: Any, today: date) -> bool:
    return value is not None and str(value).strip() != ""


def _not_empty(value: Any, today: date) -> bool:
    return value is not None and len(value) > 0


def _matches(pattern: "re.Pattern[str]") -> Check:
    def check(value: Any, today: date) -> bool:
        return value is None or pattern.fullmatch(str(value)) is not None
    return check


def _email(value: Any, today: date) -> bool:
    if value is None or str(value) == "":
        return True
    return EMAIL_PATTERN.fullmatch(str(value)) is not None


def _not_future(value: Any, today: date) -> bool:
    return value is None or value <= today


def _length_between(minimum: int, maximum: int) -> Check:
    def check(value: Any, today: date) -> bool:
        return value is None or minimum <= len(value) <= maximum
    return check


def _at_least(minimum: float) -> Check:
    def check(value: Any, today: date) -> bool:
        return value is None or value >= minimum
    return check


def _at_most(maximum: float) -> Check:
    def check(value: Any, today: date) -> bool:
        return value is None or value <= maximum
    return check


# --- Rule sets ---

ORDER_RULES: Tuple[Rule, ...] = (
    Rule("order_id_required", "orderId", lambda o: o.order_id, _not_blank,
         "Order ID is required"),
    Rule("order_id_pattern", "orderId", lambda o: o.order_id, _matches(ORDER_ID_PATTERN),
         "Order ID must match pattern ORD-XXXXXX"),
    Rule("customer_email_required", "customerEmail", lambda o: o.customer_email, _not_blank,
         "Customer email is required"),
    Rule("customer_email_format", "customerEmail", lambda o: o.customer_email, _email,
         "Must be a valid email address"),
    Rule("order_date_required", "orderDate", lambda o: o.order_date, _not_null,
         "Order date is required"),
    Rule("order_date_not_future", "orderDate", lambda o: o.order_date, _not_future,
         "Order date cannot be in the future"),
    Rule("items_not_empty", "items", lambda o: o.items, _not_empty,
         "Order must contain at least one item"),
    Rule("items_max_size", "items", lambda o: o.items, _length_between(0, MAX_ITEMS),
         f"Order cannot contain more than {MAX_ITEMS} items"),
    Rule("total_amount_required", "totalAmount", lambda o: o.total_amount, _not_null,
         "Total amount is required"),
    Rule("total_amount_min", "totalAmount", lambda o: o.total_amount, _at_least(MIN_AMOUNT),
         "Total amount must be at least $0.01"),
    Rule("total_amount_max", "totalAmount", lambda o: o.total_amount, _at_most(MAX_TOTAL_AMOUNT),
         "Total amount cannot exceed $999,999.99"),
    Rule("shipping_address_required", "shippingAddress", lambda o: o.shipping_address, _not_null,
         "Shipping address is required"),
    Rule("payment_method_required", "paymentMethod", lambda o: o.payment_method, _not_null,
         "Payment method is required"),
)

ITEM_RULES: Tuple[Rule, ...] = (
    Rule("product_id_required", "productId", lambda i: i.product_id, _not_blank,
         "Product ID is required"),
    Rule("product_name_required", "productName", lambda i: i.product_name, _not_blank,
         "Product name is required"),
    Rule("product_name_length", "productName", lambda i: i.product_name,
         _length_between(0, MAX_PRODUCT_NAME_LENGTH), "Product name too long"),
    Rule("quantity_required", "quantity", lambda i: i.quantity, _not_null,
         "Quantity is required"),
    Rule("quantity_min", "quantity", lambda i: i.quantity, _at_least(MIN_QUANTITY),
         "Quantity must be at least 1"),
    Rule("quantity_max", "quantity", lambda i: i.quantity, _at_most(MAX_QUANTITY),
         f"Quantity cannot exceed {MAX_QUANTITY}"),
    Rule("unit_price_required", "unitPrice", lambda i: i.unit_price, _not_null,
         "Unit price is required"),
    Rule("unit_price_min", "unitPrice", lambda i: i.unit_price, _at_least(MIN_AMOUNT),
         "Unit price must be positive"),
)

ADDRESS_RULES: Tuple[Rule, ...] = (
    Rule("street_required", "street", lambda a: a.street, _not_blank, "Street is required"),
    Rule("city_required", "city", lambda a: a.city, _not_blank, "City is required"),
    Rule("state_required", "state", lambda a: a.state, _not_blank, "State is required"),
    Rule("state_length", "state", lambda a: a.state, _length_between(2, 2),
         "State must be 2-letter code"),
    Rule("zip_code_required", "zipCode", lambda a: a.zip_code, _not_blank, "ZIP code is required"),
    Rule("zip_code_pattern", "zipCode", lambda a: a.zip_code, _matches(ZIP_CODE_PATTERN),
         "Invalid ZIP code format"),
    Rule("country_required", "country", lambda a: a.country, _not_blank, "Country is required"),
    Rule("country_length", "country", lambda a: a.country, _length_between(2, 2),
         "Country must be 2-letter ISO code"),
)


def _apply_rules(rules: Tuple[Rule, ...], target: Any, prefix: str,
                 today: date, violations: List[Violation]) -> None:
    for rule in rules:
        value = rule.getter(target)
        if not rule.check(value, today):
            violations.append(Violation(
                field=f"{prefix}{rule.field}",
                rule_id=rule.rule_id,
                value=value,
                message=rule.message,
            ))


def validate_order(order: OrderRequest, today: date) -> List[Violation]:
    """Run every rule over the order.

    Args:
        order: Candidate order
        today: Reference date for the not-in-the-future rule

    Returns:
        Violations in rule order; nested item and address rules follow the
        top-level rules, items in index order
    """
    violations: List[Violation] = []
    _apply_rules(ORDER_RULES, order, "", today, violations)

    items: Optional[Tuple[OrderItem, ...]] = order.items
    for index, item in enumerate(items or ()):
        _apply_rules(ITEM_RULES, item, f"items[{index}].", today, violations)

    address: Optional[ShippingAddress] = order.shipping_address
    if address is not None:
        _apply_rules(ADDRESS_RULES, address, "shippingAddress.", today, violations)

    return violations
