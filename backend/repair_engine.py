"""Deterministic field repairs for constraint violations.

Repairs are registered per rule id. A violation whose rule has no registered
repair passes through untouched. Every repair returns a new order with one
field replaced; the input order is never modified.
"""

import re
import logging
from datetime import date
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, NamedTuple, Optional

from schema import OrderRequest, RecoveryTrail
from constraint_validator import Violation

logger = logging.getLogger(__name__)


class Repair(NamedTuple):
    strategy: str
    description: str
    result: Any
    order: OrderRequest


RepairFn = Callable[[OrderRequest, Violation, date], Optional[Repair]]

_REGISTRY: Dict[str, RepairFn] = {}

# Read-only view of the registered repairs, keyed by rule id
REPAIRS: Mapping[str, RepairFn] = MappingProxyType(_REGISTRY)


def repairs(rule_id: str) -> Callable[[RepairFn], RepairFn]:
    """Register the decorated function as the repair for `rule_id`."""
    def decorator(fn: RepairFn) -> RepairFn:
        _REGISTRY[rule_id] = fn
        return fn
    return decorator


# --- Value fixers ---

def fix_order_id(order_id: str) -> str:
    """Rebuild an order id as ORD- plus exactly six digits.

    Keeps the first six digits found; fewer are zero-padded on the left and
    no digits at all becomes 000001.
    """
    digits = re.sub(r"[^0-9]", "", order_id)
    if len(digits) >= 6:
        digits = digits[:6]
    else:
        digits = (digits or "1").zfill(6)
    return f"ORD-{digits}"


def fix_email(email: str) -> str:
    """Normalize a malformed email address."""
    fixed = email.strip().lower()

    # Missing @: the first whitespace run stands in for it
    if "@" not in fixed:
        fixed = re.sub(r"\s+", "@", fixed, count=1)

    if not re.search(r"\.[a-z]{2,}$", fixed):
        fixed += ".com"

    return re.sub(r"\s+", "", fixed)


# --- Registered repairs ---

@repairs("order_id_pattern")
def _repair_order_id(order: OrderRequest, violation: Violation, today: date) -> Optional[Repair]:
    if violation.value is None:
        return None
    fixed = fix_order_id(str(violation.value))
    if fixed == violation.value:
        return None
    return Repair("fix_order_id", "Fixed order ID format", fixed, order.with_order_id(fixed))


@repairs("order_date_not_future")
def _repair_future_date(order: OrderRequest, violation: Violation, today: date) -> Optional[Repair]:
    if not isinstance(violation.value, date) or violation.value <= today:
        return None
    return Repair("fix_future_date", "Changed future date to today", today, order.with_order_date(today))


@repairs("customer_email_format")
def _repair_email(order: OrderRequest, violation: Violation, today: date) -> Optional[Repair]:
    if violation.value is None:
        return None
    fixed = fix_email(str(violation.value))
    if fixed == violation.value:
        return None
    return Repair("fix_email", "Fixed email format", fixed, order.with_customer_email(fixed))


class FieldRepairEngine:
    """Applies registered repairs to an order's violations."""

    def __init__(self, registry: Optional[Mapping[str, RepairFn]] = None):
        self.registry = REPAIRS if registry is None else MappingProxyType(dict(registry))

    def apply(self, order: OrderRequest, violations: Iterable[Violation],
              today: date, trail: RecoveryTrail) -> OrderRequest:
        """Apply at most one repair per violation.

        Args:
            order: Candidate order that produced the violations
            violations: Violations from the constraint validator
            today: Reference date for date repairs
            trail: Recovery trail; each applied repair is recorded as a success

        Returns:
            The repaired order (the same object if nothing was repaired)
        """
        for violation in violations:
            repair_fn = self.registry.get(violation.rule_id)
            if repair_fn is None:
                continue

            repair = repair_fn(order, violation, today)
            if repair is None:
                continue

            trail.record(repair.strategy, True, repair.description, repair.result)
            logger.info(f"Repaired {violation.field} via {repair.strategy}: {violation.value!r} -> {repair.result!r}")
            order = repair.order

        return order
