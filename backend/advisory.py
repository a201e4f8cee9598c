"""Advisory checks for parsed orders.

Produces warnings only. Thresholds are configurable via environment variables:
- VALIDATION_HIGH_VALUE_THRESHOLD: Total amount above which to warn (default: 10000)
- VALIDATION_LARGE_QUANTITY_THRESHOLD: Item quantity above which to warn (default: 100)
- VALIDATION_FLAGGED_PAYMENT_METHODS: Comma-separated methods that always warn (default: CRYPTOCURRENCY)
- VALIDATION_TOTAL_TOLERANCE: Allowed gap between total and line-item sum (default: 0.01)
"""

import os
import logging
from typing import FrozenSet, Iterable, List, Optional

from schema import OrderRequest, PaymentMethod, ValidationWarning

logger = logging.getLogger(__name__)


def _parse_payment_methods(raw: str) -> FrozenSet[PaymentMethod]:
    methods = set()
    for name in raw.split(","):
        name = name.strip().upper()
        if not name:
            continue
        try:
            methods.add(PaymentMethod(name))
        except ValueError:
            logger.warning(f"Ignoring unknown flagged payment method: {name}")
    return frozenset(methods)


class AdvisoryScanner:
    """Stateless scan for orders that are valid but worth a second look."""

    def __init__(self,
                 high_value_threshold: Optional[float] = None,
                 large_quantity_threshold: Optional[int] = None,
                 flagged_payment_methods: Optional[Iterable[PaymentMethod]] = None,
                 total_tolerance: Optional[float] = None):
        if high_value_threshold is None:
            high_value_threshold = float(os.getenv("VALIDATION_HIGH_VALUE_THRESHOLD", "10000"))
        if large_quantity_threshold is None:
            large_quantity_threshold = int(os.getenv("VALIDATION_LARGE_QUANTITY_THRESHOLD", "100"))
        if flagged_payment_methods is None:
            flagged = _parse_payment_methods(os.getenv("VALIDATION_FLAGGED_PAYMENT_METHODS", "CRYPTOCURRENCY"))
        else:
            flagged = frozenset(flagged_payment_methods)
        if total_tolerance is None:
            total_tolerance = float(os.getenv("VALIDATION_TOTAL_TOLERANCE", "0.01"))

        self.high_value_threshold = high_value_threshold
        self.large_quantity_threshold = large_quantity_threshold
        self.flagged_payment_methods = flagged
        self.total_tolerance = total_tolerance

    def scan(self, order: OrderRequest) -> List[ValidationWarning]:
        """Return advisory warnings for the order.

        Tolerates missing fields; an order that still has violations can be
        scanned safely.
        """
        warnings: List[ValidationWarning] = []

        if order.total_amount is not None and order.total_amount > self.high_value_threshold:
            warnings.append(ValidationWarning(
                field="totalAmount",
                message="Order amount is unusually high",
                suggestion="Consider verifying the amount with the customer",
            ))

        for index, item in enumerate(order.items or ()):
            if item.quantity is not None and item.quantity > self.large_quantity_threshold:
                warnings.append(ValidationWarning(
                    field=f"items[{index}].quantity",
                    message=f"Large quantity ordered for {item.product_name}",
                    suggestion="Verify stock availability",
                ))

        if order.payment_method in self.flagged_payment_methods:
            label = order.payment_method.value.replace("_", " ").capitalize()
            warnings.append(ValidationWarning(
                field="paymentMethod",
                message=f"{label} payment selected",
                suggestion="Ensure compliance with regulations",
            ))

        mismatch = self._total_mismatch(order)
        if mismatch is not None:
            warnings.append(mismatch)

        return warnings

    def _total_mismatch(self, order: OrderRequest) -> Optional[ValidationWarning]:
        # Only comparable when every line carries both quantity and unit price
        if order.total_amount is None or not order.items:
            return None
        if any(i.quantity is None or i.unit_price is None for i in order.items):
            return None

        line_sum = sum(i.quantity * i.unit_price for i in order.items)
        if abs(order.total_amount - line_sum) <= self.total_tolerance:
            return None

        return ValidationWarning(
            field="totalAmount",
            message=f"Total amount {order.total_amount:.2f} does not match line item sum {line_sum:.2f}",
            suggestion="Recalculate the total from the line items",
        )
