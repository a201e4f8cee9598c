"""
conftest.py: put backend/ on sys.path so tests import modules by bare
name (schema, json_validator, ...) the same way the service does.
"""

import copy
import sys
from datetime import datetime
from pathlib import Path

import pytest

_backend_dir = str(Path(__file__).resolve().parent.parent)
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

FIXED_NOW = datetime(2024, 6, 15, 10, 30, 0)

_CLEAN_ORDER = {
    "orderId": "ORD-123456",
    "customerEmail": "jane.doe@example.com",
    "orderDate": "2024-06-01",
    "items": [
        {"productId": "P-100", "productName": "Laptop", "quantity": 3, "unitPrice": 1500.0},
    ],
    "totalAmount": 4500.0,
    "shippingAddress": {
        "street": "1 Main St",
        "city": "New York",
        "state": "NY",
        "zipCode": "10001",
        "country": "US",
    },
    "paymentMethod": "CREDIT_CARD",
}


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def today():
    return FIXED_NOW.date()


@pytest.fixture
def order_payload():
    """A fresh, fully valid order payload (wire names)."""
    return copy.deepcopy(_CLEAN_ORDER)


@pytest.fixture
def service():
    from advisory import AdvisoryScanner
    from schema import PaymentMethod
    from validation_service import ValidationService

    scanner = AdvisoryScanner(
        high_value_threshold=10000,
        large_quantity_threshold=100,
        flagged_payment_methods=[PaymentMethod.CRYPTOCURRENCY],
        total_tolerance=0.01,
    )
    return ValidationService(advisory_scanner=scanner, clock=lambda: FIXED_NOW)
