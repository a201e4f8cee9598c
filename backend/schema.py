"""Pydantic schemas for order output validation.

Defines the candidate order record parsed out of model output and the
validation result returned to callers. Candidate and result models are
immutable; repairs go through explicit copy-with-field constructors.
"""

from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


# --- Candidate Order Schema ---

class PaymentMethod(str, Enum):
    """Accepted payment methods."""
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    PAYPAL = "PAYPAL"
    BANK_TRANSFER = "BANK_TRANSFER"
    CRYPTOCURRENCY = "CRYPTOCURRENCY"


class OrderItem(BaseModel):
    """Single order line."""
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    product_id: Optional[str] = Field(default=None, description="Product identifier")
    product_name: Optional[str] = Field(default=None, description="Product name")
    quantity: Optional[int] = Field(default=None, description="Quantity ordered")
    unit_price: Optional[float] = Field(default=None, description="Price per unit in USD")


class ShippingAddress(BaseModel):
    """Shipping address in US format."""
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    street: Optional[str] = Field(default=None, description="Street address")
    city: Optional[str] = Field(default=None, description="City name")
    state: Optional[str] = Field(default=None, description="State or province")
    zip_code: Optional[str] = Field(default=None, description="ZIP or postal code")
    country: Optional[str] = Field(default=None, description="Country code")


class OrderRequest(BaseModel):
    """Candidate order record.

    Every field is optional at the shape level so that a missing value is
    reported by the constraint rules instead of failing the parse.
    """
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    order_id: Optional[str] = Field(default=None, description="Unique order identifier")
    customer_email: Optional[str] = Field(default=None, description="Customer email address")
    order_date: Optional[date] = Field(default=None, description="Date when order was placed")
    items: Optional[Tuple[OrderItem, ...]] = Field(default=None, description="List of items in the order")
    total_amount: Optional[float] = Field(default=None, description="Total amount for the order in USD")
    shipping_address: Optional[ShippingAddress] = Field(default=None, description="Shipping address for the order")
    payment_method: Optional[PaymentMethod] = Field(default=None, description="Payment method used")

    def with_order_id(self, order_id: str) -> "OrderRequest":
        return self.model_copy(update={"order_id": order_id})

    def with_customer_email(self, customer_email: str) -> "OrderRequest":
        return self.model_copy(update={"customer_email": customer_email})

    def with_order_date(self, order_date: date) -> "OrderRequest":
        return self.model_copy(update={"order_date": order_date})


# --- Validation Result Schemas ---

class ErrorKind(str, Enum):
    """Where a validation error came from."""
    PARSING = "parsing"
    FIELD_CONSTRAINT = "field_constraint"
    STRUCTURAL = "structural"
    SYSTEM = "system"


class ValidationError(BaseModel):
    """A hard validation failure."""
    model_config = ConfigDict(frozen=True)

    field: str = Field(description="Field that failed validation")
    message: str = Field(description="Error message describing the issue")
    value: Any = Field(default=None, description="The invalid value")
    constraint: str = Field(description="The constraint that was violated")
    kind: ErrorKind = Field(default=ErrorKind.FIELD_CONSTRAINT, description="Error category")


class ValidationWarning(BaseModel):
    """A non-blocking advisory. Never affects validity."""
    model_config = ConfigDict(frozen=True)

    field: str = Field(description="Field that triggered the warning")
    message: str = Field(description="Warning message")
    suggestion: str = Field(description="Suggestion for improvement")


class RecoveryAttempt(BaseModel):
    """One named recovery strategy and its outcome."""
    model_config = ConfigDict(frozen=True)

    strategy: str = Field(description="Recovery strategy used")
    success: bool = Field(description="Whether the recovery was successful")
    description: str = Field(description="Description of what was attempted")
    result: Any = Field(default=None, description="Result of the recovery attempt")


class RecoveryTrail:
    """Ordered record of recovery attempts for a single validation call.

    A strategy appears at most once. Recording it again replaces the earlier
    entry in its original position, so a later success updates the attempt
    instead of duplicating it.
    """

    def __init__(self) -> None:
        self._attempts: List[RecoveryAttempt] = []

    def record(self, strategy: str, success: bool, description: str, result: Any = None) -> RecoveryAttempt:
        attempt = RecoveryAttempt(strategy=strategy, success=success, description=description, result=result)
        for index, existing in enumerate(self._attempts):
            if existing.strategy == strategy:
                self._attempts[index] = attempt
                return attempt
        self._attempts.append(attempt)
        return attempt

    def succeeded(self, strategy: str) -> bool:
        return any(a.strategy == strategy and a.success for a in self._attempts)

    def attempts(self) -> Tuple[RecoveryAttempt, ...]:
        return tuple(self._attempts)

    def __len__(self) -> int:
        return len(self._attempts)


class ValidationResult(BaseModel):
    """Outcome of one validation call (request-scoped, never persisted)."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    valid: bool = Field(description="Whether the validation passed")
    timestamp: datetime = Field(description="When the validation was performed")
    errors: Tuple[ValidationError, ...] = Field(default=(), description="Validation errors found")
    warnings: Tuple[ValidationWarning, ...] = Field(default=(), description="Validation warnings")
    recovery_attempts: Tuple[RecoveryAttempt, ...] = Field(default=(), description="Recovery attempts made to fix errors")
    final_output: Any = Field(default=None, description="Final output after validation and recovery")
    metadata: Mapping[str, Any] = Field(
        default_factory=dict, validate_default=True, description="Additional metadata about the validation"
    )

    @field_validator("metadata")
    @classmethod
    def _freeze_metadata(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("metadata")
    def _serialize_metadata(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(value)

    def to_response(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON body returned over HTTP."""
        return self.model_dump(mode="json", by_alias=True)
