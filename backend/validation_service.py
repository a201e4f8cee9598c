"""Order output validation and raw JSON validation.

Schema path:
1. Recovery parse (direct -> extract JSON -> fix syntax)
2. Constraint validation
3. Field repair + re-validation (pre-repair violations stay in the error list)
4. Advisory scan

Raw JSON path:
1. Direct parse -> syntax repair on failure
2. Structural audit of the parsed value

Neither path raises: every outcome, including unexpected failures, comes
back as a ValidationResult.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from schema import (
    ErrorKind, RecoveryTrail, ValidationError, ValidationResult
)
from json_validator import JSONValidator, RecoveryFailedError, FIX_JSON_SYNTAX
from constraint_validator import Violation, validate_order
from repair_engine import FieldRepairEngine
from advisory import AdvisoryScanner
from structural_auditor import StructuralAuditor

logger = logging.getLogger(__name__)


def violation_to_error(violation: Violation) -> ValidationError:
    return ValidationError(
        field=violation.field,
        message=violation.message,
        value=violation.value,
        constraint=violation.rule_id,
        kind=ErrorKind.FIELD_CONSTRAINT,
    )


class ValidationService:
    """Turns raw model output into a ValidationResult."""

    def __init__(self,
                 repair_engine: Optional[FieldRepairEngine] = None,
                 advisory_scanner: Optional[AdvisoryScanner] = None,
                 auditor: Optional[StructuralAuditor] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.repair_engine = repair_engine or FieldRepairEngine()
        self.advisory_scanner = advisory_scanner or AdvisoryScanner()
        self.auditor = auditor or StructuralAuditor()
        self.clock = clock or datetime.now

    def validate_order_output(self, raw_output: str) -> ValidationResult:
        """Parse, validate, repair and scan one order produced by a model.

        Args:
            raw_output: Raw model output expected to encode an order

        Returns:
            ValidationResult; finalOutput is the (possibly repaired) order
        """
        now = self.clock()
        today = now.date()
        trail = RecoveryTrail()

        try:
            order = JSONValidator.parse_order_with_recovery(raw_output, trail)
            if order is None:
                return ValidationResult(
                    valid=False,
                    timestamp=now,
                    errors=(ValidationError(
                        field="parsing",
                        message="Failed to parse structured output",
                        value=raw_output,
                        constraint="valid structured value",
                        kind=ErrorKind.PARSING,
                    ),),
                    recovery_attempts=trail.attempts(),
                    final_output=None,
                    metadata={"stage": "parsing_failed"},
                )

            violations = validate_order(order, today)
            # Pre-repair violations are reported even when repair resolves them
            errors = tuple(violation_to_error(v) for v in violations)

            if violations:
                logger.warning(f"Order has {len(violations)} constraint violation(s), attempting repair")
                order = self.repair_engine.apply(order, violations, today, trail)
                violations = validate_order(order, today)
                if violations:
                    logger.warning(f"{len(violations)} violation(s) remain after repair: "
                                   f"{', '.join(v.field for v in violations)}")
                else:
                    logger.info("Recovery successful - all validation errors resolved")

            warnings = tuple(self.advisory_scanner.scan(order))
            valid = not violations

            return ValidationResult(
                valid=valid,
                timestamp=now,
                errors=errors,
                warnings=warnings,
                recovery_attempts=trail.attempts(),
                final_output=order,
                metadata={
                    "type": "order_validation",
                    "recoveryAttempted": len(trail) > 0,
                    "repaired": valid and len(errors) > 0,
                },
            )

        except Exception as e:
            logger.error(f"Unexpected error during order validation: {e}", exc_info=True)
            return self._system_failure(now, e, trail)

    def validate_raw_json(self, raw_json: str) -> ValidationResult:
        """Validate arbitrary JSON without a schema.

        Args:
            raw_json: Raw JSON text

        Returns:
            ValidationResult; finalOutput is the parsed value when parsing succeeded
        """
        now = self.clock()
        trail = RecoveryTrail()

        try:
            try:
                value = JSONValidator.parse_json_with_repair(raw_json, trail)
            except RecoveryFailedError as e:
                return ValidationResult(
                    valid=False,
                    timestamp=now,
                    errors=(ValidationError(
                        field="json",
                        message=f"Invalid JSON: {e}",
                        value=raw_json,
                        constraint="valid_json",
                        kind=ErrorKind.PARSING,
                    ),),
                    recovery_attempts=trail.attempts(),
                    final_output=None,
                    metadata={"stage": "json_parsing_failed"},
                )

            report = self.auditor.audit(value)
            return ValidationResult(
                valid=not report.errors,
                timestamp=now,
                errors=tuple(report.errors),
                warnings=tuple(report.warnings),
                recovery_attempts=trail.attempts(),
                final_output=value,
                metadata={
                    "type": "raw_json_validation",
                    "stage": "audit_complete",
                    "recovered": trail.succeeded(FIX_JSON_SYNTAX),
                },
            )

        except Exception as e:
            logger.error(f"Unexpected error during JSON validation: {e}", exc_info=True)
            return self._system_failure(now, e, trail)

    @staticmethod
    def _system_failure(now: datetime, error: Exception, trail: RecoveryTrail) -> ValidationResult:
        metadata: Dict[str, Any] = {"exception": type(error).__name__}
        return ValidationResult(
            valid=False,
            timestamp=now,
            errors=(ValidationError(
                field="system",
                message=f"Unexpected error: {error}",
                value=None,
                constraint="system_stable",
                kind=ErrorKind.SYSTEM,
            ),),
            recovery_attempts=trail.attempts(),
            final_output=None,
            metadata=metadata,
        )
