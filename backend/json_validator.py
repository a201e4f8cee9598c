"""Defensive JSON parser with ordered recovery strategies.

Implements the parse side of order output validation:
- Strategy 1: Direct parse against the OrderRequest shape
- Strategy 2: JSON span extraction from surrounding text
- Strategy 3: Syntax repair (quote normalization, trailing commas, bare keys)
- Strategies 2 and 3 are recorded on the recovery trail whenever they run
"""

import json
import re
import logging
from typing import Any, Optional, Pattern, Tuple

from pydantic import ValidationError as PydanticValidationError

from schema import OrderRequest, RecoveryTrail

logger = logging.getLogger(__name__)

EXTRACT_JSON = "extract_json"
FIX_JSON_SYNTAX = "fix_json_syntax"

# Outer object holding exactly one flat inner object
NESTED_OBJECT_PATTERN = re.compile(r"\{[^{}]*\{[^{}]*\}[^{}]*\}", re.DOTALL)

# Applied in order. Shared read-only by every caller.
SYNTAX_REPAIR_RULES: Tuple[Tuple[str, Pattern[str], str], ...] = (
    ("single-quoted keys", re.compile(r"'([^']*)'\s*:"), r'"\1":'),
    ("single-quoted values", re.compile(r":\s*'([^']*)'"), r': "\1"'),
    ("trailing comma before }", re.compile(r",\s*\}"), "}"),
    ("trailing comma before ]", re.compile(r",\s*\]"), "]"),
    ("bare object keys", re.compile(r"([{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)(\s*:)"), r'\1"\2"\3'),
)


class RecoveryFailedError(ValueError):
    """Raised when no recovery strategy produced a parseable value."""


class JSONValidator:
    """Strict parser and repairer for model output."""

    @staticmethod
    def extract_json_span(text: str) -> Optional[str]:
        """Locate the JSON object embedded in surrounding text.

        Prefers a two-level nested object when it is outermost, that is when
        every `{` before it is already closed (stray braces in prose such as
        `{placeholders}`). Otherwise takes everything from the first unclosed
        `{` to the last `}`.

        Args:
            text: Raw model output

        Returns:
            The candidate JSON span, or None if the text has no object
        """
        start = text.find('{')
        if start < 0:
            return None
        end = text.rfind('}')

        match = NESTED_OBJECT_PATTERN.search(text)
        open_brace = JSONValidator._unclosed_brace(text, start, match.start() if match else end)
        if open_brace is not None:
            start = open_brace
        elif match:
            return match.group()

        if end > start:
            return text[start:end + 1]
        return None

    @staticmethod
    def _unclosed_brace(text: str, start: int, stop: int) -> Optional[int]:
        # Outermost `{` in text[start:stop] still open at stop
        depth = 0
        opened = None
        for index in range(start, stop):
            char = text[index]
            if char == '{':
                if depth == 0:
                    opened = index
                depth += 1
            elif char == '}' and depth:
                depth -= 1
        return opened if depth else None

    @staticmethod
    def fix_json_syntax(text: str) -> str:
        """Fix the common JSON authoring mistakes models make.

        Args:
            text: JSON-like text

        Returns:
            Text with every rule of SYNTAX_REPAIR_RULES applied in order
        """
        fixed = text
        for _name, pattern, replacement in SYNTAX_REPAIR_RULES:
            fixed = pattern.sub(replacement, fixed)
        return fixed

    @staticmethod
    def _try_parse_order(text: str) -> Optional[OrderRequest]:
        try:
            return OrderRequest.model_validate_json(text)
        except PydanticValidationError as e:
            logger.debug(f"Order parse failed: {e.error_count()} error(s)")
            return None

    @staticmethod
    def parse_order_with_recovery(text: str, trail: RecoveryTrail,
                                  abort_on_failure: bool = False) -> Optional[OrderRequest]:
        """Parse model output into an OrderRequest, recovering where possible.

        Strategy 1: Direct parse
        Strategy 2: Extract JSON from surrounding text
        Strategy 3: Fix common syntax issues (on the extracted span if any)

        Args:
            text: Raw model output
            trail: Recovery trail for this call; strategies 2 and 3 are recorded here
            abort_on_failure: If True, raise instead of returning None

        Returns:
            Parsed order, or None if every strategy failed

        Raises:
            RecoveryFailedError: If all strategies failed and abort_on_failure=True
        """
        if not isinstance(text, str):
            logger.error(f"Cannot parse order from {type(text).__name__}")
            if abort_on_failure:
                raise RecoveryFailedError("Input is not text")
            return None

        # STRATEGY 1: Direct parse
        order = JSONValidator._try_parse_order(text)
        if order is not None:
            logger.debug("Order parsed successfully (direct)")
            return order
        logger.warning("Initial order parse failed, attempting recovery")

        candidate = text

        # STRATEGY 2: Extract JSON span from surrounding text
        extracted = JSONValidator.extract_json_span(text)
        if extracted is not None and extracted != text:
            trail.record(EXTRACT_JSON, False, "Extracted JSON from surrounding text", extracted)
            order = JSONValidator._try_parse_order(extracted)
            if order is not None:
                trail.record(EXTRACT_JSON, True, "Successfully extracted and parsed JSON", order)
                logger.info("Order recovered via JSON extraction")
                return order
            logger.warning("Parsing extracted JSON failed")
            candidate = extracted

        # STRATEGY 3: Syntax repair
        fixed = JSONValidator.fix_json_syntax(candidate)
        if fixed != candidate:
            trail.record(FIX_JSON_SYNTAX, False, "Applied common JSON fixes", fixed)
            order = JSONValidator._try_parse_order(fixed)
            if order is not None:
                trail.record(FIX_JSON_SYNTAX, True, "Successfully fixed and parsed JSON", order)
                logger.info("Order recovered via JSON syntax repair")
                return order
            logger.warning("Parsing fixed JSON failed")

        logger.error(f"Invalid order output - all recovery strategies failed: {text[:200]}")
        if abort_on_failure:
            raise RecoveryFailedError("Failed to parse structured output")
        return None

    @staticmethod
    def parse_json_with_repair(text: str, trail: RecoveryTrail) -> Any:
        """Parse arbitrary JSON, falling back to one syntax-repair pass.

        Args:
            text: Raw JSON text
            trail: Recovery trail; the repair pass is recorded as fix_json_syntax

        Returns:
            The parsed value (may legitimately be None for a JSON null)

        Raises:
            RecoveryFailedError: If neither the text nor its repaired form parses
        """
        if not isinstance(text, str):
            raise RecoveryFailedError(f"expected text, got {type(text).__name__}")

        try:
            value = json.loads(text)
            logger.debug("JSON parsed successfully (direct)")
            return value
        except json.JSONDecodeError as e:
            logger.warning(f"Raw JSON parse failed: {e}")
            first_error = e

        fixed = JSONValidator.fix_json_syntax(text)
        if fixed == text:
            raise RecoveryFailedError(str(first_error))

        trail.record(FIX_JSON_SYNTAX, False, "Attempted to fix JSON syntax errors", fixed)
        try:
            value = json.loads(fixed)
        except json.JSONDecodeError as e:
            logger.warning(f"Repaired JSON still invalid: {e}")
            raise RecoveryFailedError(str(e)) from e

        trail.record(FIX_JSON_SYNTAX, True, "Successfully fixed JSON syntax", value)
        logger.info("Raw JSON recovered via syntax repair")
        return value
