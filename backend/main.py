"""FastAPI backend for order output validation.

Endpoints wrap ValidationService:
1. Schema path: raw model output -> validated (possibly repaired) order
2. Raw JSON path: arbitrary JSON -> structural audit
Valid results return 200, invalid ones 400, with the full result body either way.
"""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from schema import ValidationResult
from validation_service import ValidationService
from repair_engine import fix_email, fix_order_id
from json_validator import JSONValidator

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Order Output Validator",
    description="Parse, validate and repair structured model output",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

validation_service = ValidationService()


def _respond(result: ValidationResult) -> JSONResponse:
    status_code = 200 if result.valid else 400
    return JSONResponse(status_code=status_code, content=result.to_response())


async def _read_text(request: Request) -> str:
    body = await request.body()
    return body.decode("utf-8", errors="replace")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "running",
        "service": "Order Output Validator",
        "version": "1.0.0",
    }


@app.post("/api/validation/order")
async def validate_order(request: Request):
    """
    Validate raw model output against the order schema.

    Body: the raw text returned by the model (prose around the JSON is fine).
    """
    raw_output = await _read_text(request)
    result = validation_service.validate_order_output(raw_output)
    logger.info(f"Order validation finished: valid={result.valid}, "
                f"errors={len(result.errors)}, recoveries={len(result.recovery_attempts)}")
    return _respond(result)


@app.post("/api/validation/json")
async def validate_json(request: Request):
    """
    Validate raw JSON without a schema, repairing common syntax errors.

    Body: raw JSON text.
    """
    raw_json = await _read_text(request)
    result = validation_service.validate_raw_json(raw_json)
    logger.info(f"JSON validation finished: valid={result.valid}, errors={len(result.errors)}")
    return _respond(result)


@app.get("/api/validation/strategies")
async def validation_strategies():
    """Describe the validation types and recovery strategies in use."""
    return {
        "validation_types": {
            "schema_validation": "Parse output into the declared order shape",
            "format_validation": "Verify data formats (dates, emails, patterns)",
            "range_validation": "Ensure values are within acceptable ranges",
            "structural_validation": "Audit arbitrary JSON for nulls, empty arrays and bad field names",
        },
        "recovery_strategies": {
            "parsing_recovery": {
                "extract_json": "Extract JSON from surrounding text",
                "fix_json_syntax": "Fix single quotes, trailing commas and unquoted keys",
            },
            "validation_recovery": {
                "fix_order_id": "Rebuild order IDs as ORD- plus six digits",
                "fix_future_date": "Clamp future order dates to today",
                "fix_email": "Normalize malformed email addresses",
            },
        },
        "advisories": [
            "Unusually high order totals",
            "Large item quantities",
            "Flagged payment methods",
            "Total amount that does not match the line items",
        ],
    }


@app.get("/api/validation/examples")
async def validation_examples():
    """Worked examples; the fixed values are computed by the live repair functions."""
    single_quotes = "{'name': 'value'}"
    trailing_comma = '{"a": 1, "b": 2,}'
    unquoted_keys = '{name: "value"}'
    prose = 'Here is the order: {"id": "ORD-123456", "total": 100}. Please process.'

    return {
        "format_errors": {
            "invalid_order_id": {
                "invalid": "ORDER123",
                "fixed": fix_order_id("ORDER123"),
                "rule": "Must match pattern ORD-XXXXXX",
            },
            "invalid_email": {
                "invalid": " John.Doe@Example.COM ",
                "fixed": fix_email(" John.Doe@Example.COM "),
                "rule": "Must be valid email format",
            },
        },
        "json_errors": {
            "single_quotes": {
                "invalid": single_quotes,
                "fixed": JSONValidator.fix_json_syntax(single_quotes),
                "issue": "JSON requires double quotes",
            },
            "trailing_comma": {
                "invalid": trailing_comma,
                "fixed": JSONValidator.fix_json_syntax(trailing_comma),
                "issue": "No trailing commas allowed",
            },
            "unquoted_keys": {
                "invalid": unquoted_keys,
                "fixed": JSONValidator.fix_json_syntax(unquoted_keys),
                "issue": "Keys must be quoted",
            },
        },
        "recovery_examples": {
            "extracted_json": {
                "input": prose,
                "extracted": JSONValidator.extract_json_span(prose),
                "strategy": "Extract JSON from text",
            },
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
