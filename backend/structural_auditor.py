"""Schema-agnostic structural audit of arbitrary JSON.

Parsed JSON is converted once into a small tagged union (JsonNull, JsonBool,
JsonNumber, JsonString, JsonArray, JsonObject) and the audit dispatches on
the node type.

Paths: array elements are `parent[i]`, object fields `parent.key`, and a
root-level field is the bare `key`. The only hard error is a field name
containing a space; everything else is advisory.
"""

import logging
from dataclasses import dataclass, field
from functools import singledispatch
from typing import Any, List, Tuple, Union

from schema import ErrorKind, ValidationError, ValidationWarning

logger = logging.getLogger(__name__)


# --- JSON tree ---

@dataclass(frozen=True)
class JsonNull:
    pass


@dataclass(frozen=True)
class JsonBool:
    value: bool


@dataclass(frozen=True)
class JsonNumber:
    value: Union[int, float]


@dataclass(frozen=True)
class JsonString:
    value: str


@dataclass(frozen=True)
class JsonArray:
    items: Tuple["JsonNode", ...]


@dataclass(frozen=True)
class JsonObject:
    fields: Tuple[Tuple[str, "JsonNode"], ...]


JsonNode = Union[JsonNull, JsonBool, JsonNumber, JsonString, JsonArray, JsonObject]


def to_node(value: Any) -> JsonNode:
    """Convert a `json.loads` result into the tagged tree."""
    if value is None:
        return JsonNull()
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return JsonBool(value)
    if isinstance(value, (int, float)):
        return JsonNumber(value)
    if isinstance(value, str):
        return JsonString(value)
    if isinstance(value, list):
        return JsonArray(tuple(to_node(v) for v in value))
    if isinstance(value, dict):
        return JsonObject(tuple((str(k), to_node(v)) for k, v in value.items()))
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


# --- Audit ---

@dataclass
class AuditReport:
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)


@singledispatch
def _walk(node: Any, path: str, report: AuditReport) -> None:
    raise TypeError(f"Unknown JSON node: {type(node).__name__}")


@_walk.register
def _walk_null(node: JsonNull, path: str, report: AuditReport) -> None:
    report.warnings.append(ValidationWarning(
        field=path,
        message="Null value found",
        suggestion="Consider if null is appropriate here",
    ))


@_walk.register(JsonBool)
@_walk.register(JsonNumber)
@_walk.register(JsonString)
def _walk_scalar(node: Any, path: str, report: AuditReport) -> None:
    return None


@_walk.register
def _walk_array(node: JsonArray, path: str, report: AuditReport) -> None:
    if not node.items:
        report.warnings.append(ValidationWarning(
            field=path,
            message="Empty array",
            suggestion="Arrays should typically contain at least one element",
        ))
    for index, item in enumerate(node.items):
        _walk(item, f"{path}[{index}]", report)


@_walk.register
def _walk_object(node: JsonObject, path: str, report: AuditReport) -> None:
    for key, child in node.fields:
        field_path = f"{path}.{key}" if path else key
        if " " in key:
            report.errors.append(ValidationError(
                field=field_path,
                message="Field name contains spaces",
                value=key,
                constraint="no_spaces_in_field_names",
                kind=ErrorKind.STRUCTURAL,
            ))
        _walk(child, field_path, report)


class StructuralAuditor:
    """Walks a parsed JSON value and reports structural issues."""

    def audit(self, value: Any) -> AuditReport:
        """Audit a value produced by `json.loads`.

        Args:
            value: Parsed JSON (dict, list, scalar or None)

        Returns:
            AuditReport with hard errors and advisory warnings
        """
        root = to_node(value)
        report = AuditReport()

        if isinstance(root, JsonObject) and not root.fields:
            report.warnings.append(ValidationWarning(
                field="root",
                message="Empty JSON object",
                suggestion="Consider if this is intentional",
            ))

        _walk(root, "", report)

        if report.errors:
            logger.warning(f"Structural audit found {len(report.errors)} error(s)")
        return report
