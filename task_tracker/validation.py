"""Validation engine for request bodies, query strings and path parameters.

Schemas are Pydantic models derived from InputSchema. Field-level rules come
from the model itself; rules spanning several fields are listed in
``cross_field_rules``. ``validate`` evaluates both and reports every
violation it finds, never just the first.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from .errors import ValidationFailed

logger = logging.getLogger(__name__)

PathItem = Any  # str key or int index
SchemaT = TypeVar("SchemaT", bound="InputSchema")


@dataclass(frozen=True)
class Violation:
    """A single field-level validation failure."""

    path: Tuple[PathItem, ...]
    message: str
    value: Any = None

    def to_dict(self, include_value: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": list(self.path), "message": self.message}
        if include_value and self.value is not None:
            data["value"] = self.value
        return data


@dataclass(frozen=True)
class AtLeastOneOf:
    """Cross-field rule: at least one of ``fields`` must be present."""

    fields: Tuple[str, ...]
    message: str

    def check(self, payload: Mapping[str, Any]) -> Optional[Violation]:
        if any(name in payload for name in self.fields):
            return None
        return Violation(path=self.fields, message=self.message)


class InputSchema(BaseModel):
    """Base for declarative input schemas. Wire names are camelCase."""

    cross_field_rules: ClassVar[Sequence[AtLeastOneOf]] = ()

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@dataclass
class ValidationResult(Generic[SchemaT]):
    value: Optional[SchemaT] = None
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


def _field_label(loc: Sequence[PathItem]) -> str:
    for item in reversed(loc):
        if isinstance(item, str):
            return item
    return "input"


def _describe(error: Dict[str, Any]) -> str:
    """Turn a Pydantic error record into a readable message."""
    name = _field_label(error.get("loc", ()))
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}

    if kind == "missing":
        return f"{name} is required"
    if kind == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"{name} must not be empty"
        return f"{name} must be at least {ctx.get('min_length')} characters"
    if kind == "string_too_long":
        return f"{name} must be at most {ctx.get('max_length')} characters"
    if kind == "string_type":
        return f"{name} must be a string"
    if kind in ("enum", "literal_error"):
        return f"{name} must be one of: {ctx.get('expected')}"
    if kind == "value_error":
        if name == "email":
            return "email must be a valid email address"
        return error.get("msg", "").replace("Value error, ", "", 1)
    return error.get("msg", "Invalid value")


def _offending_value(err: Dict[str, Any]) -> Any:
    # A missing field reports its parent object as input; secrets are never echoed
    if err.get("type") == "missing" or any("password" in str(item) for item in err.get("loc", ())):
        return None
    return err.get("input")


def _violations_from(exc: ValidationError) -> List[Violation]:
    return [
        Violation(path=tuple(err["loc"]), message=_describe(err), value=_offending_value(err))
        for err in exc.errors()
    ]


def validate(schema: Type[SchemaT], payload: Any) -> ValidationResult[SchemaT]:
    """Validate ``payload`` against ``schema`` and collect every violation."""
    if not isinstance(payload, Mapping):
        return ValidationResult(violations=[Violation(path=(), message="Expected a JSON object", value=payload)])

    violations: List[Violation] = []
    for rule in schema.cross_field_rules:
        violation = rule.check(payload)
        if violation is not None:
            violations.append(violation)

    value = None
    try:
        value = schema.model_validate(dict(payload))
    except ValidationError as exc:
        violations.extend(_violations_from(exc))

    if violations:
        return ValidationResult(violations=violations)
    return ValidationResult(value=value)


def require_valid(schema: Type[SchemaT], payload: Any) -> SchemaT:
    """Validate or raise ValidationFailed carrying all violations."""
    result = validate(schema, payload)
    if not result.ok:
        logger.debug(f"{schema.__name__} rejected with {len(result.violations)} violation(s)")
        raise ValidationFailed(result.violations)
    return result.value


def violations_from_request_errors(errors: Sequence[Dict[str, Any]]) -> List[Violation]:
    """Convert FastAPI request-validation errors, dropping the body/query/path prefix."""
    violations = []
    for err in errors:
        loc = tuple(err.get("loc", ()))
        if loc and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        err = {**err, "loc": loc}
        violations.append(Violation(path=loc, message=_describe(err), value=_offending_value(err)))
    return violations


# FastAPI dependencies applying a schema to one part of the request

def valid_body(schema: Type[SchemaT]):
    async def dependency(request: Request) -> SchemaT:
        raw = await request.body()
        if not raw.strip():
            payload: Any = {}
        else:
            try:
                payload = json.loads(raw)
            except (ValueError, RecursionError):
                raise ValidationFailed([Violation(path=(), message="Request body must be valid JSON")]) from None
        return require_valid(schema, payload)

    return dependency


def valid_query(schema: Type[SchemaT]):
    def dependency(request: Request) -> SchemaT:
        return require_valid(schema, dict(request.query_params))

    return dependency


def valid_path(schema: Type[SchemaT]):
    def dependency(request: Request) -> SchemaT:
        return require_valid(schema, dict(request.path_params))

    return dependency
