# =============================================================================
# core/validation.py  -  Input Validator
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Checks raw tool arguments, resource URIs and connection settings against
#   pydantic schemas BEFORE anything touches the network.  On success the
#   value comes back narrowed to the schema's shape; on failure a
#   SisenseError(VALIDATION) is raised with one entry per violated field:
#
#       {
#           "errors": [{"path": "limit", "message": "...", "code": "too_small"}],
#           "input": {...}              # non-dict inputs wrapped as {"value": x}
#       }
#
# RULES:
#   - Pure and synchronous: no I/O, no logging (the caller decides).
#   - Strict types: 123 is NOT a valid dashboard id, True is NOT a limit.
# =============================================================================

import re
from typing import Annotated, Any, Optional, Union

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    StrictStr,
    TypeAdapter,
    ValidationError,
)
from pydantic_core import PydanticCustomError

from core.errors import ErrorKind, SisenseError
from core.models import SisenseConfig

RESOURCE_URI_PATTERN = re.compile(r"^sisense://(dashboard|cube)/[a-zA-Z0-9_-]+$")

_URL_ADAPTER = TypeAdapter(AnyUrl)


# =============================================================================
# Field rules
# =============================================================================
def _non_empty(message: str):
    def check(value: str) -> str:
        if not value:
            raise PydanticCustomError("too_small", message)
        return value

    return AfterValidator(check)


def _number(value: Any) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError(
            "invalid_type", "Expected number, received {received}", {"received": type(value).__name__}
        )
    return value


def _positive(value: Union[int, float]) -> Union[int, float]:
    if value <= 0:
        raise PydanticCustomError("too_small", "Number must be greater than 0")
    return value


def _non_negative(value: Union[int, float]) -> Union[int, float]:
    if value < 0:
        raise PydanticCustomError("too_small", "Number must be greater than or equal to 0")
    return value


def _resource_uri(value: str) -> str:
    if not RESOURCE_URI_PATTERN.fullmatch(value):
        raise PydanticCustomError("invalid_string", "Invalid resource URI format")
    return value


def _url(value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise PydanticCustomError("invalid_string", "Invalid Sisense URL") from None
    # Keep the caller's spelling; AnyUrl would append a trailing slash.
    return value


# Type check then bound, on the field itself: errors report "limit", never a
# union member such as "limit.int".
PositiveNumber = Annotated[Any, AfterValidator(_number), AfterValidator(_positive)]
NonNegativeNumber = Annotated[Any, AfterValidator(_number), AfterValidator(_non_negative)]

DashboardId = Annotated[StrictStr, _non_empty("Dashboard ID cannot be empty")]
CubeId = Annotated[StrictStr, _non_empty("Cube ID cannot be empty")]
ResourceUri = Annotated[StrictStr, AfterValidator(_resource_uri)]


class QueryInput(BaseModel):
    """Body of POST /api/v1/query/execute.  Unknown keys are dropped."""

    query: Annotated[StrictStr, _non_empty("Query cannot be empty")]
    parameters: Optional[dict[str, Any]] = None
    limit: Optional[PositiveNumber] = None
    offset: Optional[NonNegativeNumber] = None


class ConfigInput(BaseModel):
    url: Annotated[StrictStr, AfterValidator(_url)]
    api_key: Annotated[StrictStr, _non_empty("API key cannot be empty")]


# =============================================================================
# Schema registry
# =============================================================================
# schema id -> (adapter, root field name).  The root name labels errors on
# bare values, which pydantic reports with an empty location.
_SCHEMAS: dict[str, tuple[TypeAdapter, str]] = {
    "dashboard_id": (TypeAdapter(DashboardId), "dashboardId"),
    "cube_id": (TypeAdapter(CubeId), "cubeId"),
    "query": (TypeAdapter(QueryInput), "query"),
    "resource_uri": (TypeAdapter(ResourceUri), "uri"),
    "sisense_config": (TypeAdapter(ConfigInput), "config"),
}

SCHEMA_IDS = tuple(_SCHEMAS)


def _describe_errors(exc: ValidationError, root: str) -> list[dict[str, str]]:
    errors = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"]) or root
        errors.append({"path": path, "message": err["msg"], "code": err["type"]})
    return errors


def validate(schema_id: str, value: Any) -> Any:
    """Validate `value` against the named schema and return the narrowed value.

    Args:
        schema_id: One of SCHEMA_IDS.
        value: Anything the caller received.

    Returns:
        The validated value (model instances for object schemas).

    Raises:
        SisenseError: kind VALIDATION, with per-field errors and the input.
        KeyError: for an unknown schema id (a programming error).
    """
    adapter, root = _SCHEMAS[schema_id]
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise SisenseError(
            ErrorKind.VALIDATION,
            "Input validation failed",
            {
                "errors": _describe_errors(exc, root),
                "input": value if isinstance(value, dict) else {"value": value},
            },
        ) from None


# =============================================================================
# Convenience wrappers (one per schema)
# =============================================================================
def validate_dashboard_id(dashboard_id: Any) -> str:
    return validate("dashboard_id", dashboard_id)


def validate_cube_id(cube_id: Any) -> str:
    return validate("cube_id", cube_id)


def validate_query(query: Any) -> dict[str, Any]:
    """Validate a query object; returns a plain dict without unset fields."""
    return validate("query", query).model_dump(exclude_none=True)


def validate_resource_uri(uri: Any) -> str:
    return validate("resource_uri", uri)


def validate_sisense_config(config: Any) -> SisenseConfig:
    """Validate connection settings given as a dict or a SisenseConfig."""
    if isinstance(config, SisenseConfig):
        # The credential must not end up in the error context.
        raw = {"url": config.url, "api_key": config.api_key}
    else:
        raw = config
    try:
        checked = validate("sisense_config", raw)
    except SisenseError as exc:
        if isinstance(exc.context.get("input"), dict) and "api_key" in exc.context["input"]:
            exc.context["input"] = {**exc.context["input"], "api_key": "[redacted]"}
        raise
    return SisenseConfig(url=checked.url, api_key=checked.api_key)
