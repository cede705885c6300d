# =============================================================================
# core/json_utils.py  -  Defensive JSON Rendering
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns ANY Python value into JSON text without ever raising.  This is the
#   single place where arbitrary upstream payloads meet the outgoing MCP
#   response (and the log lines), so odd values degrade to marker strings:
#
#       circular container       ->  "[Circular Reference]"
#       function / callable      ->  "[function]"
#       NaN / Infinity           ->  null
#       tuple / set / frozenset  ->  list
#       anything else exotic     ->  "[<TypeName>]"
#
#   Shared (non-circular) sub-objects are rendered normally every time they
#   appear; only a container that contains itself is cut.
# =============================================================================

import json
import math
from typing import Any, Optional

CIRCULAR_MARKER = "[Circular Reference]"
FUNCTION_MARKER = "[function]"


def to_json_safe(value: Any) -> Any:
    """Return a copy of `value` made only of JSON-serializable types."""
    return _sanitize(value, set())


def _sanitize(value: Any, ancestors: set[int]) -> Any:
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None

    if isinstance(value, dict):
        if id(value) in ancestors:
            return CIRCULAR_MARKER
        ancestors.add(id(value))
        try:
            return {
                key if isinstance(key, str) else str(key): _sanitize(item, ancestors)
                for key, item in value.items()
            }
        finally:
            ancestors.discard(id(value))

    if isinstance(value, (list, tuple, set, frozenset)):
        if id(value) in ancestors:
            return CIRCULAR_MARKER
        ancestors.add(id(value))
        try:
            return [_sanitize(item, ancestors) for item in value]
        finally:
            ancestors.discard(id(value))

    if callable(value):
        return FUNCTION_MARKER
    return f"[{type(value).__name__}]"


def safe_stringify(value: Any, indent: Optional[int] = None) -> str:
    """Serialize `value` to JSON text; never raises.

    Args:
        value: Anything (typically a decoded upstream payload).
        indent: Passed to json.dumps.  The MCP responses use 2.

    Returns:
        JSON text, or an "[Error stringifying data: ...]" marker in the
        (unexpected) case the sanitized value still fails to encode.
    """
    try:
        return json.dumps(to_json_safe(value), indent=indent)
    except (TypeError, ValueError, RecursionError) as exc:
        return f"[Error stringifying data: {exc}]"
