# =============================================================================
# core/errors.py  -  The Closed Error Taxonomy
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Defines the ONE exception type that leaves the core/ layer.  Every
#   failure (bad input, upstream rejection, dead network, missing config)
#   becomes a SisenseError tagged with an ErrorKind.
#
# THE KINDS:
#
#   kind               code                     status   raised when
#   ----------------   ----------------------   ------   ----------------------------
#   VALIDATION         VALIDATION_ERROR         400      input fails a schema
#   AUTHENTICATION     AUTHENTICATION_ERROR     401      upstream rejects the key
#   NOT_FOUND          NOT_FOUND                404      upstream has no such entity
#   CONFIGURATION      CONFIGURATION_ERROR      500      url/key missing or invalid
#   EXTERNAL_SERVICE   EXTERNAL_SERVICE_ERROR   502      upstream errors / bad body
#   NETWORK            NETWORK_ERROR            503      upstream unreachable
#
#   Callers branch on `error.kind` (or `error.code` once serialized), never
#   on the message text.
#
# CONTEXT:
#   `context` is a plain dict of JSON-friendly diagnostics (url, method,
#   status...).  Raw exception objects never go in there: only their message.
# =============================================================================

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Failure kinds, each carrying its machine code and HTTP-style status."""

    VALIDATION = ("VALIDATION_ERROR", 400)
    AUTHENTICATION = ("AUTHENTICATION_ERROR", 401)
    NOT_FOUND = ("NOT_FOUND", 404)
    CONFIGURATION = ("CONFIGURATION_ERROR", 500)
    EXTERNAL_SERVICE = ("EXTERNAL_SERVICE_ERROR", 502)
    NETWORK = ("NETWORK_ERROR", 503)

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def status(self) -> int:
        return self.value[1]


class SisenseError(Exception):
    """A classified failure.

    Created once, at the place the failure is detected, and re-raised
    unchanged by every layer above it.

    Args:
        kind: Which member of the taxonomy this is.
        message: Human-readable description.
        context: Extra diagnostics (plain, serializable values only).
    """

    def __init__(self, kind: ErrorKind, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context: dict[str, Any] = dict(context or {})

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def status(self) -> int:
        return self.kind.status

    def to_dict(self) -> dict[str, Any]:
        """Render the error the way a caller would re-expose it."""
        return {
            "kind": self.kind.name,
            "code": self.code,
            "status": self.status,
            "message": self.message,
            "context": self.context,
        }

    def __repr__(self) -> str:
        return f"SisenseError({self.kind.name}, {self.message!r})"
