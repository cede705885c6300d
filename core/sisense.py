# =============================================================================
# core/sisense.py  -  Upstream Client for the Sisense REST API
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns typed method calls (get_dashboard("123")) into ONE authenticated
#   HTTP request each, and classifies every way that request can go wrong.
#
# THE FLOW OF ONE CALL:
#   1. Validate the argument (core/validation.py)   -> VALIDATION
#   2. Check url + api key are both present         -> CONFIGURATION
#   3. Send the request with httpx
#        transport failure (DNS, refused, timeout)  -> NETWORK
#   4. Look at the status code
#        401 -> AUTHENTICATION, 404 -> NOT_FOUND, anything else non-2xx
#        -> EXTERNAL_SERVICE
#   5. Parse the body as JSON
#        not JSON                                   -> EXTERNAL_SERVICE
#   6. Return the decoded JSON untouched (its shape is the caller's business)
#
# NETWORK vs EXTERNAL_SERVICE:
#   NETWORK means "never reached Sisense"; EXTERNAL_SERVICE means "Sisense
#   answered, badly".  Callers treat the two differently, so the split is
#   kept exact.
#
# WHAT THIS MODULE DOES NOT DO:
#   No retries, no caching, no pagination.  Single attempt, transport's
#   default timeout.
# =============================================================================

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from core.errors import ErrorKind, SisenseError
from core.json_utils import safe_stringify
from core.models import SisenseConfig
from core.validation import (
    validate_cube_id,
    validate_dashboard_id,
    validate_query,
    validate_sisense_config,
)

_PREVIEW_CHARS = 200


def _segment(value: str) -> str:
    """Percent-encode an id as ONE path segment ("a/b" must not become two)."""
    return quote(value, safe="")


class SisenseClient:
    """Authenticated access to one Sisense deployment.

    An unconfigured client (missing url or api key) can still be built; it
    just raises CONFIGURATION on every call without touching the network.

    Args:
        config: Base URL and API key.  When BOTH are present they must be
            valid, otherwise construction fails with CONFIGURATION.
        logger: Where request/response diagnostics go.
        transport: Optional httpx transport (tests inject MockTransport).
    """

    def __init__(
        self,
        config: Optional[SisenseConfig] = None,
        logger: Optional[logging.Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._logger = logger or logging.getLogger(__name__)
        self._transport = transport
        config = config or SisenseConfig()

        if config.is_complete:
            try:
                config = validate_sisense_config(config)
            except SisenseError as exc:
                self._logger.error(f"Failed to initialize Sisense client: {exc.message}")
                raise SisenseError(
                    ErrorKind.CONFIGURATION,
                    "Invalid Sisense configuration",
                    {
                        "originalError": exc.message,
                        "errors": exc.context.get("errors", []),
                        "providedConfig": {"url": config.url, "hasApiKey": bool(config.api_key)},
                    },
                ) from None

        self._config = config
        self._base_url = config.url.rstrip("/")

        if not self.is_configured():
            self._logger.warning(
                "Sisense is not properly configured. Some features may not be available. "
                f"(has_url={bool(config.url)}, has_api_key={bool(config.api_key)})"
            )

    # -------------------------------------------------------------------------
    # Configuration gate
    # -------------------------------------------------------------------------
    def is_configured(self) -> bool:
        return bool(self._base_url and self._config.api_key)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    # -------------------------------------------------------------------------
    # The one place that talks HTTP
    # -------------------------------------------------------------------------
    async def _request(self, endpoint: str, method: str = "GET", body: Any = None) -> Any:
        if not self.is_configured():
            raise SisenseError(
                ErrorKind.CONFIGURATION,
                "Sisense is not properly configured",
                {
                    "hasUrl": bool(self._config.url),
                    "hasApiKey": bool(self._config.api_key),
                    "endpoint": endpoint,
                },
            )

        url = f"{self._base_url}{endpoint}"
        context: dict[str, Any] = {"url": url, "method": method, "endpoint": endpoint}
        self._logger.debug(f"Sisense request: {method} {url}")

        content = json.dumps(body) if body is not None else None
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.request(method, url, headers=self._headers(), content=content)
        except httpx.TransportError as exc:
            raise SisenseError(
                ErrorKind.NETWORK,
                "Network error connecting to Sisense",
                {**context, "originalError": str(exc) or type(exc).__name__},
            ) from None
        except Exception as exc:
            self._logger.error(f"Sisense API request failed: {method} {url}: {exc}")
            raise SisenseError(
                ErrorKind.EXTERNAL_SERVICE,
                "Sisense API request failed",
                {**context, "originalError": str(exc) or type(exc).__name__},
            ) from None

        text = response.text
        self._logger.debug(
            f"Sisense response: {response.status_code} for {endpoint} ({len(text)} chars)"
        )

        if not response.is_success:
            raise self._status_error(response, context)

        try:
            return json.loads(text)
        except ValueError:
            raise SisenseError(
                ErrorKind.EXTERNAL_SERVICE,
                "Invalid JSON response from Sisense API",
                {
                    **context,
                    "status": response.status_code,
                    "responseLength": len(text),
                    "responsePreview": text[:_PREVIEW_CHARS],
                },
            ) from None

    @staticmethod
    def _status_error(response: httpx.Response, context: dict[str, Any]) -> SisenseError:
        status = response.status_code
        status_text = response.reason_phrase
        context = {
            **context,
            "status": status,
            "statusText": status_text,
            "responsePreview": response.text[:_PREVIEW_CHARS],
        }
        if status == 401:
            return SisenseError(ErrorKind.AUTHENTICATION, "Sisense authentication failed", context)
        if status == 404:
            return SisenseError(ErrorKind.NOT_FOUND, "Sisense resource not found", context)
        if status >= 500:
            return SisenseError(ErrorKind.EXTERNAL_SERVICE, "Sisense server error", context)
        return SisenseError(
            ErrorKind.EXTERNAL_SERVICE,
            f"Sisense API error: {status} {status_text}".rstrip(),
            context,
        )

    # =========================================================================
    # Domain methods (one endpoint each)
    # =========================================================================
    async def get_server_info(self) -> Any:
        return await self._request("/api/v1/server/info")

    async def get_data_sources(self) -> Any:
        return await self._request("/api/v1/datasources")

    async def get_dashboards(self) -> Any:
        return await self._request("/api/v1/dashboards")

    async def get_dashboard(self, dashboard_id: str) -> Any:
        dashboard_id = validate_dashboard_id(dashboard_id)
        return await self._request(f"/api/v1/dashboards/{_segment(dashboard_id)}")

    async def get_dashboard_widgets(self, dashboard_id: str) -> Any:
        dashboard_id = validate_dashboard_id(dashboard_id)
        return await self._request(f"/api/v1/dashboards/{_segment(dashboard_id)}/widgets")

    async def execute_query(self, query: Any) -> Any:
        """POST a validated query object; returns the decoded result."""
        query = validate_query(query)
        self._logger.debug(f"Executing Sisense query: {safe_stringify(query)}")
        return await self._request("/api/v1/query/execute", method="POST", body=query)

    async def get_cubes(self) -> Any:
        return await self._request("/api/v1/cubes")

    async def get_cube_metadata(self, cube_id: str) -> Any:
        cube_id = validate_cube_id(cube_id)
        return await self._request(f"/api/v1/cubes/{_segment(cube_id)}/metadata")
