# =============================================================================
# core/dispatcher.py  -  Tool & Resource Dispatch
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Maps a protocol-level request onto exactly ONE SisenseClient call and
#   renders the outcome as an MCP-shaped response:
#
#     list_tools()                 -> the static catalog (never fails)
#     list_resources()             -> dashboards as ResourceDescriptors
#                                     (never fails: degrades to [])
#     read_resource(uri)           -> {"contents": [{uri, mimeType, text}]}
#     call_tool(name, arguments)   -> {"content": [{"type": "text", "text"}]}
#
# DISPATCH TABLE:
#   Tool names map to ToolHandler records (closure + the argument it needs).
#   The table is checked against the catalog when the Dispatcher is built,
#   so a catalog entry without a handler is a startup error.
#
# ERROR POLICY:
#   - A SisenseError from below is re-raised UNCHANGED.
#   - Request-shape problems here (missing argument, unknown tool, bad URI)
#     are VALIDATION errors.
#   - Anything else is wrapped once as EXTERNAL_SERVICE with the original
#     message in context.
#   - Resource discovery is the exception: failures are logged as a
#     warning and an empty list is returned.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

from core.catalog import TOOL_CATALOG
from core.errors import ErrorKind, SisenseError
from core.json_utils import safe_stringify
from core.models import (
    JSON_MIME_TYPE,
    RESOURCE_SCHEME,
    ResourceDescriptor,
    ResourceRef,
    ToolDescriptor,
)
from core.sisense import SisenseClient

RENDER_INDENT = 2


# -----------------------------------------------------------------------------
# ToolHandler - how one tool reaches the client
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolHandler:
    """Dispatch record for one tool.

    `argument` names the single required argument (None for argument-less
    tools); `argument_type` is the primitive it must be.
    """

    call: Callable[..., Awaitable[Any]]
    argument: Optional[str] = None
    argument_type: Optional[type] = None

    def check(self, arguments: dict[str, Any]) -> tuple:
        """Loose presence/type check; returns the positional args for `call`."""
        if self.argument is None:
            return ()
        value = arguments.get(self.argument)
        if value is None or value == "" or not isinstance(value, self.argument_type):
            label = "a string" if self.argument_type is str else "an object"
            raise SisenseError(
                ErrorKind.VALIDATION,
                f"{self.argument} is required and must be {label}",
                {"argument": self.argument, "received": type(value).__name__},
            )
        return (value,)


TOOL_HANDLERS: dict[str, ToolHandler] = {
    "get_server_info": ToolHandler(lambda client: client.get_server_info()),
    "list_data_sources": ToolHandler(lambda client: client.get_data_sources()),
    "list_dashboards": ToolHandler(lambda client: client.get_dashboards()),
    "get_dashboard": ToolHandler(
        lambda client, dashboard_id: client.get_dashboard(dashboard_id), "dashboardId", str
    ),
    "get_dashboard_widgets": ToolHandler(
        lambda client, dashboard_id: client.get_dashboard_widgets(dashboard_id), "dashboardId", str
    ),
    "execute_query": ToolHandler(lambda client, query: client.execute_query(query), "query", dict),
    "list_cubes": ToolHandler(lambda client: client.get_cubes()),
    "get_cube_metadata": ToolHandler(
        lambda client, cube_id: client.get_cube_metadata(cube_id), "cubeId", str
    ),
}


def check_handlers(catalog: Iterable[ToolDescriptor], handlers: dict[str, ToolHandler]) -> None:
    """Fail fast if the catalog and the dispatch table disagree."""
    names = {tool.name for tool in catalog}
    missing = sorted(names - handlers.keys())
    extra = sorted(handlers.keys() - names)
    if missing or extra:
        raise RuntimeError(
            f"Tool catalog and dispatch table differ: unhandled={missing}, uncatalogued={extra}"
        )


def parse_resource_uri(uri: str) -> ResourceRef:
    """Split `sisense://<kind>/<id>`; VALIDATION error naming the URI if malformed."""
    prefix = f"{RESOURCE_SCHEME}://"
    if not isinstance(uri, str) or not uri.startswith(prefix):
        raise SisenseError(ErrorKind.VALIDATION, f"Unsupported resource URI: {uri}", {"uri": uri})

    parts = uri[len(prefix):].split("/")
    kind = parts[0]
    resource_id = parts[1] if len(parts) > 1 else ""
    if not resource_id:
        raise SisenseError(ErrorKind.VALIDATION, f"Invalid resource URI: {uri}", {"uri": uri})
    return ResourceRef(scheme=RESOURCE_SCHEME, kind=kind, id=resource_id)


def render_text(result: Any) -> str:
    """Pretty-print a payload for the agent (2-space JSON, never raises)."""
    return safe_stringify(result, indent=RENDER_INDENT)


class Dispatcher:
    """Stateless request router between the MCP surface and SisenseClient."""

    def __init__(
        self,
        client: SisenseClient,
        logger: Optional[logging.Logger] = None,
        catalog: Iterable[ToolDescriptor] = TOOL_CATALOG,
        handlers: Optional[dict[str, ToolHandler]] = None,
    ):
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._catalog = tuple(catalog)
        self._handlers = TOOL_HANDLERS if handlers is None else handlers
        check_handlers(self._catalog, self._handlers)

    # =========================================================================
    # Tools
    # =========================================================================
    def list_tools(self) -> list[ToolDescriptor]:
        return list(self._catalog)

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Run one tool and wrap its result in a single text content block.

        Raises:
            SisenseError: VALIDATION for an unknown tool or a missing/mistyped
                argument (before any network call); whatever the client
                raised otherwise; EXTERNAL_SERVICE for unclassified failures.
        """
        arguments = arguments or {}
        self._logger.debug(f"Calling tool {name}")
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise SisenseError(ErrorKind.VALIDATION, f"Unknown tool: {name}", {"tool": name})
            result = await handler.call(self._client, *handler.check(arguments))
            return {"content": [{"type": "text", "text": render_text(result)}]}
        except SisenseError as exc:
            self._logger.error(f"Tool {name} failed: {exc.code}: {exc.message}")
            raise
        except Exception as exc:
            self._logger.error(f"Tool {name} failed unexpectedly: {exc}")
            raise SisenseError(
                ErrorKind.EXTERNAL_SERVICE,
                "Tool execution failed",
                {"tool": name, "originalError": str(exc) or type(exc).__name__},
            ) from None

    # =========================================================================
    # Resources
    # =========================================================================
    async def list_resources(self) -> list[ResourceDescriptor]:
        """Dashboards as browsable resources.  Never raises."""
        if not self._client.is_configured():
            self._logger.warning("Sisense not configured, returning empty resources list")
            return []

        try:
            dashboards = await self._client.get_dashboards()
            resources = []
            for dashboard in dashboards or []:
                oid = dashboard.get("oid")
                if oid is None:
                    continue
                resources.append(
                    ResourceDescriptor(
                        uri=f"{RESOURCE_SCHEME}://dashboard/{oid}",
                        name=dashboard.get("title") or f"Dashboard {oid}",
                        description=dashboard.get("description"),
                        mime_type=JSON_MIME_TYPE,
                    )
                )
            return resources
        except Exception as exc:
            detail = f"{exc.code}: {exc.message}" if isinstance(exc, SisenseError) else str(exc)
            self._logger.warning(f"Failed to list resources, returning empty list: {detail}")
            return []

    async def read_resource(self, uri: str) -> dict[str, Any]:
        """Fetch the resource behind `uri` as one JSON text content block."""
        self._logger.debug(f"Reading resource {uri}")
        try:
            ref = parse_resource_uri(uri)
            if ref.kind != "dashboard":
                raise SisenseError(
                    ErrorKind.VALIDATION,
                    f"Unsupported resource type: {ref.kind}",
                    {"uri": uri, "kind": ref.kind},
                )
            data = await self._client.get_dashboard(ref.id)
            return {"contents": [{"uri": uri, "mimeType": JSON_MIME_TYPE, "text": render_text(data)}]}
        except SisenseError as exc:
            self._logger.error(f"Failed to read resource {uri}: {exc.code}: {exc.message}")
            raise
        except Exception as exc:
            self._logger.error(f"Failed to read resource {uri} unexpectedly: {exc}")
            raise SisenseError(
                ErrorKind.EXTERNAL_SERVICE,
                "Resource read failed",
                {"uri": uri, "originalError": str(exc) or type(exc).__name__},
            ) from None
