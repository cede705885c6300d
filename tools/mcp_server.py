# =============================================================================
# tools/mcp_server.py  -  FastMCP Server (the protocol binding)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the Dispatcher (core/dispatcher.py) over MCP using FastMCP.
#   Each tool here is a thin wrapper: log the request, hand the arguments to
#   the Dispatcher, log and return the rendered text.
#
# HOW IT WORKS (the flow):
#   1. An agent calls a tool by name via MCP (e.g., "get_dashboard")
#   2. FastMCP routes the call to the decorated function below
#   3. The function calls Dispatcher.call_tool(), which validates the input
#      and makes ONE request to Sisense
#   4. The agent receives pretty-printed JSON, or an error whose text starts
#      with the machine code (e.g. "NOT_FOUND: Sisense resource not found")
#
# RESOURCES:
#   - A template, sisense://dashboard/{dashboard_id}, reads any dashboard.
#   - DashboardDiscovery (a middleware) asks Sisense for its dashboards on
#     EVERY resources/list, so the listing tracks dashboards created or
#     deleted while the server runs.
#
# RUNNING THIS SERVER:
#   Use the entry point:  python main.py   (or the sisense-mcp-server script)
# =============================================================================

import json
import logging
import sys
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError, ToolError
from fastmcp.resources import FunctionResource
from fastmcp.server.middleware import Middleware

from core.catalog import TOOLS_BY_NAME
from core.config import Settings
from core.dispatcher import Dispatcher
from core.errors import SisenseError
from core.json_utils import to_json_safe
from core.models import JSON_MIME_TYPE

logger = logging.getLogger("sisense_mcp")

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the MCP server talks to the agent over STDOUT
# (stdio transport).  A log line on stdout would corrupt the JSON-RPC stream.
#
# ANSI colors make tool traffic easy to scan:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for response JSON
#     - YELLOW for intermediate status messages
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"


def configure_logging(level: int = logging.INFO) -> None:
    """Send all logging to stderr in the server's console format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _log_request(tool_name: str, **params) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the rendered response as compact JSON, then return it unchanged."""
    try:
        compact = json.dumps(json.loads(text), separators=(",", ":"))
    except ValueError:
        compact = text
    logger.info(f"{_GREEN}  ← {tool_name} response: {compact}{_RESET}")
    return text


def _describe(tool_name: str) -> str:
    return TOOLS_BY_NAME[tool_name].description


def _error_text(exc: SisenseError) -> str:
    return f"{exc.code}: {exc.message}"


# =============================================================================
# Server construction
# =============================================================================
def create_server(dispatcher: Dispatcher, settings: Settings) -> FastMCP:
    """Build the FastMCP server with every catalog tool and the dashboard template."""
    mcp = FastMCP(
        settings.server_name,
        instructions=settings.server_description,
        version=settings.server_version,
    )
    mcp.add_middleware(DashboardDiscovery(dispatcher))

    async def run_tool(name: str, arguments: dict[str, Any]) -> str:
        _log_request(name, **arguments)
        try:
            result = await dispatcher.call_tool(name, arguments)
        except SisenseError as exc:
            _log_status(f"{name} failed with {exc.code} (status {exc.status})")
            raise ToolError(_error_text(exc)) from exc
        return _log_response(name, result["content"][0]["text"])

    # -------------------------------------------------------------------------
    # Tools without arguments
    # -------------------------------------------------------------------------
    @mcp.tool(description=_describe("get_server_info"))
    async def get_server_info() -> str:
        return await run_tool("get_server_info", {})

    @mcp.tool(description=_describe("list_data_sources"))
    async def list_data_sources() -> str:
        return await run_tool("list_data_sources", {})

    @mcp.tool(description=_describe("list_dashboards"))
    async def list_dashboards() -> str:
        return await run_tool("list_dashboards", {})

    @mcp.tool(description=_describe("list_cubes"))
    async def list_cubes() -> str:
        return await run_tool("list_cubes", {})

    # -------------------------------------------------------------------------
    # Tools with one argument
    # -------------------------------------------------------------------------
    # The parameter names match the catalog's input schemas (camelCase), so
    # agents see the same contract either way.
    @mcp.tool(description=_describe("get_dashboard"))
    async def get_dashboard(dashboardId: str) -> str:
        return await run_tool("get_dashboard", {"dashboardId": dashboardId})

    @mcp.tool(description=_describe("get_dashboard_widgets"))
    async def get_dashboard_widgets(dashboardId: str) -> str:
        return await run_tool("get_dashboard_widgets", {"dashboardId": dashboardId})

    @mcp.tool(description=_describe("execute_query"))
    async def execute_query(query: dict[str, Any]) -> str:
        return await run_tool("execute_query", {"query": query})

    @mcp.tool(description=_describe("get_cube_metadata"))
    async def get_cube_metadata(cubeId: str) -> str:
        return await run_tool("get_cube_metadata", {"cubeId": cubeId})

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------
    @mcp.resource(
        "sisense://dashboard/{dashboard_id}",
        name="dashboard",
        description="A Sisense dashboard as JSON",
        mime_type=JSON_MIME_TYPE,
    )
    async def read_dashboard(dashboard_id: str) -> str:
        return await _read(dispatcher, f"sisense://dashboard/{dashboard_id}")

    return mcp


async def _read(dispatcher: Dispatcher, uri: str) -> str:
    try:
        result = await dispatcher.read_resource(uri)
    except SisenseError as exc:
        raise ResourceError(_error_text(exc)) from exc
    return result["contents"][0]["text"]


def _reader(dispatcher: Dispatcher, uri: str):
    async def read() -> str:
        return await _read(dispatcher, uri)

    return read


# =============================================================================
# Live dashboard discovery
# =============================================================================
class DashboardDiscovery(Middleware):
    """Append the dashboards Sisense reports right now to every resources/list.

    Discovery never fails the listing: the Dispatcher degrades to an empty
    list and logs why.  Reads still go through the dashboard template.
    """

    def __init__(self, dispatcher: Dispatcher):
        self._dispatcher = dispatcher

    async def on_list_resources(self, context, call_next):
        resources = list(await call_next(context))
        descriptors = await self._dispatcher.list_resources()
        for descriptor in descriptors:
            resources.append(
                FunctionResource.from_function(
                    _reader(self._dispatcher, descriptor.uri),
                    uri=descriptor.uri,
                    name=descriptor.name,
                    description=descriptor.description,
                    mime_type=descriptor.mime_type,
                )
            )
        _log_status(f"resources/list found {len(descriptors)} dashboards")
        logger.debug(f"Resources: {to_json_safe([d.to_dict() for d in descriptors])}")
        return resources
