# =============================================================================
# core/catalog.py  -  The Static Tool Catalog
# =============================================================================
#
# Eight tools, one per upstream endpoint.  The LLM reads the descriptions to
# decide WHEN to call a tool, and the input schemas to know WHAT to pass.
#
# TOOL NAMING CONVENTIONS:
#   - get_*   -> fetch one thing (or server-level info)
#   - list_*  -> fetch a collection
#   - execute_query is the only POST; it is still read-only on the upstream.
#
# The catalog is never mutated at runtime.  core/dispatcher.py refuses to
# start if a catalog entry has no handler (or a handler has no entry).
# =============================================================================

from core.models import ToolDescriptor


def _no_arguments() -> dict:
    return {"type": "object", "properties": {}}


def _one_argument(name: str, kind: str, description: str) -> dict:
    return {
        "type": "object",
        "properties": {name: {"type": kind, "description": description}},
        "required": [name],
    }


TOOL_CATALOG: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="get_server_info",
        description="Get information about the Sisense server",
        input_schema=_no_arguments(),
    ),
    ToolDescriptor(
        name="list_data_sources",
        description="List all available data sources in Sisense",
        input_schema=_no_arguments(),
    ),
    ToolDescriptor(
        name="list_dashboards",
        description="List all dashboards in Sisense",
        input_schema=_no_arguments(),
    ),
    ToolDescriptor(
        name="get_dashboard",
        description="Get details of a specific dashboard",
        input_schema=_one_argument("dashboardId", "string", "The ID of the dashboard to retrieve"),
    ),
    ToolDescriptor(
        name="get_dashboard_widgets",
        description="Get widgets from a specific dashboard",
        input_schema=_one_argument("dashboardId", "string", "The ID of the dashboard"),
    ),
    ToolDescriptor(
        name="execute_query",
        description="Execute a query against Sisense",
        input_schema=_one_argument("query", "object", "The query object to execute"),
    ),
    ToolDescriptor(
        name="list_cubes",
        description="List all available cubes in Sisense",
        input_schema=_no_arguments(),
    ),
    ToolDescriptor(
        name="get_cube_metadata",
        description="Get metadata for a specific cube",
        input_schema=_one_argument("cubeId", "string", "The ID of the cube"),
    ),
)

TOOLS_BY_NAME: dict[str, ToolDescriptor] = {tool.name: tool for tool in TOOL_CATALOG}
