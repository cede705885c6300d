"""End-to-end tests of the FastMCP binding (tools/mcp_server.py)."""

import json

import httpx
import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from core.catalog import TOOL_CATALOG
from core.config import Settings
from core.dispatcher import Dispatcher
from tools.mcp_server import create_server


def _content(result):
    # Newer fastmcp returns a CallToolResult, older ones the content list.
    return result.content if hasattr(result, "content") else result


def _server_info(mcp_client):
    # Newer fastmcp exposes it directly, older ones only via initialize_result.
    info = getattr(mcp_client, "server_info", None)
    return info if info is not None else mcp_client.initialize_result.serverInfo


@pytest.fixture
def dispatcher(client, logger):
    return Dispatcher(client, logger=logger)


@pytest.fixture
def server(dispatcher):
    return create_server(dispatcher, Settings.from_env({}))


class TestServer:
    @pytest.mark.asyncio
    async def test_registers_every_catalog_tool(self, server):
        async with Client(server) as mcp_client:
            tools = await mcp_client.list_tools()
        assert {t.name for t in tools} == {t.name for t in TOOL_CATALOG}
        descriptions = {t.name: t.description for t in tools}
        assert descriptions["list_cubes"] == "List all available cubes in Sisense"

    @pytest.mark.asyncio
    async def test_call_tool_returns_rendered_json(self, server, fake_sisense):
        fake_sisense.routes["GET /api/v1/dashboards/123"] = {"oid": "123", "title": "T"}

        async with Client(server) as mcp_client:
            result = await mcp_client.call_tool("get_dashboard", {"dashboardId": "123"})

        assert _content(result)[0].text == json.dumps({"oid": "123", "title": "T"}, indent=2)

    @pytest.mark.asyncio
    async def test_errors_carry_machine_code(self, server, fake_sisense):
        fake_sisense.routes["GET /api/v1/cubes/nope/metadata"] = httpx.Response(404)

        async with Client(server) as mcp_client:
            with pytest.raises(ToolError, match="NOT_FOUND: Sisense resource not found"):
                await mcp_client.call_tool("get_cube_metadata", {"cubeId": "nope"})

    @pytest.mark.asyncio
    async def test_read_dashboard_template(self, server, fake_sisense):
        fake_sisense.routes["GET /api/v1/dashboards/42"] = {"oid": "42"}

        async with Client(server) as mcp_client:
            contents = await mcp_client.read_resource("sisense://dashboard/42")

        assert contents[0].text == json.dumps({"oid": "42"}, indent=2)

    @pytest.mark.asyncio
    async def test_advertises_configured_version(self, dispatcher):
        settings = Settings.from_env({"MCP_SERVER_NAME": "bi", "MCP_SERVER_VERSION": "2.5.0"})

        async with Client(create_server(dispatcher, settings)) as mcp_client:
            info = _server_info(mcp_client)

        assert info.name == "bi"
        assert info.version == "2.5.0"


class TestDashboardDiscovery:
    @pytest.mark.asyncio
    async def test_lists_discovered_dashboards(self, server, fake_sisense):
        fake_sisense.routes["GET /api/v1/dashboards"] = [{"oid": "1", "title": "Sales"}, {"oid": "2"}]

        async with Client(server) as mcp_client:
            resources = await mcp_client.list_resources()

        assert {str(r.uri): r.name for r in resources} == {
            "sisense://dashboard/1": "Sales",
            "sisense://dashboard/2": "Dashboard 2",
        }

    @pytest.mark.asyncio
    async def test_listing_follows_upstream_changes(self, server, fake_sisense):
        fake_sisense.routes["GET /api/v1/dashboards"] = [{"oid": "1", "title": "Sales"}]

        async with Client(server) as mcp_client:
            before = await mcp_client.list_resources()
            fake_sisense.routes["GET /api/v1/dashboards"] = [{"oid": "2", "title": "Churn"}]
            after = await mcp_client.list_resources()

        assert [str(r.uri) for r in before] == ["sisense://dashboard/1"]
        assert [str(r.uri) for r in after] == ["sisense://dashboard/2"]
        assert [r.name for r in after] == ["Churn"]

    @pytest.mark.asyncio
    async def test_discovery_failure_lists_nothing(self, server, fake_sisense):
        fake_sisense.routes["GET /api/v1/dashboards"] = httpx.Response(500)

        async with Client(server) as mcp_client:
            assert await mcp_client.list_resources() == []

    @pytest.mark.asyncio
    async def test_listed_dashboard_is_readable(self, server, fake_sisense):
        fake_sisense.routes["GET /api/v1/dashboards"] = [{"oid": "7", "title": "Ops"}]
        fake_sisense.routes["GET /api/v1/dashboards/7"] = {"oid": "7", "title": "Ops"}

        async with Client(server) as mcp_client:
            (resource,) = await mcp_client.list_resources()
            contents = await mcp_client.read_resource(str(resource.uri))

        assert contents[0].text == json.dumps({"oid": "7", "title": "Ops"}, indent=2)
