"""
Tests for the MCP server router and lifecycle.
"""
from __future__ import annotations

import asyncio
import os
import signal
from contextlib import asynccontextmanager

import pytest
from mcp import types
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND

from mcp_oci_resources import server as server_module
from mcp_oci_resources.config import AppConfig, ServerConfig, ToolMode
from mcp_oci_resources.server import OCIMCPServer, ServerState, run_stdio

from tests.conftest import INSTANCE_ID, oci_response, text_payload

LIST_INSTANCES = {"action": "list", "resourceType": "instances"}


@pytest.fixture
def server(app_config, fake_client) -> OCIMCPServer:
    return OCIMCPServer(app_config, fake_client)


class TestCallTool:
    """Tests for tool call routing."""

    def test_list_tools(self, server):
        assert len(server.list_tools()) == 4

    def test_success_envelope(self, server, fake_client, mock_instance):
        fake_client.compute.list_instances.return_value = oci_response([mock_instance])

        content = asyncio.run(server.call_tool("oci-compute", LIST_INSTANCES))

        assert content[0].type == "text"
        payload = text_payload(content)
        assert payload["success"] is True
        assert payload["count"] == len(payload["data"]) == 1

    def test_unknown_tool(self, server):
        with pytest.raises(McpError) as exc_info:
            asyncio.run(server.call_tool("oci-nothing", {}))
        assert exc_info.value.error.code == METHOD_NOT_FOUND

    def test_invalid_action(self, server, fake_client):
        with pytest.raises(McpError) as exc_info:
            asyncio.run(server.call_tool("oci-compute", {"action": "explode", "resourceType": "instance"}))
        assert exc_info.value.error.code == INVALID_PARAMS
        assert fake_client.compute.method_calls == []

    def test_backend_failure_is_not_protocol_error(self, server, fake_client):
        fake_client.compute.get_instance.side_effect = RuntimeError("connection reset")

        content = asyncio.run(server.call_tool(
            "oci-compute", {"action": "get", "resourceType": "instance", "resourceId": INSTANCE_ID}
        ))

        assert text_payload(content) == {"success": False, "message": "OCI Error: connection reset"}

    def test_get_is_byte_identical(self, server, fake_client, mock_instance):
        fake_client.compute.get_instance.return_value = oci_response(mock_instance)
        arguments = {"action": "get", "resourceType": "instance", "resourceId": INSTANCE_ID}

        first = asyncio.run(server.call_tool("oci-compute", arguments))
        second = asyncio.run(server.call_tool("oci-compute", arguments))

        assert first[0].text == second[0].text


class TestMissingCredentials:
    """Calls made without credentials return setup guidance."""

    @pytest.fixture
    def server(self, unconfigured_app_config, fake_client) -> OCIMCPServer:
        return OCIMCPServer(unconfigured_app_config, fake_client)

    def test_guidance_instead_of_backend_call(self, server, fake_client):
        payload = text_payload(asyncio.run(server.call_tool("oci-compute", LIST_INSTANCES)))

        assert payload["success"] is False
        assert payload["message"].startswith("OCI credentials not configured.")
        assert "OCI_TENANCY_ID" in payload["message"]
        assert "OCI_REGION" in payload["help"]["variables"]
        assert payload["help"]["example"]["resourceType"] == "instances"
        fake_client.compute.list_instances.assert_not_called()

    def test_validation_still_runs_first(self, server):
        with pytest.raises(McpError) as exc_info:
            asyncio.run(server.call_tool("oci-compute", {"action": "list"}))
        assert exc_info.value.error.code == INVALID_PARAMS

    def test_consolidated_example(self, unconfigured_app_config, fake_client):
        config = AppConfig(
            server=ServerConfig(tool_mode=ToolMode.CONSOLIDATED),
            oci=unconfigured_app_config.oci,
        )
        server = OCIMCPServer(config, fake_client)

        payload = text_payload(asyncio.run(server.call_tool(
            "oci-manage", {"service": "compute", "action": "list", "resourceType": "instances"}
        )))

        assert payload["help"]["example"]["service"] == "compute"


class TestLifecycle:
    """Tests for shutdown behavior."""

    def test_shutdown_closes_client(self, server, fake_client):
        asyncio.run(server.shutdown())

        assert server.state is ServerState.SHUTTING_DOWN
        assert fake_client.closed is True

    def test_calls_refused_after_shutdown(self, server, fake_client):
        asyncio.run(server.shutdown())

        with pytest.raises(McpError) as exc_info:
            asyncio.run(server.call_tool("oci-compute", LIST_INSTANCES))
        assert exc_info.value.error.code == INTERNAL_ERROR
        fake_client.compute.list_instances.assert_not_called()

    def test_shutdown_waits_for_in_flight_call(self, server, fake_client):
        order = []

        def slow_list(**kwargs):
            order.append("backend")
            return oci_response([])

        fake_client.compute.list_instances.side_effect = slow_list

        async def scenario():
            call = asyncio.create_task(server.call_tool("oci-compute", LIST_INSTANCES))
            await asyncio.sleep(0)
            await server.shutdown()
            order.append("closed")
            return await call

        content = asyncio.run(scenario())

        assert order == ["backend", "closed"]
        assert text_payload(content)["success"] is True


class TestProtocolServer:
    """Tests for the low-level MCP server wiring."""

    def test_call_tool_handler_returns_result(self, server, fake_client):
        fake_client.compute.list_instances.return_value = oci_response([])
        protocol_server = server.build_protocol_server()
        handler = protocol_server.request_handlers[types.CallToolRequest]

        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="oci-compute", arguments=LIST_INSTANCES),
        )
        result = asyncio.run(handler(request))

        assert isinstance(result.root, types.CallToolResult)
        assert result.root.isError is False

    def test_call_tool_handler_raises_protocol_error(self, server):
        handler = server.build_protocol_server().request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="oci-nothing", arguments={}),
        )

        with pytest.raises(McpError):
            asyncio.run(handler(request))

    def test_list_tools_handler(self, server):
        handler = server.build_protocol_server().request_handlers[types.ListToolsRequest]

        result = asyncio.run(handler(types.ListToolsRequest(method="tools/list")))

        assert len(result.root.tools) == 4


class IdleProtocolServer:
    """Protocol server double: serves until cancelled, or returns at once."""

    def __init__(self, until_cancelled: bool = True):
        self.until_cancelled = until_cancelled

    def create_initialization_options(self):
        return None

    async def run(self, read_stream, write_stream, options):
        if self.until_cancelled:
            await asyncio.Event().wait()


@asynccontextmanager
async def fake_stdio_server():
    yield None, None


@pytest.fixture
def fake_stdio(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(server_module, "stdio_server", fake_stdio_server)


class TestRunStdio:
    """Tests for the stdio run loop."""

    def test_sigterm_shuts_down_then_exits(self, server, fake_client, fake_stdio, monkeypatch):
        monkeypatch.setattr(server, "build_protocol_server", lambda: IdleProtocolServer())
        exits = []

        async def scenario():
            task = asyncio.create_task(
                run_stdio(server, terminate=lambda code: exits.append((code, fake_client.closed)))
            )
            await asyncio.sleep(0.05)
            os.kill(os.getpid(), signal.SIGTERM)
            await asyncio.wait_for(task, timeout=5)

        asyncio.run(scenario())

        # client released before the process is ended
        assert exits == [(0, True)]
        assert server.state is ServerState.SHUTTING_DOWN

    def test_stdin_closed_shuts_down_without_exit(self, server, fake_client, fake_stdio, monkeypatch):
        monkeypatch.setattr(
            server, "build_protocol_server", lambda: IdleProtocolServer(until_cancelled=False)
        )
        exits = []

        asyncio.run(run_stdio(server, terminate=exits.append))

        assert exits == []
        assert server.state is ServerState.SHUTTING_DOWN
        assert fake_client.closed is True
