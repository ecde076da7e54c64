"""
OCI Resource MCP Server - Main Entry Point

Low-level MCP server over stdio with:
- a fixed tool catalog (four domain tools, or the consolidated oci-manage tool)
- argument validation answered with JSON-RPC errors
- credential guidance instead of backend calls when credentials are missing
- graceful shutdown on SIGINT/SIGTERM that drains in-flight calls

Environment Variables:
- OCI_MCP_NAME: Server name (default: oci-mcp-server)
- OCI_MCP_LOG_LEVEL: Logging level
- OCI_MCP_JSON_LOGS: Render logs as JSON (default: false)
- OCI_MCP_TOOL_MODE: domains | consolidated
- See config.py for OCI credential variables
"""
from __future__ import annotations

import asyncio
import os
import signal
import sys
from enum import Enum
from typing import Any, Callable

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from mcp_oci_resources.config import CREDENTIAL_DESCRIPTIONS, AppConfig, ToolMode, get_config
from mcp_oci_resources.core import (
    ConfigurationGuidance,
    OCIClientManager,
    configure_logging,
    get_client_manager,
    get_logger,
    render_envelope,
    reset_client_manager,
    server_unavailable,
)
from mcp_oci_resources.tools.catalog import (
    CONSOLIDATED_EXAMPLE,
    DOMAIN_TOOLS,
    ToolCatalog,
)

logger = get_logger("oci-mcp.server")


class ServerState(str, Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting down"


def configuration_guidance(missing: list[str], example: dict[str, Any]) -> ConfigurationGuidance:
    """Setup instructions returned in place of a backend call."""
    return ConfigurationGuidance(
        message=(
            "OCI credentials not configured. Please set the following "
            f"environment variables: {', '.join(missing)}"
        ),
        help={
            "setup": (
                "Export the variables below (or add them to a .env file) and restart "
                "the server. Values missing from the environment are also read from "
                "the OCI config file profile (OCI_CONFIG_FILE, OCI_PROFILE)."
            ),
            "variables": dict(CREDENTIAL_DESCRIPTIONS),
            "example": example,
        },
    )


class OCIMCPServer:
    """Routes tool calls from the protocol layer to the domain dispatchers.

    Owns the server lifecycle: RUNNING until shutdown begins, then
    SHUTTING_DOWN. In-flight calls finish before the backend client closes.
    """

    def __init__(self, config: AppConfig, client: OCIClientManager):
        self.config = config
        self.client = client
        self.catalog = ToolCatalog(config.server.tool_mode)
        self.dispatchers = {tool.name: tool.dispatcher_cls(client) for tool in DOMAIN_TOOLS}

        # Credentials are resolved once at startup
        self.missing_credentials = config.oci.missing_credentials()

        self._state = ServerState.RUNNING
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def state(self) -> ServerState:
        return self._state

    def list_tools(self) -> list[types.Tool]:
        return self.catalog.list_tools()

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        """Handle one tool call.

        Protocol failures (shutdown, unknown tool, invalid arguments) raise
        McpError. Everything else, including backend failures, comes back as
        a single text content item holding the JSON envelope.
        """
        if self._state is not ServerState.RUNNING:
            raise server_unavailable(self._state.value)

        tool, call = self.catalog.resolve(name, arguments)
        logger.info(
            "Tool call",
            tool=name,
            action=call.action,
            resource_type=call.resource_type,
        )

        if self.missing_credentials:
            example = (
                CONSOLIDATED_EXAMPLE
                if self.catalog.mode is ToolMode.CONSOLIDATED
                else tool.example
            )
            envelope = configuration_guidance(self.missing_credentials, example)
        else:
            self._in_flight += 1
            self._idle.clear()
            try:
                envelope = await self.dispatchers[tool.name].execute(call)
            finally:
                self._in_flight -= 1
                if self._in_flight == 0:
                    self._idle.set()

        return [types.TextContent(type="text", text=render_envelope(envelope))]

    async def shutdown(self) -> None:
        """Stop accepting calls, wait for in-flight ones, release the client."""
        if self._state is ServerState.SHUTTING_DOWN:
            return
        self._state = ServerState.SHUTTING_DOWN
        logger.info("Shutting down", in_flight=self._in_flight)
        await self._idle.wait()
        self.client.close()
        logger.info("Shutdown complete")

    def build_protocol_server(self) -> Server:
        """Wire this router into a low-level MCP server."""
        server = Server(self.config.server.name, version=self.config.server.version)

        @server.list_tools()
        async def handle_list_tools() -> list[types.Tool]:
            return self.list_tools()

        async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
            # Registered directly so McpError propagates as a JSON-RPC error
            # instead of being folded into an isError tool result.
            content = await self.call_tool(req.params.name, req.params.arguments)
            return types.ServerResult(types.CallToolResult(content=content, isError=False))

        server.request_handlers[types.CallToolRequest] = handle_call_tool
        return server


def exit_process(code: int = 0) -> None:
    """Terminate immediately once shutdown has completed.

    The stdio transport reads stdin from a worker thread that cannot be
    interrupted, so the interpreter must not wait for it to be joined.
    """
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(code)


async def run_stdio(
    app: OCIMCPServer,
    terminate: Callable[[int], None] = exit_process
) -> None:
    """Serve over stdio until the client disconnects or a signal arrives.

    A signal moves the server to SHUTTING_DOWN, drains in-flight calls,
    releases the backend client and then ends the process through
    ``terminate``.
    """
    protocol_server = app.build_protocol_server()

    async def serve() -> None:
        async with stdio_server() as (read_stream, write_stream):
            await protocol_server.run(
                read_stream,
                write_stream,
                protocol_server.create_initialization_options(),
            )

    serve_task = asyncio.create_task(serve())
    stop_tasks: set[asyncio.Task] = set()

    async def stop() -> None:
        await app.shutdown()
        terminate(0)
        serve_task.cancel()

    def on_signal(sig: signal.Signals) -> None:
        logger.info("Received signal", signal=sig.name)
        if stop_tasks:
            return
        task = asyncio.create_task(stop())
        stop_tasks.add(task)
        task.add_done_callback(stop_tasks.discard)

    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, on_signal, sig)
            installed.append(sig)
        except NotImplementedError:
            logger.debug("Signal handlers unavailable on this platform", signal=sig.name)

    try:
        await asyncio.wait({serve_task})
        if not serve_task.cancelled() and serve_task.exception() is not None:
            raise serve_task.exception()

        # stdin closed without a signal
        await app.shutdown()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def main() -> None:
    """Main entry point."""
    config = get_config()
    configure_logging(
        level=config.server.log_level,
        json_format=config.server.json_logs,
        service_name=config.server.name,
    )

    missing = config.validate_required()
    if missing:
        logger.warning(
            "OCI credentials incomplete; tool calls will return setup guidance",
            missing=missing,
        )

    app = OCIMCPServer(config, get_client_manager(config.oci))
    logger.info(
        "Starting OCI MCP server",
        name=config.server.name,
        version=config.server.version,
        tool_mode=config.server.tool_mode.value,
        tools=app.catalog.tool_names(),
    )
    try:
        asyncio.run(run_stdio(app))
    finally:
        reset_client_manager()


if __name__ == "__main__":
    main()
