"""
MCP tool server base class.

A tool server is a standalone process that:
1. Speaks MCP over stdin/stdout (via the mcp SDK)
2. Dispatches each tools/call to one registered ToolHandler
3. Returns a ToolResult, converted to the protocol's CallToolResult

To create a tool server:

    from entity_mcp.server import StdioToolServer, ToolHandler

    class MyTool(ToolHandler):
        name = "my_tool"
        description = "Does something useful"
        parameters = {
            "input": {"type": "string", "description": "The input"},
        }
        required = ["input"]

        async def handle(self, params: dict) -> Any:
            return f"processed: {params['input']}"

    if __name__ == "__main__":
        server = StdioToolServer("my-server")
        server.register(MyTool())
        server.run()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from typing import Any

import anyio
import jsonschema
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from entity_mcp.errors import InvalidArgumentsError, StartupError, normalize_error
from entity_mcp.result import ToolResult

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """Carries an error ToolResult's text out to the SDK's error envelope."""


class ToolHandler(ABC):
    """
    Base class for a tool implementation.

    Subclasses define what a tool does. The server handles transport.
    """

    # Subclasses must set these
    name: str = ""
    description: str = ""
    parameters: dict[str, dict] = {}
    required: list[str] = []

    @abstractmethod
    async def handle(self, params: dict[str, Any]) -> Any:
        """
        Execute the tool with the given parameters.

        Args:
            params: Dict of parameter name → value (already schema-checked)

        Returns:
            The raw payload. Strings are returned as-is, anything else
            is JSON-serialized by run().
        """
        ...

    @property
    def input_schema(self) -> dict:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": self.parameters,
        }
        if self.required:
            schema["required"] = list(self.required)
        return schema

    def get_schema(self) -> dict:
        """Return the tool schema for discovery."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    async def run(self, params: dict[str, Any]) -> ToolResult:
        """Run handle() and wrap the outcome. Always returns, never raises."""
        if params:
            logger.info(f"Calling {self.name}, input: {params}")
        else:
            logger.info(f"Calling {self.name}")

        try:
            payload = await self.handle(params)
        except Exception as e:
            return normalize_error(e)

        logger.info(f"{self.name} completed")
        return ToolResult.from_payload(payload)


class StdioToolServer:
    """
    MCP tool server bound to stdin/stdout.

    Holds the tool registry and adapts it to the mcp SDK's low-level
    Server: tools/list returns the registered schemas, tools/call goes
    through call().
    """

    def __init__(self, name: str, version: str | None = None):
        self.name = name
        self.version = version
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, handler: ToolHandler) -> None:
        """Register a tool handler."""
        if not handler.name:
            raise ValueError(f"ToolHandler {handler.__class__.__name__} has no name")
        if handler.name in self._handlers:
            raise ValueError(f"Tool already registered: '{handler.name}'")
        self._handlers[handler.name] = handler
        logger.debug(f"Registered tool: {handler.name}")

    @property
    def handlers(self) -> list[ToolHandler]:
        """Registered handlers, in registration order."""
        return list(self._handlers.values())

    def list_tools(self) -> list[types.Tool]:
        return [types.Tool(**h.get_schema()) for h in self._handlers.values()]

    async def call(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """
        Route a tool call to its handler.

        Arguments are checked against the handler's input schema first;
        a handler is never entered with arguments that fail the check.
        """
        arguments = arguments or {}

        handler = self._handlers.get(name)
        if not handler:
            return normalize_error(ValueError(
                f"Unknown tool: '{name}'. Available: {list(self._handlers.keys())}"
            ))

        try:
            jsonschema.validate(instance=arguments, schema=handler.input_schema)
        except jsonschema.ValidationError as e:
            return normalize_error(
                InvalidArgumentsError(f"Invalid arguments for {name}: {e.message}")
            )

        return await handler.run(arguments)

    def create_protocol_server(self) -> Server:
        """Build the SDK server with list_tools/call_tool wired to this registry."""
        server = Server(self.name, version=self.version)

        @server.list_tools()
        async def _list_tools() -> list[types.Tool]:
            return self.list_tools()

        # The SDK turns an exception raised here into a CallToolResult with
        # isError=True and str(exception) as its only text item.
        @server.call_tool()
        async def _call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
            result = await self.call(name, arguments)
            if result.is_error:
                raise ToolCallFailed(result.text)
            return result.to_text_content()

        return server

    async def serve(self) -> None:
        """
        Bind to stdio and serve until the transport closes.

        Raises:
            StartupError: the transport could not be bound.
        """
        server = self.create_protocol_server()
        options = server.create_initialization_options()
        async with AsyncExitStack() as stack:
            try:
                read_stream, write_stream = await stack.enter_async_context(stdio_server())
            except Exception as e:
                raise StartupError(f"Failed to bind stdio transport: {e}") from e

            logger.info(f"MCP server '{self.name}' started with {len(self._handlers)} tools: "
                        f"{list(self._handlers.keys())}, waiting for connection...")
            await server.run(read_stream, write_stream, options)

        logger.info("Transport closed")

    def run(self) -> None:
        """
        Main loop: serve MCP over stdin/stdout.

        This blocks until stdin is closed (parent process terminates).
        """
        anyio.run(self.serve)
