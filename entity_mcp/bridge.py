"""
Bridge between the entity/enum tool server and LangChain.

The same tools the MCP server exposes over stdio can be handed to a
LangChain agent in-process. Calls still go through StdioToolServer.call(),
so arguments are schema-checked and failures come back as error text.

Usage:
    from entity_mcp.bridge import server_to_langchain_tools
    from entity_mcp.servers.entity_enum import build_server

    tools = server_to_langchain_tools(build_server())
"""

from __future__ import annotations

import asyncio
from typing import Any

import anyio
from langchain_core.tools import StructuredTool

from entity_mcp.errors import normalize_error
from entity_mcp.server import StdioToolServer


def server_tool_to_langchain_tool(
    server: StdioToolServer,
    tool_name: str,
    description_override: str | None = None,
) -> StructuredTool:
    """
    Create a LangChain StructuredTool that calls one tool on the server.

    Args:
        server: The server the tool is registered on
        tool_name: The tool name (as registered on the server)
        description_override: Optional override for the tool description

    Returns:
        A StructuredTool with sync and async entry points. Both return the
        result text; errors are returned as text, never raised.

    The sync entry point runs its own event loop per call, so it cannot be
    used from inside a running loop (use ainvoke there), and a client
    injected into the server's forwarder must not be bound to another loop.
    """
    handler = next((h for h in server.handlers if h.name == tool_name), None)
    if handler is None:
        raise ValueError(f"Unknown tool: '{tool_name}'")

    async def _acall(**kwargs: Any) -> str:
        result = await server.call(tool_name, kwargs)
        return result.text

    async def _acall_dict(kwargs: dict[str, Any]) -> str:
        return await _acall(**kwargs)

    def _call(**kwargs: Any) -> str:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return anyio.run(_acall_dict, kwargs)
        return normalize_error(RuntimeError(
            f"{tool_name} was invoked synchronously inside a running event loop; use ainvoke"
        )).text

    return StructuredTool.from_function(
        func=_call,
        coroutine=_acall,
        name=tool_name,
        description=description_override or handler.description or tool_name,
        args_schema=handler.input_schema,
    )


def server_to_langchain_tools(server: StdioToolServer) -> list[StructuredTool]:
    """Wrap every tool registered on the server, in registration order."""
    return [server_tool_to_langchain_tool(server, h.name) for h in server.handlers]
