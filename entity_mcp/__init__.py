"""
Entity/Enum MCP server — backend HTTP endpoints exposed as MCP tools.

Architecture:
    ┌──────────────┐     stdio      ┌──────────────┐     HTTP      ┌─────────┐
    │  MCP client  │ ──────────── │  Tool Server  │ ──────────── │ Backend │
    │ (IDE, agent) │  JSON-RPC    │  (this repo)  │  {"data": …} │   API   │
    └──────────────┘     pipes     └──────────────┘               └─────────┘

Each tool is a ToolHandler that makes exactly one backend call through the
RequestForwarder and returns the response's "data" field as text. Failures
are normalized into error results; they never crash the server.

The StdioToolServer base class handles registration, argument checking
and the MCP transport (via the mcp SDK). The LangChain bridge exposes the
same tools to an in-process agent.
"""

from entity_mcp.config import BackendConfig
from entity_mcp.errors import (
    BackendError,
    BackendResponseError,
    ConfigurationError,
    HttpStatusError,
    NetworkError,
    StartupError,
    normalize_error,
)
from entity_mcp.forwarder import RequestForwarder
from entity_mcp.result import ToolResult
from entity_mcp.server import StdioToolServer, ToolHandler


# Bridge requires langchain: lazy import keeps the server standalone
def server_to_langchain_tools(*args, **kwargs):
    from entity_mcp.bridge import server_to_langchain_tools as _impl
    return _impl(*args, **kwargs)


__all__ = [
    "BackendConfig",
    "BackendError",
    "BackendResponseError",
    "ConfigurationError",
    "HttpStatusError",
    "NetworkError",
    "RequestForwarder",
    "StartupError",
    "StdioToolServer",
    "ToolHandler",
    "ToolResult",
    "normalize_error",
    "server_to_langchain_tools",
]
