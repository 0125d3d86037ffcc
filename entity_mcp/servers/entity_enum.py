"""
Entity/Enum MCP Tool Server.

Exposes five backend endpoints as MCP tools. Each tool forwards one
request to $ENDPOINT and returns the response's "data" field as text.

Launch:
    ENDPOINT=https://api.example.com API_KEY=... python -m entity_mcp.servers.entity_enum

    # or, after installing the package
    entity-enum-mcp --env-file .env
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from dotenv import find_dotenv, load_dotenv

from entity_mcp.config import BackendConfig
from entity_mcp.errors import StartupError
from entity_mcp.forwarder import RequestForwarder
from entity_mcp.server import StdioToolServer, ToolHandler

logger = logging.getLogger(__name__)

SERVER_NAME = "entity-enum-server"
SERVER_VERSION = "1.0.0"

QUESTION_PARAMETERS = {
    "input": {
        "type": "string",
        "description": "输入内容",
    },
}


class BackendTool(ToolHandler):
    """A tool that is exactly one backend call."""

    path: str = ""
    method: str = "GET"

    def __init__(self, forwarder: RequestForwarder | None = None):
        self.forwarder = forwarder or RequestForwarder()

    def build_body(self, params: dict[str, Any]) -> Any:
        return None

    async def handle(self, params: dict[str, Any]) -> Any:
        return await self.forwarder.forward(self.path, self.method, self.build_body(params))


class QuestionTool(BackendTool):
    """POSTs the caller's input to the backend as {"question": input}."""

    method = "POST"
    parameters = QUESTION_PARAMETERS
    required = ["input"]

    def build_body(self, params: dict[str, Any]) -> Any:
        return {"question": params["input"]}


class GetEntitiesSimpleTool(BackendTool):
    name = "get_entities_simple"
    description = "获取所有实体列简要信息(表名称和英文名)"
    path = "/entities/simple"


class GetEnumsSimpleTool(BackendTool):
    name = "get_enums_simple"
    description = "获取所有枚举列简要信息(名称和英文名)"
    path = "/enums/simple"


class GetAllSimpleTool(BackendTool):
    name = "get_all_simple"
    description = "获取所有实体列简要信息 + 所有枚举列简要信息"
    path = "/all/simple"


class GetAiSimpleTool(QuestionTool):
    name = "get_ai_simple"
    description = "获取经过AI推荐的 和输入相关的 实体和枚举类型名称(仅返回中英文名称，如:<用户,User>)"
    path = "/ai/simple"


class GetAiDetailTool(QuestionTool):
    name = "get_ai_detail"
    description = (
        "获取经过AI推荐的 和输入相关的 所有实体和枚举详细结构"
        "(包含详细属性说明，如：<用户,User>:{name:姓名、age:年龄})"
    )
    path = "/ai/detail"


TOOLS: list[type[BackendTool]] = [
    GetEntitiesSimpleTool,
    GetEnumsSimpleTool,
    GetAllSimpleTool,
    GetAiSimpleTool,
    GetAiDetailTool,
]


def build_server(forwarder: RequestForwarder | None = None) -> StdioToolServer:
    """Create the server with all five tools sharing one forwarder."""
    forwarder = forwarder or RequestForwarder()
    server = StdioToolServer(SERVER_NAME, version=SERVER_VERSION)
    for tool_cls in TOOLS:
        server.register(tool_cls(forwarder))
    return server


def configure_logging(verbose: bool = False) -> None:
    """Diagnostics go to stderr; stdout belongs to the protocol."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO; the forwarder already does
    logging.getLogger("httpx").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve the entity/enum backend as MCP tools over stdio.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  ENDPOINT   Backend base URL (required for every tool call)
  API_KEY    Optional bearer token sent with every request
        """,
    )
    parser.add_argument("--env-file", type=str, default=None,
                        help="Load variables from this .env file (default: ./.env if present)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Start the server. Returns the process exit code."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    # Real environment variables win over the .env file
    if args.env_file:
        load_dotenv(args.env_file, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    config = BackendConfig.from_env()
    logger.info("Starting MCP server...")
    logger.info(f"Endpoint: {config.endpoint or 'not set'}")
    logger.info(f"API key: {'set' if config.has_api_key else 'not set'}")

    try:
        server = build_server()
        server.run()
    except StartupError as e:
        logger.error(f"Server failed to start: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 0
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1

    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
