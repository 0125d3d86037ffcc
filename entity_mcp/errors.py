"""
Error taxonomy and normalization.

Everything that can go wrong inside a tool call derives from BackendError
and is turned into an error ToolResult by normalize_error(). StartupError is
the one failure that is never converted: it ends the process.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from entity_mcp.result import ToolResult

logger = logging.getLogger(__name__)

ERROR_PREFIX = "错误: "


class BackendError(Exception):
    """Base class for failures raised while talking to the backend."""


class ConfigurationError(BackendError):
    """The backend endpoint is not configured."""


class NetworkError(BackendError):
    """The request never produced an HTTP response (connect, DNS, timeout)."""


class BackendResponseError(BackendError):
    """A 2xx response whose body could not be decoded as JSON."""


class HttpStatusError(BackendError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, body: Any = None):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(self.render())

    @property
    def has_body(self) -> bool:
        """Objects and arrays always count, even when empty; other values by truthiness."""
        return isinstance(self.body, (dict, list)) or bool(self.body)

    def render(self) -> str:
        message = f"HTTP {self.status_code}: {self.reason}"
        if self.has_body:
            message += f" - {json.dumps(self.body, ensure_ascii=False, separators=(',', ':'))}"
        return message


class InvalidArgumentsError(Exception):
    """Tool arguments do not match the tool's input schema."""


class StartupError(Exception):
    """The stdio transport could not be bound. Fatal."""


def describe_error(error: BaseException) -> str:
    """Render an error as a single readable line (no traceback)."""
    if isinstance(error, HttpStatusError):
        return error.render()
    return str(error) or error.__class__.__name__


def normalize_error(error: BaseException) -> ToolResult:
    """Convert any failure into an error ToolResult. Never raises."""
    message = describe_error(error)
    logger.error(f"Request failed: {message}")
    return ToolResult(text=f"{ERROR_PREFIX}{message}", is_error=True)
