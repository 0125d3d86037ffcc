"""Tool call result envelope."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from mcp import types


@dataclass(frozen=True)
class ToolResult:
    """One text item plus an error flag, as returned to the MCP client."""

    text: str
    is_error: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> "ToolResult":
        """Wrap a backend payload: strings as-is, anything else as compact JSON."""
        if isinstance(payload, str):
            return cls(text=payload)
        return cls(text=json.dumps(payload, ensure_ascii=False, separators=(",", ":")))

    @property
    def content(self) -> list[dict[str, str]]:
        return [{"type": "text", "text": self.text}]

    def to_text_content(self) -> list[types.TextContent]:
        return [types.TextContent(type="text", text=self.text)]
