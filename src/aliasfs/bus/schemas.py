"""Tool call and result records exchanged with the dispatcher."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from aliasfs.core.errors import ErrorKind


@dataclass(frozen=True)
class ToolCall:
    call_id: str
    tool: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResult:
    call_id: str
    ok: bool
    text: str
    error_kind: ErrorKind | None = None
    elapsed_ms: int = 0

    @property
    def error(self) -> str | None:
        return None if self.ok else self.text


def new_call_id() -> str:
    return f"call_{uuid.uuid4().hex}"


def build_tool_call(tool: str, args: dict[str, Any] | None = None) -> ToolCall:
    return ToolCall(call_id=new_call_id(), tool=tool, args=dict(args or {}))
