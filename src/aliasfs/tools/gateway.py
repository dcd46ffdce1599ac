"""Tool execution with policy and validation."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from aliasfs.bus.schemas import ToolCall, ToolResult
from aliasfs.core.aliases import AliasRegistry
from aliasfs.core.errors import AliasFsError, ErrorKind
from aliasfs.core.policy import Decision, ToolPolicy
from aliasfs.tools.registry import ToolRegistry
from aliasfs.utils.jsonschema import validate_jsonschema
from aliasfs.utils.redact import redact_text

logger = logging.getLogger(__name__)


class ToolGateway:
    def __init__(
        self,
        registry: ToolRegistry,
        policy: ToolPolicy,
        aliases: AliasRegistry,
    ) -> None:
        self._registry = registry
        self._policy = policy
        self._aliases = aliases

    async def execute(self, call: ToolCall) -> ToolResult:
        try:
            spec = self._registry.get(call.tool)
        except KeyError:
            return self._failure(
                call, f"Unknown tool: {call.tool}", ErrorKind.INVALID_ARGUMENT, 0
            )
        decision = self._policy.evaluate(spec.name, spec.risk_level)
        if decision.decision is Decision.DENY:
            return self._failure(call, decision.reason, ErrorKind.ACCESS_DENIED, 0)

        handler = self._registry.handler(spec.name)
        logger.debug("Calling %s(%s)", spec.name, _describe_args(call.args))
        start = time.perf_counter()
        try:
            validate_jsonschema(spec.args_schema, call.args)
            text = await asyncio.wait_for(
                handler(**call.args), timeout=spec.timeout_ms / 1000
            )
        except AliasFsError as exc:
            logger.info("%s failed (%s): %s", spec.name, exc.kind.value, exc.message)
            return self._failure(call, exc.message, exc.kind, _elapsed_ms(start))
        except TimeoutError:
            logger.warning("%s timed out after %dms", spec.name, spec.timeout_ms)
            return self._failure(
                call,
                f"{spec.name} timed out after {spec.timeout_ms}ms",
                ErrorKind.IO_FAILURE,
                _elapsed_ms(start),
            )
        except Exception as exc:
            logger.exception("%s raised an unexpected error", spec.name)
            return self._failure(
                call, str(exc), ErrorKind.IO_FAILURE, _elapsed_ms(start)
            )

        elapsed_ms = _elapsed_ms(start)
        logger.info("%s completed in %dms", spec.name, elapsed_ms)
        return ToolResult(
            call_id=call.call_id,
            ok=True,
            text=text,
            elapsed_ms=elapsed_ms,
        )

    def _failure(
        self, call: ToolCall, message: str, kind: ErrorKind, elapsed_ms: int
    ) -> ToolResult:
        return ToolResult(
            call_id=call.call_id,
            ok=False,
            text=f"Error: {redact_text(message, self._aliases)}",
            error_kind=kind,
            elapsed_ms=elapsed_ms,
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _describe_args(args: dict[str, Any]) -> str:
    parts = []
    for key, value in args.items():
        if isinstance(value, str) and len(value) > 60:
            value = f"<{len(value)} chars>"
        elif isinstance(value, list):
            value = f"<{len(value)} items>"
        parts.append(f"{key}={value}")
    return ", ".join(parts)
