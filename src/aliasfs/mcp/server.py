"""MCP stdio server exposing the filesystem tools."""

from __future__ import annotations

import logging
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from aliasfs.bus.schemas import build_tool_call
from aliasfs.core.aliases import AliasRegistry
from aliasfs.core.paths import PathResolver
from aliasfs.core.policy import ToolPolicy
from aliasfs.core.settings import Settings
from aliasfs.tools.gateway import ToolGateway
from aliasfs.tools.registry import ToolRegistry, register_local_tools

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """Carries a gateway error back through the MCP call handler."""


def build_gateway(
    settings: Settings, aliases: AliasRegistry
) -> tuple[ToolRegistry, ToolGateway]:
    resolver = PathResolver(aliases)
    registry = ToolRegistry()
    register_local_tools(registry, resolver, settings)
    policy = ToolPolicy(read_only=settings.read_only, deny_tools=settings.deny_tools)
    return registry, ToolGateway(registry, policy, aliases)


def build_server(settings: Settings, aliases: AliasRegistry) -> Server:
    registry, gateway = build_gateway(settings, aliases)
    server: Server = Server(settings.server_name)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=spec.name,
                description=spec.description,
                inputSchema=dict(spec.args_schema),
            )
            for spec in registry.list_specs()
        ]

    @server.call_tool()
    async def call_tool(
        name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        result = await gateway.execute(build_tool_call(name, arguments))
        if not result.ok:
            # The MCP server reports raised errors as isError tool results.
            raise ToolCallFailed(result.text)
        return [types.TextContent(type="text", text=result.text)]

    return server


async def run_stdio_server(settings: Settings, aliases: AliasRegistry) -> None:
    server = build_server(settings, aliases)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("aliasfs running on stdio")
        for alias in aliases.list_aliases():
            logger.info("  %s => %s", alias.name, alias.real_root)
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )
