from __future__ import annotations

import asyncio

import pytest

from aliasfs.bus.schemas import build_tool_call
from aliasfs.core.aliases import AliasRegistry
from aliasfs.core.errors import ErrorKind
from aliasfs.core.policy import Decision, RiskLevel, ToolPolicy
from aliasfs.core.settings import DEFAULT_SEARCH_IGNORE, Settings
from aliasfs.mcp.server import build_gateway
from aliasfs.tools.gateway import ToolGateway
from aliasfs.tools.registry import ToolRegistry, ToolSpec
from aliasfs.utils.redact import redact_text


def _settings(**overrides) -> Settings:
    values = {
        "server_name": "aliasfs",
        "log_level": "WARNING",
        "read_only": False,
        "deny_tools": frozenset(),
        "tool_timeout_ms": 5000,
        "search_ignore": DEFAULT_SEARCH_IGNORE,
        "alias_args": (),
    }
    values.update(overrides)
    return Settings(**values)


@pytest.mark.asyncio
async def test_gateway_runs_tool(aliases, roots) -> None:
    (roots["docs"] / "a.txt").write_text("hello")
    _registry, gateway = build_gateway(_settings(), aliases)

    result = await gateway.execute(
        build_tool_call("readFileContent", {"filePath": "docs/a.txt"})
    )

    assert result.ok
    assert result.text == "hello"
    assert result.error is None


@pytest.mark.asyncio
async def test_gateway_edit_then_read(aliases, roots) -> None:
    (roots["src"] / "app.py").write_text("x = 1\n")
    _registry, gateway = build_gateway(_settings(), aliases)

    edited = await gateway.execute(
        build_tool_call(
            "editFile",
            {
                "filePath": "src/app.py",
                "edits": [{"oldText": "x = 1", "newText": "x = 2"}],
            },
        )
    )

    assert edited.ok
    assert "-x = 1\n+x = 2" in edited.text
    assert (roots["src"] / "app.py").read_text() == "x = 2\n"


@pytest.mark.asyncio
async def test_gateway_rejects_invalid_arguments(aliases) -> None:
    _registry, gateway = build_gateway(_settings(), aliases)

    missing = await gateway.execute(build_tool_call("readFileContent", {}))
    extra = await gateway.execute(
        build_tool_call("readFileContent", {"filePath": "docs/a", "mode": "r"})
    )
    no_dest = await gateway.execute(
        build_tool_call("manageFile", {"action": "move", "filePath": "docs/a"})
    )

    for result in (missing, extra, no_dest):
        assert not result.ok
        assert result.error_kind is ErrorKind.INVALID_ARGUMENT
        assert result.text.startswith("Error: Invalid arguments")


@pytest.mark.asyncio
async def test_gateway_reports_error_kinds(aliases) -> None:
    _registry, gateway = build_gateway(_settings(), aliases)

    unknown_alias = await gateway.execute(
        build_tool_call("readFileContent", {"filePath": "nope/a.txt"})
    )
    denied = await gateway.execute(
        build_tool_call("readFileContent", {"filePath": "docs/../../etc/passwd"})
    )
    unknown_tool = await gateway.execute(build_tool_call("formatDisk", {}))

    assert unknown_alias.error_kind is ErrorKind.UNKNOWN_ALIAS
    assert unknown_alias.text == "Error: Unknown alias: nope"
    assert denied.error_kind is ErrorKind.ACCESS_DENIED
    assert unknown_tool.text == "Error: Unknown tool: formatDisk"


@pytest.mark.asyncio
async def test_gateway_edit_not_found(aliases, roots) -> None:
    (roots["docs"] / "a.txt").write_text("one\n")
    _registry, gateway = build_gateway(_settings(), aliases)

    result = await gateway.execute(
        build_tool_call(
            "editFile",
            {"filePath": "docs/a.txt", "edits": [{"oldText": "two", "newText": "2"}]},
        )
    )

    assert result.error_kind is ErrorKind.EDIT_NOT_FOUND
    assert result.text == "Error: Could not find exact match for edit #1:\ntwo"


@pytest.mark.asyncio
async def test_read_only_policy_blocks_mutations(aliases, roots) -> None:
    _registry, gateway = build_gateway(_settings(read_only=True), aliases)

    write = await gateway.execute(
        build_tool_call("writeFile", {"filePath": "docs/a.txt", "content": "x"})
    )
    search = await gateway.execute(
        build_tool_call("searchFilesAndFolders", {"pattern": "*"})
    )

    assert write.error_kind is ErrorKind.ACCESS_DENIED
    assert "read-only" in write.text
    assert not (roots["docs"] / "a.txt").exists()
    assert search.ok


@pytest.mark.asyncio
async def test_denied_tools_are_blocked(aliases) -> None:
    _registry, gateway = build_gateway(
        _settings(deny_tools=frozenset({"manageFolder"})), aliases
    )

    result = await gateway.execute(
        build_tool_call("manageFolder", {"action": "create", "folderPath": "docs/x"})
    )

    assert result.text == "Error: Tool is blocked by policy: manageFolder"


@pytest.mark.asyncio
async def test_gateway_times_out_slow_handlers(aliases) -> None:
    async def slow() -> str:
        await asyncio.sleep(1)
        return "late"

    registry = ToolRegistry()
    registry.register(
        ToolSpec(
            name="slow",
            description="slow",
            args_schema={"type": "object"},
            risk_level=RiskLevel.READ,
            timeout_ms=10,
        ),
        slow,
    )
    gateway = ToolGateway(registry, ToolPolicy(), aliases)

    result = await gateway.execute(build_tool_call("slow"))

    assert result.error_kind is ErrorKind.IO_FAILURE
    assert result.text == "Error: slow timed out after 10ms"


@pytest.mark.asyncio
async def test_gateway_redacts_real_roots(aliases, roots) -> None:
    async def leaky() -> str:
        raise RuntimeError(f"boom at {roots['docs'] / 'a.txt'}")

    registry = ToolRegistry()
    registry.register(
        ToolSpec(
            name="leaky",
            description="leaky",
            args_schema={"type": "object"},
            risk_level=RiskLevel.READ,
            timeout_ms=1000,
        ),
        leaky,
    )
    gateway = ToolGateway(registry, ToolPolicy(), aliases)

    result = await gateway.execute(build_tool_call("leaky"))

    assert result.text == "Error: boom at docs/a.txt"
    assert str(roots["docs"]) not in result.text


def test_redact_text_prefers_nested_roots(roots) -> None:
    nested = roots["docs"] / "api"
    nested.mkdir()
    registry = AliasRegistry()
    registry.register("docs", roots["docs"])
    registry.register("api", nested)

    assert redact_text(f"{nested}/v1.md and {roots['docs']}", registry) == (
        "api/v1.md and docs"
    )


def test_policy_decisions() -> None:
    policy = ToolPolicy(read_only=True, deny_tools={"readFileContent"})
    assert policy.evaluate("searchFilesAndFolders", RiskLevel.READ).decision is (
        Decision.ALLOW
    )
    assert policy.evaluate("readFileContent", RiskLevel.READ).decision is (
        Decision.DENY
    )
    assert policy.evaluate("writeFile", RiskLevel.MUTATING).decision is Decision.DENY
