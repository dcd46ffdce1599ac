from __future__ import annotations

import json

import pytest

from aliasfs.core.policy import RiskLevel
from aliasfs.core.settings import DEFAULT_SEARCH_IGNORE, Settings
from aliasfs.tools.registry import ToolRegistry, ToolSpec, register_local_tools


async def _handler() -> str:
    return "ok"


def _settings() -> Settings:
    return Settings(
        server_name="aliasfs",
        log_level="WARNING",
        read_only=False,
        deny_tools=frozenset(),
        tool_timeout_ms=5000,
        search_ignore=DEFAULT_SEARCH_IGNORE,
        alias_args=(),
    )


def test_tool_registry_registers_handler() -> None:
    registry = ToolRegistry()
    spec = ToolSpec(
        name="demo.tool",
        description="demo",
        args_schema={},
        risk_level=RiskLevel.READ,
        timeout_ms=1000,
        caps=set(),
    )
    registry.register(spec, _handler)
    assert registry.get("demo.tool") == spec
    assert registry.handler("demo.tool") is _handler
    with pytest.raises(ValueError):
        registry.register(spec, _handler)


def test_register_local_tools(resolver) -> None:
    registry = ToolRegistry()
    register_local_tools(registry, resolver, _settings())

    specs = {spec.name: spec for spec in registry.list_specs()}

    assert list(specs) == [
        "writeFile",
        "readFileContent",
        "editFile",
        "manageFile",
        "manageFolder",
        "searchFilesAndFolders",
    ]
    assert specs["readFileContent"].risk_level is RiskLevel.READ
    assert specs["searchFilesAndFolders"].risk_level is RiskLevel.READ
    assert specs["manageFolder"].risk_level is RiskLevel.MUTATING
    assert all(spec.timeout_ms == 5000 for spec in specs.values())


@pytest.mark.asyncio
async def test_local_handlers_use_wire_argument_names(resolver, roots) -> None:
    registry = ToolRegistry()
    register_local_tools(registry, resolver, _settings())

    await registry.handler("writeFile")(filePath="docs/a.txt", content="hi")
    listing = await registry.handler("searchFilesAndFolders")(pattern="docs/*")

    assert (roots["docs"] / "a.txt").read_text() == "hi"
    assert json.loads(listing) == [{"path": "docs/a.txt", "type": "file"}]
