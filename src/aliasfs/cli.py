"""Typer CLI for aliasfs."""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from aliasfs.core.aliases import AliasRegistry, parse_alias_args
from aliasfs.core.errors import InvalidArgument
from aliasfs.core.settings import Settings, load_settings
from aliasfs.mcp.server import build_gateway, run_stdio_server

app = typer.Typer(help="Sandboxed filesystem tools over MCP")
# stdout carries the MCP stream, so everything human-facing goes to stderr.
console = Console(stderr=True)

tools_app = typer.Typer(help="Tools operations")
config_app = typer.Typer(help="Configuration")

ALIASES_ARGUMENT = typer.Argument(
    None, help="Permitted roots as alias:directory (defaults to ALIASFS_ALIASES)"
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_aliases(settings: Settings, aliases: list[str] | None) -> AliasRegistry:
    args = aliases or list(settings.alias_args)
    try:
        return parse_alias_args(args)
    except InvalidArgument as exc:
        console.print(f"[red]Error:[/red] {escape(exc.message)}")
        raise typer.Exit(code=1) from exc


@app.command()
def serve(aliases: list[str] | None = ALIASES_ARGUMENT) -> None:
    """Run the MCP server on stdio."""
    settings = load_settings()
    configure_logging(settings.log_level)
    registry = _load_aliases(settings, aliases)
    try:
        asyncio.run(run_stdio_server(settings, registry))
    except KeyboardInterrupt:
        pass


@app.command()
def check(aliases: list[str] | None = ALIASES_ARGUMENT) -> None:
    """Validate alias arguments and show where they point."""
    settings = load_settings()
    registry = _load_aliases(settings, aliases)
    table = Table("alias", "directory")
    for alias in registry.list_aliases():
        table.add_row(alias.name, str(alias.real_root))
    console.print(table)


@tools_app.command("list")
def tools_list() -> None:
    settings = load_settings()
    registry, _gateway = build_gateway(settings, AliasRegistry())
    for spec in registry.list_specs():
        caps = ",".join(sorted(spec.caps)) or "-"
        console.print(f"{spec.name} ({spec.risk_level.value}) caps={caps}")


@config_app.command("show")
def config_show() -> None:
    settings = load_settings()
    console.print(f"server_name={settings.server_name}")
    console.print(f"log_level={settings.log_level}")
    console.print(f"read_only={settings.read_only}")
    console.print(f"deny_tools={','.join(sorted(settings.deny_tools))}")
    console.print(f"tool_timeout_ms={settings.tool_timeout_ms}")
    console.print(f"search_ignore={','.join(settings.search_ignore)}")
    console.print(f"aliases={' '.join(settings.alias_args)}")


app.add_typer(tools_app, name="tools")
app.add_typer(config_app, name="config")


def main() -> None:
    app()
