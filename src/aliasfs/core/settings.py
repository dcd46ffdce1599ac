"""Settings loader for aliasfs."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_SEARCH_IGNORE = (
    "**/node_modules/**",
    "**/.git/**",
    "**/dist/**",
    "**/build/**",
    "**/.DS_Store",
)

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    server_name: str
    log_level: str
    read_only: bool
    deny_tools: frozenset[str]
    tool_timeout_ms: int
    search_ignore: tuple[str, ...]
    alias_args: tuple[str, ...]


def load_settings() -> Settings:
    load_dotenv(find_dotenv(usecwd=True))
    server_name = os.environ.get("ALIASFS_SERVER_NAME", "aliasfs")
    log_level = _parse_log_level(
        os.environ.get("ALIASFS_LOG_LEVEL", "WARNING"), "ALIASFS_LOG_LEVEL"
    )
    read_only = _parse_bool(
        os.environ.get("ALIASFS_READ_ONLY", "false"), "ALIASFS_READ_ONLY"
    )
    deny_tools = frozenset(_parse_list(os.environ.get("ALIASFS_DENY_TOOLS", "")))
    tool_timeout_ms = _parse_int(
        os.environ.get("ALIASFS_TOOL_TIMEOUT_MS", "30000"), "ALIASFS_TOOL_TIMEOUT_MS"
    )
    if tool_timeout_ms <= 0:
        raise ValueError("ALIASFS_TOOL_TIMEOUT_MS must be positive")
    raw_ignore = os.environ.get("ALIASFS_SEARCH_IGNORE")
    search_ignore = (
        tuple(_parse_list(raw_ignore))
        if raw_ignore is not None
        else DEFAULT_SEARCH_IGNORE
    )
    alias_args = tuple(shlex.split(os.environ.get("ALIASFS_ALIASES", "")))

    return Settings(
        server_name=server_name,
        log_level=log_level,
        read_only=read_only,
        deny_tools=deny_tools,
        tool_timeout_ms=tool_timeout_ms,
        search_ignore=search_ignore,
        alias_args=alias_args,
    )


def _parse_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_log_level(value: str, name: str) -> str:
    normalized = value.strip().upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Invalid log level for {name}: {value}")
    return normalized


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer for {name}: {value}") from exc


def _parse_bool(value: str, name: str) -> bool:
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value}")
