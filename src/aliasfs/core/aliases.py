"""Alias registry mapping short names to real directory roots."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from aliasfs.core.errors import InvalidArgument, UnknownAlias

logger = logging.getLogger(__name__)

ALIAS_NAME_RE = re.compile(r"[A-Za-z0-9_-]+")
ROOT_NAMES = frozenset({"root", "/"})


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Comparison key for a path. Never used for filesystem access."""
    return os.path.normcase(os.path.normpath(os.fspath(path)))


def expand_home(path: str) -> str:
    if path == "~" or path.startswith("~/"):
        return str(Path.home()) + path[1:]
    return path


def is_under(normalized_path: str, normalized_root: str) -> bool:
    if normalized_path == normalized_root:
        return True
    prefix = normalized_root.rstrip(os.sep) + os.sep
    return normalized_path.startswith(prefix)


def is_root(path: str) -> bool:
    return path in ROOT_NAMES


@dataclass(frozen=True)
class Alias:
    name: str
    real_root: Path
    normalized_root: str


class AliasRegistry:
    def __init__(self) -> None:
        self._aliases: dict[str, Alias] = {}
        self._frozen = False

    def register(self, name: str, real_root: str | os.PathLike[str]) -> Alias:
        if self._frozen:
            raise RuntimeError("Alias registry is frozen")
        if not ALIAS_NAME_RE.fullmatch(name):
            raise InvalidArgument(
                "Alias must only contain letters, numbers, underscores, "
                f"or hyphens - {name}"
            )
        if name in self._aliases:
            raise InvalidArgument(f"Duplicate alias - {name}")
        root = Path(expand_home(os.fspath(real_root))).absolute()
        try:
            resolved = root.resolve(strict=True)
        except OSError as exc:
            raise InvalidArgument(
                f"Error accessing directory {real_root}: {exc.strerror or exc}"
            ) from exc
        if not resolved.is_dir():
            raise InvalidArgument(f"{real_root} is not a directory")
        alias = Alias(
            name=name, real_root=resolved, normalized_root=normalize_path(resolved)
        )
        self._aliases[name] = alias
        logger.debug("Registered alias %s", name)
        return alias

    def freeze(self) -> None:
        self._frozen = True

    def resolve(self, name: str) -> Alias:
        alias = self._aliases.get(name)
        if alias is None:
            raise UnknownAlias(name)
        return alias

    def get(self, name: str) -> Alias | None:
        return self._aliases.get(name)

    def longest_prefix_match(self, path: str | os.PathLike[str]) -> Alias | None:
        normalized = normalize_path(path)
        best: Alias | None = None
        for alias in self._aliases.values():
            if not is_under(normalized, alias.normalized_root):
                continue
            if best is None or len(alias.normalized_root) > len(best.normalized_root):
                best = alias
        return best

    def contains(self, path: str | os.PathLike[str]) -> bool:
        return self.longest_prefix_match(path) is not None

    def normalized_roots(self) -> list[str]:
        return [alias.normalized_root for alias in self._aliases.values()]

    def list_aliases(self) -> list[Alias]:
        return list(self._aliases.values())

    def list_aliases_as_entries(self) -> list[dict[str, str]]:
        return [
            {"name": alias.name, "path": alias.name, "type": "directory"}
            for alias in self._aliases.values()
        ]

    def __len__(self) -> int:
        return len(self._aliases)

    def __bool__(self) -> bool:
        return bool(self._aliases)


def parse_alias_arg(arg: str) -> tuple[str, str]:
    name, sep, directory = arg.partition(":")
    if not sep or not name or not directory:
        raise InvalidArgument(f"Invalid alias:path format - {arg}")
    return name, directory


def parse_alias_args(args: Iterable[str]) -> AliasRegistry:
    args = list(args)
    if not args:
        raise InvalidArgument(
            "Usage: aliasfs serve <alias>:<allowed-directory> "
            "[<alias2>:<directory2>...]"
        )
    registry = AliasRegistry()
    for arg in args:
        name, directory = parse_alias_arg(arg)
        registry.register(name, directory)
    registry.freeze()
    return registry
