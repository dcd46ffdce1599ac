"""Glob search across the alias namespace."""

from __future__ import annotations

import datetime as dt
import logging
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from aliasfs.core.aliases import is_root
from aliasfs.core.errors import AliasFsError, InvalidArgument, NotFound
from aliasfs.core.paths import PathResolver
from aliasfs.core.settings import DEFAULT_SEARCH_IGNORE

logger = logging.getLogger(__name__)

_WILDCARDS = frozenset("*?{[")


@dataclass(frozen=True)
class SearchRequest:
    pattern: str
    ignore: tuple[str, ...] | None = None
    cwd: str | None = None
    include_metadata: bool = False


@dataclass(frozen=True)
class GlobInvocation:
    cwd: Path
    pattern: str
    top_level_only: bool = False


@dataclass(frozen=True)
class SearchPlan:
    list_aliases: bool = False
    invocations: list[GlobInvocation] = field(default_factory=list)
    explicit_paths: list[Path] = field(default_factory=list)
    fallback_paths: list[Path] = field(default_factory=list)


def has_wildcards(pattern: str) -> bool:
    return any(char in _WILDCARDS for char in pattern)


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a glob into a regex over ``/``-separated relative paths.

    Supports ``**`` (any depth, including none), ``*`` and ``?`` within one
    segment, ``[...]`` classes with ``!`` negation and ``{a,b}`` alternation.
    """
    out: list[str] = []
    i = 0
    n = len(pattern)
    depth = 0
    while i < n:
        char = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            end = pattern.find("]", i + 2)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = pattern[i + 1 : end].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        elif char == "{":
            out.append("(?:")
            depth += 1
        elif char == "}" and depth:
            out.append(")")
            depth -= 1
        elif char == "," and depth:
            out.append("|")
        else:
            out.append(re.escape(char))
        i += 1
    out.extend(")" * depth)
    return re.compile("".join(out), re.DOTALL)


def _is_ignored(
    relative: str, is_dir: bool, ignore: Sequence[re.Pattern[str]]
) -> bool:
    for regex in ignore:
        if regex.fullmatch(relative):
            return True
        if is_dir and regex.fullmatch(relative + "/"):
            return True
    return False


def glob_paths(cwd: Path, pattern: str, ignore: Iterable[str] = ()) -> list[Path]:
    """Walk ``cwd`` and return absolute paths whose relative path matches."""
    regex = compile_glob(pattern)
    ignore_regexes = [compile_glob(item) for item in ignore]
    matches: list[Path] = []
    for root, dirs, files in os.walk(cwd):
        root_path = Path(root)
        relative_root = root_path.relative_to(cwd).as_posix()
        prefix = "" if relative_root == "." else relative_root + "/"
        kept_dirs = []
        for name in sorted(dirs):
            relative = prefix + name
            if _is_ignored(relative, True, ignore_regexes):
                continue
            kept_dirs.append(name)
            if regex.fullmatch(relative):
                matches.append(root_path / name)
        dirs[:] = kept_dirs
        for name in sorted(files):
            relative = prefix + name
            if _is_ignored(relative, False, ignore_regexes):
                continue
            if regex.fullmatch(relative):
                matches.append(root_path / name)
    return matches


def list_top_level(cwd: Path) -> list[Path]:
    with os.scandir(cwd) as entries:
        return sorted(Path(entry.path) for entry in entries)


def _timestamp(value: float) -> str:
    return dt.datetime.fromtimestamp(value, dt.UTC).isoformat()


def _describe(stats: os.stat_result, entry: dict[str, Any]) -> dict[str, Any]:
    created = getattr(stats, "st_birthtime", stats.st_ctime)
    entry.update(
        size=stats.st_size,
        created=_timestamp(created),
        modified=_timestamp(stats.st_mtime),
    )
    return entry


class SearchPlanner:
    def __init__(
        self,
        resolver: PathResolver,
        default_ignore: Sequence[str] = DEFAULT_SEARCH_IGNORE,
    ) -> None:
        self._resolver = resolver
        self._default_ignore = tuple(default_ignore)

    def plan(self, request: SearchRequest) -> SearchPlan:
        registry = self._resolver.registry
        pattern = request.pattern.replace("\\", "/")
        cwd = request.cwd
        root_cwd = cwd is None or is_root(cwd)

        if pattern == "*" and root_cwd and registry:
            return SearchPlan(list_aliases=True)

        first, _, rest = pattern.partition("/")
        alias = registry.get(first) if registry else None
        if alias is not None:
            if has_wildcards(pattern):
                remaining = rest or "**"
                fallback = [] if "**" in remaining else [alias.real_root / remaining]
                return SearchPlan(
                    invocations=[
                        GlobInvocation(
                            cwd=alias.real_root,
                            pattern=remaining,
                            top_level_only=remaining == "*",
                        )
                    ],
                    fallback_paths=fallback,
                )
            return self._plan_literal(pattern)

        if cwd is not None:
            if registry and is_root(cwd):
                raise InvalidArgument(
                    "Cannot use root as the current working directory for search "
                    "with patterns other than '*'"
                )
            base = self._resolver.validate(cwd)
            return SearchPlan(
                invocations=[
                    GlobInvocation(base, pattern, top_level_only=pattern == "*")
                ]
            )

        if registry:
            return SearchPlan(
                invocations=[
                    GlobInvocation(alias.real_root, pattern)
                    for alias in registry.list_aliases()
                ]
            )

        base = Path.cwd()
        return SearchPlan(
            invocations=[GlobInvocation(base, pattern, top_level_only=pattern == "*")]
        )

    def _plan_literal(self, pattern: str) -> SearchPlan:
        try:
            path = self._resolver.validate(pattern)
        except NotFound:
            return SearchPlan()
        if path.is_file():
            return SearchPlan(explicit_paths=[path])
        if path.is_dir():
            return SearchPlan(invocations=[GlobInvocation(path, "**")])
        if path.parent.is_dir():
            return SearchPlan(invocations=[GlobInvocation(path.parent, path.name)])
        return SearchPlan()

    def search(self, request: SearchRequest) -> list[dict[str, Any]]:
        plan = self.plan(request)
        if plan.list_aliases:
            return self._alias_entries(request.include_metadata)

        ignore = request.ignore if request.ignore is not None else self._default_ignore
        matches: list[Path] = list(plan.explicit_paths)
        for invocation in plan.invocations:
            try:
                if invocation.top_level_only:
                    found = list_top_level(invocation.cwd)
                else:
                    found = glob_paths(invocation.cwd, invocation.pattern, ignore)
            except OSError as exc:
                logger.warning("Search failed in %s: %s", invocation.cwd, exc)
                continue
            logger.debug("Found %d results for %r", len(found), invocation.pattern)
            matches.extend(found)

        if not matches:
            # Names like "notes[1].md" read as globs but may exist verbatim.
            matches.extend(path for path in plan.fallback_paths if path.exists())

        results: list[dict[str, Any]] = []
        for match in matches:
            entry = self._entry(match, request.include_metadata)
            if entry is not None:
                results.append(entry)
        return results

    def _alias_entries(self, include_metadata: bool) -> list[dict[str, Any]]:
        entries: list[dict[str, Any]] = []
        for alias in self._resolver.registry.list_aliases():
            entry: dict[str, Any] = {"path": alias.name, "type": "directory"}
            if include_metadata:
                _describe(alias.real_root.stat(), entry)
            entries.append(entry)
        return entries

    def _entry(self, match: Path, include_metadata: bool) -> dict[str, Any] | None:
        resolver = self._resolver
        try:
            if resolver.uses_aliases:
                if not resolver.registry.contains(match.resolve()):
                    return None
                display = resolver.to_alias_path(match)
            else:
                resolver.validate(str(match))
                display = str(match)
            stats = match.stat()
        except (AliasFsError, OSError, RuntimeError) as exc:
            logger.debug("Skipping search result %s: %s", match, exc)
            return None
        entry: dict[str, Any] = {
            "path": display,
            "type": "directory" if match.is_dir() else "file",
        }
        if include_metadata:
            _describe(stats, entry)
        return entry
