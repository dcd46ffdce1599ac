"""Virtual path resolution with sandbox boundary checks.

Callers address files as ``<alias>/<relative path>``. Every path handed to a
tool is resolved through :class:`PathResolver`, which follows symlinks and
re-checks the resolved target against the registered roots, so a link planted
inside an alias cannot point the caller anywhere else.

The check is point-in-time: nothing prevents the filesystem from changing
between validation and the operation that uses the path.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from aliasfs.core.aliases import (
    AliasRegistry,
    expand_home,
    is_root,
    is_under,
    normalize_path,
)
from aliasfs.core.errors import AccessDenied, InvalidArgument, NotFound

_logger = logging.getLogger(__name__)


class PathResolver:
    def __init__(
        self,
        registry: AliasRegistry,
        allowed_roots: Sequence[str] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._allowed_roots = (
            _normalize_roots(allowed_roots) if allowed_roots is not None else None
        )
        self._logger = logger or _logger

    @property
    def registry(self) -> AliasRegistry:
        return self._registry

    @property
    def uses_aliases(self) -> bool:
        return bool(self._registry)

    def allowed_roots(self) -> list[str]:
        if self._allowed_roots is not None:
            return list(self._allowed_roots)
        return self._registry.normalized_roots()

    def validate(
        self, requested: str, allowed_roots: Sequence[str] | None = None
    ) -> Path:
        """Resolve a caller path to a real path inside the sandbox."""
        if not requested:
            raise InvalidArgument("Path must not be empty")
        if self.uses_aliases and is_root(requested):
            raise AccessDenied(
                "Cannot perform this operation on the filesystem root directly"
            )
        try:
            if self.uses_aliases and not _is_legacy_path(requested):
                return self._validate_alias_path(requested)
            roots = (
                _normalize_roots(allowed_roots)
                if allowed_roots is not None
                else self.allowed_roots()
            )
            return self._validate_legacy_path(requested, roots)
        except ValueError as exc:
            # os calls reject embedded NUL bytes with ValueError.
            raise InvalidArgument(f"Invalid path: {exc}") from exc

    def resolve_alias_path(self, alias_path: str) -> Path:
        """Join an alias path onto its real root without touching the disk."""
        name, _, rest = alias_path.strip("/").partition("/")
        alias = self._registry.resolve(name)
        candidate = os.path.normpath(os.path.join(alias.real_root, rest))
        return Path(candidate)

    def to_alias_path(self, path: str | os.PathLike[str]) -> str:
        alias = self._registry.longest_prefix_match(path)
        if alias is None:
            raise AccessDenied(f"Path outside alias directories: {os.fspath(path)}")
        relative = os.path.relpath(os.fspath(path), alias.real_root)
        if relative == ".":
            return alias.name
        return "/".join([alias.name, *Path(relative).parts])

    def display_path(self, path: str | os.PathLike[str], fallback: str) -> str:
        if not self.uses_aliases:
            return fallback
        return self.to_alias_path(path)

    def _validate_alias_path(self, requested: str) -> Path:
        candidate = self.resolve_alias_path(requested)
        roots = self._registry.normalized_roots()
        if not _within(candidate, roots):
            self._logger.warning("Rejected path escaping alias root: %s", requested)
            raise AccessDenied("Access denied - path outside allowed directories")
        return self._resolve_checked(candidate, roots, requested)

    def _validate_legacy_path(self, requested: str, roots: Sequence[str]) -> Path:
        expanded = expand_home(requested)
        absolute = Path(os.path.normpath(Path(expanded).absolute()))
        if not _within(absolute, roots):
            self._logger.warning("Rejected path outside allowed roots: %s", requested)
            raise AccessDenied(
                f"Access denied - path outside allowed directories: {requested}"
            )
        return self._resolve_checked(absolute, roots, requested)

    def _resolve_checked(
        self, candidate: Path, roots: Sequence[str], requested: str
    ) -> Path:
        try:
            real_path = candidate.resolve(strict=True)
        except FileNotFoundError:
            return self._resolve_missing(candidate, roots, requested)
        except OSError as exc:
            raise AccessDenied(
                f"Access denied - cannot resolve path: {exc.strerror or exc}"
            ) from exc
        if not _within(real_path, roots):
            self._logger.warning("Rejected symlink escaping sandbox: %s", candidate)
            raise AccessDenied(
                "Access denied - symlink target outside allowed directories"
            )
        return real_path

    def _resolve_missing(
        self, candidate: Path, roots: Sequence[str], requested: str
    ) -> Path:
        if candidate.is_symlink():
            target = candidate.resolve(strict=False)
            if not _within(target, roots):
                raise AccessDenied(
                    "Access denied - symlink target outside allowed directories"
                )
        parent = candidate.parent
        try:
            real_parent = parent.resolve(strict=True)
        except OSError as exc:
            raise NotFound(
                f"Parent directory does not exist: {_parent_of(requested)}"
            ) from exc
        if not _within(real_parent, roots):
            raise AccessDenied(
                "Access denied - parent directory outside allowed directories"
            )
        return real_parent / candidate.name


def _is_legacy_path(path: str) -> bool:
    return os.path.isabs(path) or path.startswith("~")


def _within(path: Path, roots: Sequence[str]) -> bool:
    normalized = normalize_path(path)
    return any(is_under(normalized, root) for root in roots)


def _parent_of(requested: str) -> str:
    parent, _, _ = requested.rstrip("/").rpartition("/")
    return parent or requested


def _normalize_roots(roots: Sequence[str]) -> list[str]:
    return [normalize_path(Path(expand_home(root)).absolute()) for root in roots]
