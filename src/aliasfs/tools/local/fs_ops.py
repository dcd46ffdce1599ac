"""Filesystem operations confined to the alias sandbox."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Literal

from aliasfs.core.aliases import is_root
from aliasfs.core.errors import AccessDenied, InvalidArgument, IOFailure, NotFound
from aliasfs.core.paths import PathResolver
from aliasfs.edits.patch import Edit, apply_file_edits

logger = logging.getLogger(__name__)

FileAction = Literal["move", "rename", "copy", "delete"]
FolderAction = Literal["create", "rename", "delete"]

FILE_ACTIONS: tuple[str, ...] = ("move", "rename", "copy", "delete")
FOLDER_ACTIONS: tuple[str, ...] = ("create", "rename", "delete")

_PAST_TENSE = {"move": "moved", "rename": "renamed", "copy": "copied"}


def _reject_root(action: str, path: str) -> None:
    if is_root(path):
        raise AccessDenied(f"{action} operations to root directory are not allowed")


def _reject_alias_root(resolver: PathResolver, action: str, path: Path) -> None:
    for alias in resolver.registry.list_aliases():
        if path == alias.real_root:
            raise AccessDenied(f"Cannot {action} the alias root {alias.name}")


def write_file(resolver: PathResolver, file_path: str, content: str) -> str:
    _reject_root("Write", file_path)
    path = resolver.validate(file_path)
    try:
        path.write_text(content, encoding="utf-8", newline="")
    except OSError as exc:
        raise IOFailure.from_os_error("write file", exc) from exc
    display = resolver.display_path(path, file_path)
    logger.info("Wrote %d characters to %s", len(content), display)
    return f"Successfully wrote to {display}"


def read_file_content(resolver: PathResolver, file_path: str) -> str:
    path = resolver.validate(file_path)
    try:
        return path.read_bytes().decode("utf-8")
    except FileNotFoundError as exc:
        raise NotFound(f"File not found: {file_path}") from exc
    except OSError as exc:
        raise IOFailure.from_os_error("read file", exc) from exc
    except UnicodeDecodeError as exc:
        raise InvalidArgument(f"File is not valid UTF-8 text: {file_path}") from exc


def edit_file(
    resolver: PathResolver,
    file_path: str,
    edits: Sequence[Edit],
    dry_run: bool = False,
) -> str:
    _reject_root("Edit", file_path)
    path = resolver.validate(file_path)
    if not path.exists():
        raise NotFound(f"File not found: {file_path}")
    display = resolver.display_path(path, file_path)
    diff = apply_file_edits(path, edits, dry_run=dry_run, label=display)
    status = (
        "Dry run completed. Here's what would change:"
        if dry_run
        else "File edited successfully. Here's what changed:"
    )
    return f"{status}\n\n{diff}"


def manage_file(
    resolver: PathResolver,
    action: FileAction,
    file_path: str,
    new_file_path: str | None = None,
) -> str:
    if action not in FILE_ACTIONS:
        raise InvalidArgument(f"Unknown file action: {action}")
    _reject_root(action, file_path)
    source = resolver.validate(file_path)
    source_display = resolver.display_path(source, file_path)

    if action == "delete":
        try:
            os.unlink(source)
        except FileNotFoundError as exc:
            raise NotFound(f"File not found: {file_path}") from exc
        except OSError as exc:
            raise IOFailure.from_os_error("delete file", exc) from exc
        logger.info("Deleted %s", source_display)
        return f"Successfully deleted {source_display}"

    if not new_file_path:
        raise InvalidArgument(f"newFilePath is required for {action} action")
    _reject_root(action, new_file_path)
    dest = resolver.validate(new_file_path)
    if not source.exists():
        raise NotFound(f"File not found: {file_path}")

    try:
        if action == "copy":
            shutil.copyfile(source, dest)
        elif action == "move":
            shutil.move(source, dest)
        else:
            os.rename(source, dest)
    except OSError as exc:
        raise IOFailure.from_os_error(f"{action} file", exc) from exc

    dest_display = resolver.display_path(dest, new_file_path)
    logger.info("%s %s -> %s", action, source_display, dest_display)
    return f"Successfully {_PAST_TENSE[action]} {source_display} to {dest_display}"


def manage_folder(
    resolver: PathResolver,
    action: FolderAction,
    folder_path: str,
    new_folder_path: str | None = None,
) -> str:
    if action not in FOLDER_ACTIONS:
        raise InvalidArgument(f"Unknown folder action: {action}")
    _reject_root(action, folder_path)
    folder = resolver.validate(folder_path)
    folder_display = resolver.display_path(folder, folder_path)

    if action == "create":
        try:
            folder.mkdir(exist_ok=True)
        except OSError as exc:
            raise IOFailure.from_os_error("create directory", exc) from exc
        logger.info("Created directory %s", folder_display)
        return f"Successfully created directory {folder_display}"

    _reject_alias_root(resolver, action, folder)

    if action == "delete":
        if not folder.is_dir():
            raise NotFound(f"Directory not found: {folder_path}")
        try:
            shutil.rmtree(folder)
        except OSError as exc:
            raise IOFailure.from_os_error("delete directory", exc) from exc
        logger.info("Deleted directory %s", folder_display)
        return f"Successfully deleted directory {folder_display}"

    if not new_folder_path:
        raise InvalidArgument("newFolderPath is required for rename action")
    _reject_root(action, new_folder_path)
    dest = resolver.validate(new_folder_path)
    try:
        os.rename(folder, dest)
    except OSError as exc:
        raise IOFailure.from_os_error("rename directory", exc) from exc
    dest_display = resolver.display_path(dest, new_folder_path)
    logger.info("Renamed directory %s -> %s", folder_display, dest_display)
    return f"Successfully renamed directory {folder_display} to {dest_display}"
