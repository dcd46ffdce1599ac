"""Tool registry and specifications."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from aliasfs.core.paths import PathResolver
from aliasfs.core.policy import RiskLevel
from aliasfs.core.settings import Settings
from aliasfs.edits.patch import Edit
from aliasfs.tools.local import fs_ops
from aliasfs.tools.local.search import SearchPlanner, SearchRequest

ToolHandler = Callable[..., Awaitable[str]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_schema: dict[str, object]
    risk_level: RiskLevel
    timeout_ms: int
    caps: set[str] = field(default_factory=set)


class ToolRegistry:
    def __init__(self) -> None:
        self._specs: dict[str, ToolSpec] = {}
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, spec: ToolSpec, handler: ToolHandler) -> None:
        if spec.name in self._specs:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._specs[spec.name] = spec
        self._handlers[spec.name] = handler

    def get(self, name: str) -> ToolSpec:
        if name not in self._specs:
            raise KeyError(f"Tool not registered: {name}")
        return self._specs[name]

    def handler(self, name: str) -> ToolHandler:
        if name not in self._handlers:
            raise KeyError(f"Handler not registered: {name}")
        return self._handlers[name]

    def list_specs(self) -> list[ToolSpec]:
        return list(self._specs.values())


WRITE_FILE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "filePath": {"type": "string"},
        "content": {"type": "string"},
    },
    "required": ["filePath", "content"],
    "additionalProperties": False,
}

READ_FILE_CONTENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"filePath": {"type": "string"}},
    "required": ["filePath"],
    "additionalProperties": False,
}

EDIT_FILE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "filePath": {"type": "string"},
        "edits": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "oldText": {"type": "string"},
                    "newText": {"type": "string"},
                },
                "required": ["oldText", "newText"],
                "additionalProperties": False,
            },
        },
        "dryRun": {"type": "boolean", "default": False},
    },
    "required": ["filePath", "edits"],
    "additionalProperties": False,
}

MANAGE_FILE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "action": {"type": "string", "enum": list(fs_ops.FILE_ACTIONS)},
        "filePath": {"type": "string"},
        "newFilePath": {"type": "string"},
    },
    "required": ["action", "filePath"],
    "additionalProperties": False,
    "if": {"properties": {"action": {"enum": ["move", "rename", "copy"]}}},
    "then": {"required": ["newFilePath"]},
}

MANAGE_FOLDER_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "action": {"type": "string", "enum": list(fs_ops.FOLDER_ACTIONS)},
        "folderPath": {"type": "string"},
        "newFolderPath": {"type": "string"},
    },
    "required": ["action", "folderPath"],
    "additionalProperties": False,
    "if": {"properties": {"action": {"const": "rename"}}},
    "then": {"required": ["newFolderPath"]},
}

SEARCH_FILES_AND_FOLDERS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "pattern": {"type": "string"},
        "includeMetadata": {"type": "boolean", "default": False},
        "ignore": {"type": "array", "items": {"type": "string"}},
        "cwd": {"type": "string"},
    },
    "required": ["pattern"],
    "additionalProperties": False,
}


def register_local_tools(
    registry: ToolRegistry, resolver: PathResolver, settings: Settings
) -> None:
    planner = SearchPlanner(resolver, default_ignore=settings.search_ignore)
    timeout_ms = settings.tool_timeout_ms

    async def write_file(filePath: str, content: str) -> str:
        return await asyncio.to_thread(fs_ops.write_file, resolver, filePath, content)

    async def read_file_content(filePath: str) -> str:
        return await asyncio.to_thread(fs_ops.read_file_content, resolver, filePath)

    async def edit_file(
        filePath: str, edits: list[dict[str, str]], dryRun: bool = False
    ) -> str:
        parsed = [Edit.from_dict(edit) for edit in edits]
        return await asyncio.to_thread(
            fs_ops.edit_file, resolver, filePath, parsed, dryRun
        )

    async def manage_file(
        action: str, filePath: str, newFilePath: str | None = None
    ) -> str:
        return await asyncio.to_thread(
            fs_ops.manage_file, resolver, action, filePath, newFilePath
        )

    async def manage_folder(
        action: str, folderPath: str, newFolderPath: str | None = None
    ) -> str:
        return await asyncio.to_thread(
            fs_ops.manage_folder, resolver, action, folderPath, newFolderPath
        )

    async def search_files_and_folders(
        pattern: str,
        includeMetadata: bool = False,
        ignore: list[str] | None = None,
        cwd: str | None = None,
    ) -> str:
        request = SearchRequest(
            pattern=pattern,
            ignore=tuple(ignore) if ignore is not None else None,
            cwd=cwd,
            include_metadata=includeMetadata,
        )
        results = await asyncio.to_thread(planner.search, request)
        return json.dumps(results, indent=2)

    registry.register(
        ToolSpec(
            name="writeFile",
            description=(
                "Create or update a file at the specified path with the given "
                "content."
            ),
            args_schema=WRITE_FILE_SCHEMA,
            risk_level=RiskLevel.MUTATING,
            timeout_ms=timeout_ms,
            caps={"fs_write"},
        ),
        write_file,
    )
    registry.register(
        ToolSpec(
            name="readFileContent",
            description="Retrieve the content of a specified file.",
            args_schema=READ_FILE_CONTENT_SCHEMA,
            risk_level=RiskLevel.READ,
            timeout_ms=timeout_ms,
            caps={"fs_read"},
        ),
        read_file_content,
    )
    registry.register(
        ToolSpec(
            name="editFile",
            description=(
                "Make targeted changes to specific text portions within a file "
                "without rewriting the entire content."
            ),
            args_schema=EDIT_FILE_SCHEMA,
            risk_level=RiskLevel.MUTATING,
            timeout_ms=timeout_ms,
            caps={"fs_write"},
        ),
        edit_file,
    )
    registry.register(
        ToolSpec(
            name="manageFile",
            description="Perform actions like move, rename, copy, or delete a file.",
            args_schema=MANAGE_FILE_SCHEMA,
            risk_level=RiskLevel.MUTATING,
            timeout_ms=timeout_ms,
            caps={"fs_write"},
        ),
        manage_file,
    )
    registry.register(
        ToolSpec(
            name="manageFolder",
            description="Perform actions like create, rename, or delete a folder.",
            args_schema=MANAGE_FOLDER_SCHEMA,
            risk_level=RiskLevel.MUTATING,
            timeout_ms=timeout_ms,
            caps={"fs_write"},
        ),
        manage_folder,
    )
    registry.register(
        ToolSpec(
            name="searchFilesAndFolders",
            description=(
                "Search for matching files and folders using glob patterns. "
                "Results always include path and type fields. For simple "
                "directory listing, use pattern '*'. Only set includeMetadata to "
                "true when file size or timestamps are needed - this adds size, "
                "created, and modified fields."
            ),
            args_schema=SEARCH_FILES_AND_FOLDERS_SCHEMA,
            risk_level=RiskLevel.READ,
            timeout_ms=timeout_ms,
            caps={"fs_read"},
        ),
        search_files_and_folders,
    )

