"""Agent-facing tools over an ArtifactsWorkspace.

Tools:
    create_file(path, content)          → {success, message, path}
    list_files(directory?)              → {success, files[{path,size,contentType}], count}
    delete_file(path)                   → {success, message, path}   (file or folder)
    move_file(fromPath, toPath)         → {success, message, fromPath, toPath}
    read_file(path)                     → {success, file{path,size,content,contentType}}
    current_path()                      → {success, currentPath}
    current_file()                      → {success, currentFile}

Every response is a dict with either ``success: True`` or ``error: str``,
never both and never neither.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from artifactfs.errors import AlreadyExistsError, InvalidPathError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable

    from artifactfs.store import ArtifactStore
    from artifactfs.workspace import ArtifactsWorkspace

logger = logging.getLogger("artifactfs.tools")


def tool_defs() -> list[dict[str, Any]]:
    return [
        {
            "name": "create_file",
            "description": "Create a new file in the virtual filesystem with the specified path and content.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": (
                            "The file path (e.g., /projects/test.go, /src/index.js). "
                            "Should start with / and include the full directory structure."
                        ),
                    },
                    "content": {"type": "string", "description": "The content of the file to create."},
                },
                "required": ["path", "content"],
            },
        },
        {
            "name": "list_files",
            "description": "List all files in the virtual filesystem, optionally filtered by directory path.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "directory": {
                        "type": "string",
                        "description": (
                            "Optional directory path to filter files (e.g., /src, /components). "
                            "If not provided, lists all files."
                        ),
                    },
                },
                "required": [],
            },
        },
        {
            "name": "delete_file",
            "description": (
                "Delete a file or folder from the virtual filesystem. "
                "When deleting a folder, all files within it will be deleted."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "The file or folder path to delete (e.g., /src/index.js or /src/components)",
                    },
                },
                "required": ["path"],
            },
        },
        {
            "name": "move_file",
            "description": "Move or rename a file or folder in the virtual filesystem.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "fromPath": {"type": "string", "description": "The current path (e.g., /src/old.js)"},
                    "toPath": {"type": "string", "description": "The new path (e.g., /src/new.js)"},
                },
                "required": ["fromPath", "toPath"],
            },
        },
        {
            "name": "read_file",
            "description": "Read the content of a specific file from the virtual filesystem.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "The file path to read (e.g., /src/index.js)"},
                },
                "required": ["path"],
            },
        },
        {
            "name": "current_path",
            "description": "Get the path of the currently active file in the artifacts drawer.",
            "inputSchema": {"type": "object", "properties": {}, "required": []},
        },
        {
            "name": "current_file",
            "description": "Get information about the currently active file in the artifacts drawer.",
            "inputSchema": {"type": "object", "properties": {}, "required": []},
        },
    ]


INSTRUCTIONS = """\
## Artifacts File System Instructions

You have access to a virtual file system through the artifacts tools. Use these tools to create, manage, and organize files for the user.

**IMPORTANT: Always prefer using the file system over showing code inline. Create files instead of displaying code blocks whenever possible.**

### Best Practices:
1. **File System First**: Always create files using create_file instead of showing code in chat
2. **File Paths**: Always use absolute paths starting with "/" (e.g., /src/index.js)
3. **Organization**: Create logical directory structures (e.g., /src, /components, /utils)
4. **File Types**: The system supports various file types including code files, text, JSON, XML, etc.
5. **Safety**: Use list_files before creating; create_file never overwrites an existing file
6. **Current Context**: Use current_file to understand what the user is currently viewing
7. **Read Before Edit**: Read an existing file before proposing changes to it

### Common Workflows:
- Create a new project: Start with create_file for main files like /index.html or /src/main.js
- Explore existing files: Use list_files to see the structure, then read_file for specific content
- Refactor: Use move_file to reorganize files or whole folders, delete_file to clean up
- Debugging: Use current_file to see what the user is currently focused on

The user can view and interact with these files through the artifacts drawer interface."""


def _error(message: str) -> dict[str, Any]:
    return {"error": message}


def _str_arg(args: dict[str, Any], name: str) -> str | None:
    value = args.get(name)
    return value if isinstance(value, str) else None


class ArtifactTools:
    """Dispatches named tool calls onto a workspace's store."""

    def __init__(self, workspace: ArtifactsWorkspace) -> None:
        self.workspace = workspace

    @property
    def store(self) -> ArtifactStore:
        return self.workspace.store

    def instructions(self) -> str:
        return INSTRUCTIONS

    def _call_create_file(self, args: dict[str, Any]) -> dict[str, Any]:
        path = _str_arg(args, "path")
        content = _str_arg(args, "content")
        logger.info("create_file %s", path)
        if not path or content is None:
            return _error("Path and content are required")
        if not path.startswith("/"):
            return _error("Path must start with /")
        try:
            self.store.create_file(path, content)
        except InvalidPathError as exc:
            return _error(str(exc))
        except AlreadyExistsError as exc:
            return _error(f"Cannot create {path}: {exc.reason}")
        return {"success": True, "message": f"File created: {path}", "path": path}

    def _call_list_files(self, args: dict[str, Any]) -> dict[str, Any]:
        directory = _str_arg(args, "directory") or None
        logger.info("list_files %s", directory or "/")
        records = sorted(self.store.list_files(directory), key=lambda r: r.path)
        files = [r.summary_dict() for r in records]
        return {"success": True, "files": files, "count": len(files)}

    def _call_delete_file(self, args: dict[str, Any]) -> dict[str, Any]:
        path = _str_arg(args, "path")
        logger.info("delete_file %s", path)
        if not path:
            return _error("Path is required")
        kind = self.store.kind_of(path)
        if kind is None:
            return _error(f"File or folder not found: {path}")
        try:
            deleted = self.store.delete_file(path)
        except InvalidPathError as exc:
            return _error(str(exc))
        if not deleted:
            return _error(f"Failed to delete: {path}")
        return {"success": True, "message": f"{kind} deleted: {path}", "path": path}

    def _call_move_file(self, args: dict[str, Any]) -> dict[str, Any]:
        from_path = _str_arg(args, "fromPath")
        to_path = _str_arg(args, "toPath")
        logger.info("move_file %s -> %s", from_path, to_path)
        if not from_path or not to_path:
            return _error("Both fromPath and toPath are required")
        if not to_path.startswith("/"):
            return _error("Destination path must start with /")
        if self.store.kind_of(from_path) is None:
            return _error(f"Source file not found: {from_path}")
        if self.store.is_file(to_path):
            return _error(f"Destination already exists: {to_path}")
        try:
            moved = self.store.rename_file(from_path, to_path)
        except InvalidPathError as exc:
            return _error(str(exc))
        if not moved:
            return _error(
                f"Failed to move file from {from_path} to {to_path}. "
                "Source may not exist or destination already exists."
            )
        return {
            "success": True,
            "message": f"File moved from {from_path} to {to_path}",
            "fromPath": from_path,
            "toPath": to_path,
        }

    def _file_info(self, path: str) -> dict[str, Any]:
        content = self.store.read_file(path)
        record = self.store.get_file(path)
        return {
            "path": path,
            "size": len(content),
            "content": content,
            "contentType": record.content_type.value if record else "text",
        }

    def _call_read_file(self, args: dict[str, Any]) -> dict[str, Any]:
        path = _str_arg(args, "path")
        logger.info("read_file %s", path)
        if not path:
            return _error("Path is required")
        try:
            return {"success": True, "file": self._file_info(path)}
        except NotFoundError:
            return _error(f"File not found: {path}")

    def _call_current_path(self, args: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        active = self.workspace.active_file
        if not active:
            return {"success": True, "message": "No file is currently active", "currentPath": None}
        return {"success": True, "currentPath": active}

    def _call_current_file(self, args: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        active = self.workspace.active_file
        if not active:
            return {"success": True, "message": "No file is currently active", "currentFile": None}
        try:
            return {"success": True, "currentFile": self._file_info(active)}
        except NotFoundError:
            return _error(f"Active file not found: {active}")

    def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        dispatch: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
            "create_file": self._call_create_file,
            "list_files": self._call_list_files,
            "delete_file": self._call_delete_file,
            "move_file": self._call_move_file,
            "read_file": self._call_read_file,
            "current_path": self._call_current_path,
            "current_file": self._call_current_file,
        }
        if name not in dispatch:
            return _error(f"Unknown tool: {name}")
        args = arguments if isinstance(arguments, dict) else {}
        try:
            return dispatch[name](args)
        except Exception as exc:
            logger.exception("tool %s failed", name)
            return _error(f"Failed to run {name}: {exc}")
