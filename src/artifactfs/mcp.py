"""Stdio MCP server for artifactfs.

Exposes the artifact tools (see artifactfs.tools) over one in-memory
workspace. The workspace lives as long as the server process: files created
by the agent are gone when the process exits.

Protocol: JSON-RPC 2.0 over stdin/stdout (Model Context Protocol).
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, Any

from artifactfs.store import ArtifactStore
from artifactfs.tools import ArtifactTools, tool_defs
from artifactfs.workspace import ArtifactsWorkspace

if TYPE_CHECKING:
    from artifactfs.config import ArtifactsConfig

logger = logging.getLogger("artifactfs.mcp")

_VERSION = "0.1.0"
_PROTOCOL_VERSION = "2024-11-05"


class ArtifactsServer:
    def __init__(self, cfg: ArtifactsConfig | None = None, workspace: ArtifactsWorkspace | None = None) -> None:
        self.name = cfg.server.name if cfg else "artifactfs"
        if workspace is None:
            store = ArtifactStore(
                compression=cfg.archive.compression if cfg else "deflated",
                compresslevel=cfg.archive.compresslevel if cfg else None,
            )
            workspace = ArtifactsWorkspace(store)
        self.workspace = workspace
        self.tools = ArtifactTools(workspace)

    def call_tool(self, name: str, arguments: dict[str, Any]) -> tuple[str, bool]:
        """Run a tool; returns (JSON text, is_error)."""
        result = self.tools.call_tool(name, arguments)
        return json.dumps(result), "error" in result

    def handle(self, msg: dict[str, Any]) -> dict[str, Any] | None:
        """Answer one JSON-RPC message; None for notifications."""
        method = msg.get("method", "")
        msg_id = msg.get("id")

        if method == "initialize":
            return {
                "jsonrpc": "2.0",
                "id": msg_id,
                "result": {
                    "protocolVersion": _PROTOCOL_VERSION,
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": self.name, "version": _VERSION},
                    "instructions": self.tools.instructions(),
                },
            }

        if method == "notifications/initialized":
            return None

        if method == "tools/list":
            return {"jsonrpc": "2.0", "id": msg_id, "result": {"tools": tool_defs()}}

        if method == "tools/call":
            params = msg.get("params")
            if not isinstance(params, dict):
                params = {}
            name = params.get("name")
            arguments = params.get("arguments")
            text, is_error = self.call_tool(
                name if isinstance(name, str) else "",
                arguments if isinstance(arguments, dict) else {},
            )
            return {
                "jsonrpc": "2.0",
                "id": msg_id,
                "result": {
                    "content": [{"type": "text", "text": text}],
                    "isError": is_error,
                },
            }

        if msg_id is not None:
            return {
                "jsonrpc": "2.0",
                "id": msg_id,
                "error": {"code": -32601, "message": f"Method not found: {method}"},
            }
        return None


async def _run_server(cfg: ArtifactsConfig | None = None) -> None:
    server = ArtifactsServer(cfg)
    reader = asyncio.StreamReader()
    loop = asyncio.get_running_loop()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

    writer_transport, _writer_protocol = await loop.connect_write_pipe(
        asyncio.BaseProtocol, sys.stdout.buffer
    )

    def write_json(obj: Any) -> None:
        line = json.dumps(obj) + "\n"
        writer_transport.write(line.encode())

    logger.info("serving %s over stdio", server.name)
    while True:
        try:
            line = await reader.readline()
        except (asyncio.IncompleteReadError, EOFError):
            break
        if not line:
            break
        try:
            msg = json.loads(line)
        except json.JSONDecodeError:
            logger.warning("ignoring malformed message: %r", line[:200])
            continue
        if not isinstance(msg, dict):
            continue

        response = server.handle(msg)
        if response is not None:
            write_json(response)

    server.workspace.close()
    logger.info("stdin closed, %d files discarded", len(server.workspace.store))


def run_server(cfg: ArtifactsConfig | None = None) -> None:
    """Entry point for `afs serve`."""
    asyncio.run(_run_server(cfg))
