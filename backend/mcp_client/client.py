"""
Stdio client for the Google Workspace MCP server.

Callers use the typed workspace calls (``list_events``, ``lookup_contact``,
``create_meeting_doc``). Every failure, whether the server is unreachable or
a tool answered ``{"error": ...}``, surfaces as ``WorkspaceError``.
"""

from __future__ import annotations

import json
import os
import sys
from contextlib import AsyncExitStack
from typing import Any, Optional

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from backend.config import settings
from backend.utils.logger import get_logger

log = get_logger("mcp.client")


class WorkspaceError(RuntimeError):
    """A workspace tool failed or the MCP server could not be reached."""


def _server_params() -> StdioServerParameters:
    # the server reuses this interpreter; its logs must stay off stdout
    return StdioServerParameters(
        command=sys.executable,
        args=["-m", settings.MCP_SERVER_MODULE],
        env={**os.environ, "PYTHONPATH": str(settings.BASE_DIR), "LOG_STREAM": "stderr"},
    )


class MCPWorkspaceClient:

    def __init__(self):
        self._session: Optional[ClientSession] = None
        self._stack: Optional[AsyncExitStack] = None

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    # ── lifecycle ─────────────────────────────────────
    async def connect(self) -> None:
        if self.is_connected:
            return

        stack = AsyncExitStack()
        try:
            log.info("Starting MCP server: %s -m %s", sys.executable, settings.MCP_SERVER_MODULE)
            read_stream, write_stream = await stack.enter_async_context(stdio_client(_server_params()))
            session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
            await session.initialize()
        except Exception:
            await stack.aclose()
            raise

        self._stack, self._session = stack, session
        log.info("MCP connected, tools: %s", await self.list_tools())

    async def disconnect(self) -> None:
        stack, self._stack, self._session = self._stack, None, None
        if stack is None:
            return
        try:
            await stack.aclose()
        except Exception as exc:
            log.warning("Error during MCP disconnect: %s", exc)
        log.info("MCP client disconnected")

    async def list_tools(self) -> list[str]:
        if self._session is None:
            return []
        tools = await self._session.list_tools()
        return [t.name for t in tools.tools]

    # ── raw tool calls ────────────────────────────────
    async def _invoke(self, tool_name: str, arguments: dict[str, Any]) -> str:
        """Run a tool and return its text payload, reconnecting once if the session broke."""
        failure: Optional[Exception] = None
        for attempt in (1, 2):
            try:
                await self.connect()
                result = await self._session.call_tool(tool_name, arguments=arguments)
                return result.content[0].text if result.content else "{}"
            except Exception as exc:
                log.warning("MCP call '%s' attempt %d failed: %s", tool_name, attempt, exc)
                failure = exc
                await self.disconnect()
        raise WorkspaceError(f"MCP not available: {failure}") from failure

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        log.info("Calling MCP tool '%s' with args %s", tool_name, list(arguments))
        text = await self._invoke(tool_name, arguments)
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise WorkspaceError(f"Malformed reply from '{tool_name}': {text[:200]}") from exc
        if isinstance(payload, dict) and "error" in payload:
            raise WorkspaceError(payload["error"])
        log.debug("MCP tool '%s' returned: %s", tool_name, str(payload)[:300])
        return payload

    # ── workspace calls ───────────────────────────────
    async def list_events(self, max_results: int) -> list[dict]:
        events = await self.call_tool("list_events", {"max_results": max_results})
        if not isinstance(events, list):
            raise WorkspaceError("list_events did not return a list of events")
        return events

    async def lookup_contact(self, email: str) -> Optional[dict]:
        """Contact details for ``email``, or None when nothing can be derived."""
        return await self.call_tool("lookup_contact", {"email": email}) or None

    async def create_meeting_doc(self, summary: dict) -> str:
        """Write the meeting-notes doc for one person summary and return its URL."""
        created = await self.call_tool("create_meeting_doc", {
            "name": summary["name"],
            "summary": summary["summary"],
            "sources": summary.get("sources") or [],
        })
        if not isinstance(created, dict) or not created.get("url"):
            raise WorkspaceError("create_meeting_doc returned no document URL")
        return created["url"]
