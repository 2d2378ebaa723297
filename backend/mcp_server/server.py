"""
MCP Server: Google Workspace tools (Calendar, People, Docs) over the MCP protocol.
Runs as a subprocess. Logs go to stderr, stdout carries the protocol.
"""

from __future__ import annotations

import json
import os

os.environ.setdefault("LOG_STREAM", "stderr")

from mcp.server.fastmcp import FastMCP

from backend.config import settings
from backend.services.calendar_service import CalendarService
from backend.services.contacts_service import ContactsService, details_from_email
from backend.services.docs_service import DocsService
from backend.utils.logger import get_logger

log = get_logger("mcp.server")

log.info("MCP Server Config: MOCK=%s, TZ=%s", settings.MOCK_GOOGLE, settings.DEFAULT_TIMEZONE)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  SERVICES (built lazily so a missing token doesn't kill the server)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_services: dict = {}


def _service(name: str):
    if name not in _services:
        factory = {"calendar": CalendarService, "contacts": ContactsService, "docs": DocsService}[name]
        _services[name] = factory()
    return _services[name]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  MCP SERVER + TOOLS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

mcp = FastMCP("precap Google Workspace Server")


@mcp.tool()
def list_events(max_results: int = 100) -> str:
    """
    List upcoming Google Calendar events.

    Args:
        max_results: Maximum number of events to return
    """
    try:
        events = _service("calendar").list_events(max_results=max_results)
        return json.dumps(events)
    except Exception as exc:
        log.exception("❌ list_events error")
        return json.dumps({"error": str(exc)})


@mcp.tool()
def lookup_contact(email: str) -> str:
    """
    Enhanced contact details for an attendee email.

    Args:
        email: Attendee email address
    """
    try:
        details = _service("contacts").lookup(email)
    except Exception as exc:
        log.warning("lookup_contact fell back to email parsing: %s", exc)
        details = details_from_email(email)
    return json.dumps(details or {})


@mcp.tool()
def create_meeting_doc(name: str, summary: str, sources: list[dict]) -> str:
    """
    Create a Google Doc with meeting notes for one person.

    Args:
        name: Person the notes are about
        summary: Professional summary text
        sources: List of {title, url} references
    """
    try:
        url = _service("docs").create_meeting_doc({
            "name": name,
            "summary": summary,
            "sources": sources,
        })
        log.info("✅ Meeting notes created: %s", url)
        return json.dumps({"url": url})
    except Exception as exc:
        log.exception("❌ create_meeting_doc error")
        return json.dumps({"error": str(exc)})


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  ENTRY POINT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

if __name__ == "__main__":
    log.info("🚀 MCP Workspace Server starting (stdio transport)")
    mcp.run(transport="stdio")
