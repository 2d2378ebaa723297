"""
Tests for the typed workspace calls on the MCP client.
"""

import pytest

from backend.mcp_client.client import MCPWorkspaceClient, WorkspaceError
from backend.mcp_server import server
from conftest import FakeMCPClient


class _CannedClient(MCPWorkspaceClient):
    """Client whose transport replies with fixed text."""

    def __init__(self, text: str):
        super().__init__()
        self.text = text

    async def _invoke(self, tool_name, arguments):
        return self.text


@pytest.mark.unit
@pytest.mark.asyncio
class TestWorkspaceCalls:

    async def test_list_events(self):
        events = await FakeMCPClient().list_events(2)
        assert [e["id"] for e in events] == ["mock_1", "mock_2"]

    async def test_lookup_contact(self):
        details = await FakeMCPClient().lookup_contact("jane.doe@example.com")
        assert details["last_name"] == "Doe"

    async def test_lookup_without_details_is_none(self):
        assert await FakeMCPClient().lookup_contact("not-an-email") is None

    async def test_create_meeting_doc_returns_url(self):
        client = FakeMCPClient()

        url = await client.create_meeting_doc({"name": "Jane Doe", "summary": "Leads platform."})

        assert url.startswith("mock://documents/")
        assert client.calls == [(
            "create_meeting_doc",
            {"name": "Jane Doe", "summary": "Leads platform.", "sources": []},
        )]

    async def test_tool_error_raises(self, monkeypatch):
        class BrokenCalendar:
            def list_events(self, max_results):
                raise RuntimeError("Calendar API error: quota")

        monkeypatch.setitem(server._services, "calendar", BrokenCalendar())

        with pytest.raises(WorkspaceError, match="Calendar API error: quota"):
            await FakeMCPClient().list_events(10)

    async def test_unreachable_server_raises(self):
        with pytest.raises(WorkspaceError, match="MCP not available"):
            await FakeMCPClient(connected=False).lookup_contact("jane.doe@example.com")

    async def test_malformed_reply(self):
        with pytest.raises(WorkspaceError, match="Malformed reply"):
            await _CannedClient("<html>").list_events(5)

    async def test_events_must_be_a_list(self):
        with pytest.raises(WorkspaceError):
            await _CannedClient('{"events": []}').list_events(5)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_disconnected_client_has_no_tools():
    client = MCPWorkspaceClient()

    assert client.is_connected is False
    assert await client.list_tools() == []
    await client.disconnect()
