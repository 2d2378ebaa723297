"""
Pytest configuration and fixtures.

Environment is pinned before any backend module is imported: Google runs in
mock mode, pipeline delays are zero and the log file is disabled.
"""

import os

os.environ["MOCK_GOOGLE"] = "true"
os.environ["STEP_DELAY"] = "0"
os.environ["STAGE_DELAY"] = "0"
os.environ["LOG_FILE"] = ""
os.environ["DEFAULT_TIMEZONE"] = "UTC"
os.environ["EXA_API_KEY"] = "test-exa-key"

import pytest
from typing import Any, Dict, List

from fastapi.testclient import TestClient

from backend.agent import sub_agents
from backend.agent.graph import build_research_graph
from backend.api import routes
from backend.mcp_client.client import MCPWorkspaceClient, WorkspaceError


class FakeMCPClient(MCPWorkspaceClient):
    """Real client whose transport runs the MCP server's tool functions in-process."""

    def __init__(self, connected: bool = True):
        super().__init__()
        self.calls: List[tuple] = []
        self._connected = connected

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def _invoke(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        from backend.mcp_server import server

        if not self._connected:
            raise WorkspaceError("MCP not available: server stopped")
        self.calls.append((tool_name, arguments))
        return getattr(server, tool_name)(**arguments)


def make_result(title: str, url: str, text: str) -> Dict[str, Any]:
    return {
        "title": title,
        "url": url,
        "published_date": "2025-03-01T00:00:00.000Z",
        "author": None,
        "summary": f"About {title}",
        "text": text,
    }


SEARCH_RESULTS = {
    "Jane Doe": [
        make_result("Jane Doe - Acme", "https://acme.example/jane", "Jane leads the platform team at Acme."),
        make_result("Initech alumni", "https://initech.example/alumni", "Jane Doe was a staff engineer at Initech."),
    ],
    "Alex Kim": [
        make_result("Alex Kim profile", "https://example.org/alex", "Alex Kim runs finance at Globex."),
    ],
}


class FakeSearchService:
    """Canned Exa answers; unknown names come back with an error."""

    def __init__(self):
        self.searched: List[str] = []

    async def search_person(self, name: str) -> Dict[str, Any]:
        self.searched.append(name)
        if name in SEARCH_RESULTS:
            return {"name": name, "search_results": SEARCH_RESULTS[name], "error": None}
        return {"name": name, "search_results": [], "error": "Exa API error: not found"}


@pytest.fixture
def fake_mcp() -> FakeMCPClient:
    return FakeMCPClient()


@pytest.fixture
def fake_search() -> FakeSearchService:
    return FakeSearchService()


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace the HuggingFace call with a deterministic summary."""
    prompts: List[list] = []

    def _fake(messages):
        prompts.append(messages)
        return "Jane leads platform at Acme [Source 1]. Before that she was at Initech [Source 2]."

    monkeypatch.setattr(sub_agents, "_call_llm", _fake)
    return prompts


@pytest.fixture
def research_graph(fake_mcp, fake_search):
    return build_research_graph(fake_mcp, fake_search)


@pytest.fixture
def client(research_graph, fake_mcp, fake_llm):
    """TestClient without lifespan, wired to fake dependencies."""
    from backend.main import app

    routes._sessions.clear()
    routes._jobs.clear()
    routes._events.clear()
    routes.inject_dependencies(research_graph, fake_mcp)
    yield TestClient(app)
    routes.inject_dependencies(None, None)
