from __future__ import annotations

from langgraph.graph import StateGraph, END

from backend.agent.state import ResearchState
from backend.agent.nodes import (
    search_attendees_node,
    summarize_results_node,
    create_documents_node,
    set_mcp_client,
    set_search_service,
)
from backend.utils.logger import get_logger

log = get_logger("agent.graph")


# ── routing functions ─────────────────────────────────

def _route_after_summarize(state: ResearchState) -> str:
    return "create_documents" if state.get("create_documents") else "end"


# ── graph builder ─────────────────────────────────────

def build_research_graph(mcp_client=None, search_service=None):
    """Build and compile the research pipeline: search -> summarize -> documents."""

    if mcp_client is not None:
        set_mcp_client(mcp_client)
    if search_service is not None:
        set_search_service(search_service)

    graph = StateGraph(ResearchState)

    # add nodes
    graph.add_node("search_attendees", search_attendees_node)
    graph.add_node("summarize_results", summarize_results_node)
    graph.add_node("create_documents", create_documents_node)

    # entry
    graph.set_entry_point("search_attendees")

    # edges
    graph.add_edge("search_attendees", "summarize_results")
    graph.add_conditional_edges("summarize_results", _route_after_summarize, {
        "create_documents": "create_documents",
        "end": END,
    })
    graph.add_edge("create_documents", END)

    compiled = graph.compile()
    log.info("Research graph compiled successfully")
    return compiled
