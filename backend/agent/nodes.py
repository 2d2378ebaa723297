from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from langchain_core.runnables import RunnableConfig

from backend.agent.state import LoadingState, ResearchState
from backend.agent.sub_agents import summarize_person
from backend.config import settings
from backend.mcp_client.client import MCPWorkspaceClient, WorkspaceError
from backend.services.search_service import PeopleSearchService
from backend.utils.logger import get_logger

log = get_logger("agent.nodes")

# references set at runtime by graph builder
_mcp_client: Optional[MCPWorkspaceClient] = None
_search_service: Optional[PeopleSearchService] = None


def set_mcp_client(client: MCPWorkspaceClient):
    global _mcp_client
    _mcp_client = client


def set_search_service(service: PeopleSearchService):
    global _search_service
    _search_service = service


def _get_search_service() -> PeopleSearchService:
    global _search_service
    if _search_service is None:
        _search_service = PeopleSearchService()
    return _search_service


# ── helpers ───────────────────────────────────────────

ProgressFn = Callable[[LoadingState], None]


def _progress_fn(config: Optional[RunnableConfig]) -> ProgressFn:
    configurable = (config or {}).get("configurable", {})
    return configurable.get("progress") or (lambda _state: None)


async def _run_stage(
    stage: str,
    items: list,
    name_of: Callable[[object], str],
    work: Callable[[object], Awaitable[object]],
    report: ProgressFn,
) -> list:
    """Process items one at a time, reporting progress before each one."""
    total = len(items)
    out = []
    for i, item in enumerate(items):
        report({"stage": stage, "person": name_of(item), "progress": i, "total": total})
        await asyncio.sleep(settings.STEP_DELAY)
        out.append(await work(item))

    if items:
        report({"stage": stage, "person": name_of(items[-1]), "progress": total, "total": total})
    await asyncio.sleep(settings.STAGE_DELAY)
    return out


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  NODE: search_attendees
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def search_attendees_node(state: ResearchState, config: RunnableConfig) -> dict:
    service = _get_search_service()
    results = await _run_stage(
        "searching",
        state["attendees"],
        lambda a: a["name"],
        lambda a: service.search_person(a["name"]),
        _progress_fn(config),
    )
    log.info("Search stage done: %d people", len(results))
    return {"results": results}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  NODE: summarize_results
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def summarize_results_node(state: ResearchState, config: RunnableConfig) -> dict:
    summaries = await _run_stage(
        "summarizing",
        state.get("results", []),
        lambda r: r["name"],
        summarize_person,
        _progress_fn(config),
    )
    failed = sum(1 for s in summaries if s.get("error"))
    log.info("Summary stage done: %d ok, %d failed", len(summaries) - failed, failed)
    return {"summaries": summaries}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  NODE: create_documents (calls MCP)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def create_document(summary: dict) -> str:
    """Create the notes doc for one summary via the MCP server and return its URL."""
    if _mcp_client is None or not _mcp_client.is_connected:
        raise WorkspaceError("Google Workspace service is not available")
    return await _mcp_client.create_meeting_doc(summary)


async def _document_or_error(summary: dict) -> tuple[Optional[str], Optional[str]]:
    try:
        return await create_document(summary), None
    except WorkspaceError as exc:
        log.error("❌ Notes for %s failed: %s", summary["name"], exc)
        return None, str(exc)


async def create_documents_node(state: ResearchState, config: RunnableConfig) -> dict:
    ready = [s for s in state.get("summaries", []) if not s.get("error")]
    outcomes = await _run_stage(
        "documenting",
        ready,
        lambda s: s["name"],
        _document_or_error,
        _progress_fn(config),
    )

    documents: dict[str, str] = {}
    errors: dict[str, str] = {}
    for summary, (url, error) in zip(ready, outcomes):
        if error:
            errors[summary["name"]] = error
        else:
            documents[summary["name"]] = url
    log.info("Documents created: %d, failed: %d", len(documents), len(errors))
    return {"documents": documents, "document_errors": errors}
