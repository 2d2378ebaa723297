from __future__ import annotations

import asyncio
import uuid
from datetime import date
from typing import Dict, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query

from backend.agent.nodes import create_document
from backend.agent.state import LoadingState
from backend.agent.sub_agents import link_source_tags
from backend.config import settings
from backend.mcp_client.client import WorkspaceError
from backend.models.schemas import (
    AuthStatus,
    CreateDocumentRequest,
    DisplayedEvents,
    DocumentOut,
    EventsResponse,
    HealthResponse,
    ManualAttendeeRequest,
    MonthAnchor,
    MonthGrid,
    ResearchJobOut,
    SessionOut,
    StartResearchRequest,
    ToggleAttendeeRequest,
)
from backend.services import calendar_view
from backend.services.contacts_service import details_from_email
from backend.services.google_auth import auth_status
from backend.services.selection import AttendeeSelection
from backend.utils.logger import get_logger

log = get_logger("api.routes")

router = APIRouter(prefix="/api", tags=["precap"])

# ── in-memory state ───────────────────────────────────
_sessions: Dict[str, AttendeeSelection] = {}
_jobs: Dict[str, dict] = {}
_events: list[dict] = []

# these are injected at startup from main.py
_research_graph = None
_mcp_client = None


def inject_dependencies(research_graph, mcp_client):
    global _research_graph, _mcp_client
    _research_graph = research_graph
    _mcp_client = mcp_client


def _get_or_create_session(session_id: str) -> AttendeeSelection:
    if session_id not in _sessions:
        _sessions[session_id] = AttendeeSelection()
    return _sessions[session_id]


def _get_session(session_id: str) -> AttendeeSelection:
    if session_id not in _sessions:
        raise HTTPException(status_code=404, detail="Session not found")
    return _sessions[session_id]


def _get_job(job_id: str) -> dict:
    if job_id not in _jobs:
        raise HTTPException(status_code=404, detail="Research job not found")
    return _jobs[job_id]


def _mcp_ready() -> bool:
    return _mcp_client is not None and _mcp_client.is_connected


# ── calendar helpers ──────────────────────────────────

async def _fetch_events(refresh: bool = False) -> list[dict]:
    global _events
    if _events and not refresh:
        return _events

    if not _mcp_ready():
        raise HTTPException(status_code=503, detail="Calendar service unavailable")

    try:
        _events = await _mcp_client.list_events(settings.MAX_EVENTS)
    except WorkspaceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    log.info("Loaded %d events", len(_events))
    return _events


def _event_summary(event_id: str) -> Optional[str]:
    for e in _events:
        if e["id"] == event_id:
            return e.get("summary")
    return None


async def _lookup_contact(email: str) -> Optional[dict]:
    if _mcp_ready():
        try:
            details = await _mcp_client.lookup_contact(email)
            if details:
                return details
        except WorkspaceError as exc:
            log.warning("lookup_contact unavailable for %s: %s", email, exc)
    return details_from_email(email)


def _session_out(session_id: str, sel: AttendeeSelection) -> SessionOut:
    attendees = []
    for key, s in sel.selected.items():
        attendee = s["attendee"]
        attendees.append({
            "key": key,
            "event_id": s["event_id"],
            "event_summary": _event_summary(s["event_id"]),
            "attendee": attendee,
            "research_name": sel.resolve_name(attendee),
            "details": sel.enhanced.get(attendee["email"]),
        })
    return SessionOut(session_id=session_id, attendees=attendees, job_id=sel.job_id)


# ── research job helpers ──────────────────────────────

def _progress_reporter(job: dict):
    def report(state: LoadingState) -> None:
        target = state["progress"] / state["total"] * 100 if state["total"] else 0.0
        # the bar never moves backwards while the job runs
        job["percent"] = max(job["percent"], target)
        job["loading"] = {**state, "percent": job["percent"]}
    return report


async def _run_research(job_id: str, attendees: list[dict], create_documents: bool) -> None:
    job = _jobs[job_id]
    log.info("Research job %s started for %d attendees", job_id, len(attendees))
    try:
        async for update in _research_graph.astream(
            {"attendees": attendees, "create_documents": create_documents},
            config={"configurable": {"progress": _progress_reporter(job)}},
            stream_mode="updates",
        ):
            for values in update.values():
                job.update(values or {})
        job["status"] = "done"
        log.info("Research job %s finished", job_id)
    except Exception as exc:
        log.exception("Research job %s failed", job_id)
        job["status"] = "error"
        job["error"] = str(exc)
    finally:
        await asyncio.sleep(settings.STAGE_DELAY)
        job["loading"] = None
        job["percent"] = 0.0


def _find_summary(job: dict, name: str) -> Optional[dict]:
    return next((s for s in job.get("summaries", []) if s["name"] == name), None)


def _job_out(job: dict) -> ResearchJobOut:
    results = []
    for person in job.get("results", []):
        name = person["name"]
        summary = _find_summary(job, name)
        if summary is not None:
            summary = {
                **summary,
                "segments": link_source_tags(summary["summary"], summary.get("sources") or []),
            }
        results.append({
            **person,
            "summary": summary,
            "document_url": job["documents"].get(name),
            "document_error": job["document_errors"].get(name),
        })
    return ResearchJobOut(
        job_id=job["job_id"],
        status=job["status"],
        loading=job["loading"],
        results=results,
        error=job.get("error"),
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Calendar
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/events", response_model=EventsResponse)
async def list_events(refresh: bool = False):
    """List upcoming calendar events via MCP."""
    return EventsResponse(events=await _fetch_events(refresh=refresh))


@router.get("/calendar/grid", response_model=MonthGrid)
async def calendar_grid(
    day: date = Query(..., alias="date"),
    week: Optional[date] = None,
):
    """Month grid around the selected date, optionally highlighting a week."""
    events = await _fetch_events()
    return calendar_view.month_grid(events, day, selected_week=week)


@router.get("/calendar/events", response_model=DisplayedEvents)
async def calendar_events(
    day: date = Query(..., alias="date"),
    view: Literal["day", "week"] = "day",
):
    """Events for the selected day or its week, sorted by start time."""
    events = await _fetch_events()
    return calendar_view.displayed_events(events, day, view)


@router.get("/calendar/month", response_model=MonthAnchor)
async def change_month(day: date = Query(..., alias="date"), delta: int = 1):
    shifted = calendar_view.shift_month(day, delta)
    return MonthAnchor(date=shifted.isoformat(), header=calendar_view.month_header(shifted))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Attendee selection
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/session/{session_id}", response_model=SessionOut)
async def get_session(session_id: str):
    """Retrieve the selected attendees."""
    return _session_out(session_id, _get_session(session_id))


@router.post("/session/{session_id}/attendees/toggle", response_model=SessionOut)
async def toggle_attendee(session_id: str, req: ToggleAttendeeRequest):
    """Select or deselect a meeting attendee; selecting fetches contact details."""
    sel = _get_or_create_session(session_id)
    attendee = req.attendee.model_dump()
    if sel.toggle(req.event_id, attendee):
        sel.remember(attendee["email"], await _lookup_contact(attendee["email"]))
    log.info("Session %s: %d attendees selected", session_id, len(sel))
    return _session_out(session_id, sel)


@router.post("/session/{session_id}/attendees/manual", response_model=SessionOut)
async def add_manual_attendee(session_id: str, req: ManualAttendeeRequest):
    """Add an attendee by name only."""
    sel = _get_or_create_session(session_id)
    try:
        sel.add_manual(req.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _session_out(session_id, sel)


@router.delete("/session/{session_id}/attendees", response_model=SessionOut)
async def clear_attendees(session_id: str):
    """Clear all selected attendees and hide results."""
    sel = _get_session(session_id)
    sel.clear()
    return _session_out(session_id, sel)


@router.delete("/session/{session_id}")
async def delete_session(session_id: str):
    _sessions.pop(session_id, None)
    log.info("Session %s cleared", session_id)
    return {"message": "Session cleared"}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Research
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/session/{session_id}/research", response_model=ResearchJobOut, status_code=202)
async def start_research(
    session_id: str,
    background_tasks: BackgroundTasks,
    req: Optional[StartResearchRequest] = None,
):
    """Search, summarize (and optionally document) every selected attendee."""
    if _research_graph is None:
        raise HTTPException(status_code=503, detail="Research pipeline not initialised yet")

    sel = _get_session(session_id)
    attendees = sel.research_attendees()
    if not attendees:
        raise HTTPException(status_code=400, detail="No attendees selected")

    job_id = uuid.uuid4().hex
    _jobs[job_id] = {
        "job_id": job_id,
        "status": "running",
        "loading": {"stage": "searching", "person": attendees[0]["name"],
                    "progress": 0, "total": len(attendees), "percent": 0.0},
        "percent": 0.0,
        "results": [],
        "summaries": [],
        "documents": {},
        "document_errors": {},
        "error": None,
    }
    sel.job_id = job_id

    create_documents = req.create_documents if req else False
    background_tasks.add_task(_run_research, job_id, attendees, create_documents)
    return _job_out(_jobs[job_id])


@router.get("/research/{job_id}", response_model=ResearchJobOut)
async def get_research(job_id: str):
    """Poll a research job for progress and results."""
    return _job_out(_get_job(job_id))


@router.post("/research/{job_id}/documents", response_model=DocumentOut)
async def create_notes(job_id: str, req: CreateDocumentRequest):
    """Create (or return the existing) meeting-notes document for one person."""
    job = _get_job(job_id)
    if req.name in job["documents"]:
        return DocumentOut(name=req.name, url=job["documents"][req.name])

    summary = _find_summary(job, req.name)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"No summary for {req.name}")
    if summary.get("error"):
        raise HTTPException(status_code=409, detail=f"Summary failed: {summary['error']}")

    try:
        url = await create_document(summary)
    except WorkspaceError as exc:
        job["document_errors"][req.name] = str(exc)
        raise HTTPException(status_code=502, detail=str(exc))

    job["documents"][req.name] = url
    job["document_errors"].pop(req.name, None)
    return DocumentOut(name=req.name, url=url)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Status
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/auth/status", response_model=AuthStatus)
async def get_auth_status():
    return auth_status()


@router.get("/health", response_model=HealthResponse)
async def health():
    mcp_status = "connected" if _mcp_ready() else "disconnected"
    google = "mock" if settings.MOCK_GOOGLE else "live"
    return HealthResponse(status="ok", mcp_server=mcp_status, google=google)
