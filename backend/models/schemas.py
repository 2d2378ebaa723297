"""
Pydantic v2 request / response models for every endpoint.
"""

from __future__ import annotations
from typing import Literal, Optional
from pydantic import BaseModel, Field


# ── Calendar ──────────────────────────────────────────
class Attendee(BaseModel):
    email: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    response_status: Optional[Literal["accepted", "tentative", "declined", "needsAction"]] = None
    organizer: bool = False
    optional: bool = False


class CalendarEvent(BaseModel):
    id: str
    summary: str = ""
    description: Optional[str] = None
    location: Optional[str] = None
    start: str
    end: str
    all_day: bool = False
    attendees: list[Attendee] = Field(default_factory=list)
    hangout_link: Optional[str] = None
    conference_uri: Optional[str] = None
    visibility: Optional[str] = "default"
    link: Optional[str] = None


class EventsResponse(BaseModel):
    events: list[CalendarEvent] = Field(default_factory=list)


class EventCard(CalendarEvent):
    time_range: str
    duration_minutes: int
    join_url: Optional[str] = None


class DisplayedEvents(BaseModel):
    title: str
    events: list[EventCard] = Field(default_factory=list)


class GridDay(BaseModel):
    date: str
    day: int
    in_current_month: bool
    is_selected: bool
    is_today: bool
    in_selected_week: bool
    event_count: int
    preview: list[str] = Field(default_factory=list)
    more: int = 0


class MonthGrid(BaseModel):
    header: str
    weekdays: list[str]
    days: list[GridDay]


class MonthAnchor(BaseModel):
    date: str
    header: str


# ── Selection ─────────────────────────────────────────
class ContactDetails(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_photo_url: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = None


class ToggleAttendeeRequest(BaseModel):
    event_id: str = Field(..., min_length=1)
    attendee: Attendee


class ManualAttendeeRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Full name of the person")


class SelectedAttendee(BaseModel):
    key: str
    event_id: str
    event_summary: Optional[str] = None
    attendee: Attendee
    research_name: str
    details: Optional[ContactDetails] = None


class SessionOut(BaseModel):
    session_id: str
    attendees: list[SelectedAttendee] = Field(default_factory=list)
    job_id: Optional[str] = None


# ── Research ──────────────────────────────────────────
class StartResearchRequest(BaseModel):
    create_documents: bool = False


class SearchResult(BaseModel):
    title: str
    url: str
    published_date: Optional[str] = None
    author: Optional[str] = None
    summary: str = ""
    text: str = ""


class Source(BaseModel):
    title: str
    url: str


class SummarySegment(BaseModel):
    text: str
    url: Optional[str] = None
    title: Optional[str] = None


class PersonSummary(BaseModel):
    name: str
    summary: str = ""
    sources: list[Source] = Field(default_factory=list)
    segments: list[SummarySegment] = Field(default_factory=list)
    error: Optional[str] = None


class PersonResult(BaseModel):
    name: str
    search_results: list[SearchResult] = Field(default_factory=list)
    error: Optional[str] = None
    summary: Optional[PersonSummary] = None
    document_url: Optional[str] = None
    document_error: Optional[str] = None


class LoadingStateOut(BaseModel):
    stage: Literal["searching", "summarizing", "documenting"]
    person: Optional[str] = None
    progress: int
    total: int
    percent: float = 0.0


class ResearchJobOut(BaseModel):
    job_id: str
    status: Literal["running", "done", "error"]
    loading: Optional[LoadingStateOut] = None
    results: list[PersonResult] = Field(default_factory=list)
    error: Optional[str] = None


class CreateDocumentRequest(BaseModel):
    name: str = Field(..., min_length=1)


class DocumentOut(BaseModel):
    name: str
    url: str


# ── Health ────────────────────────────────────────────
class AuthStatus(BaseModel):
    signed_in: bool
    mode: Literal["mock", "live"]


class HealthResponse(BaseModel):
    status: str = "ok"
    mcp_server: str = "unknown"
    google: str = "unknown"
